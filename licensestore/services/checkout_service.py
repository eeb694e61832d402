# ==============================================================================
# CHECKOUT SERVICE - External Gateway Payments
# ==============================================================================
# Opens gateway sessions for new orders and turns gateway confirmations
# (webhook delivery or a verify poll) into order completion
# ==============================================================================

from __future__ import annotations

import logging
from typing import Optional, Sequence

from licensestore.core.constants import ErrorMessages
from licensestore.core.exceptions import (
    BadRequestError,
    NotFoundError,
    ServiceUnavailableError,
)
from licensestore.database.adapters.base_adapter import BaseDatabaseAdapter
from licensestore.domain_models.order import Order, OrderStatus, PaymentMethod
from licensestore.schemas.checkout import (
    CheckoutSessionResponse,
    PaymentWebhookEvent,
    VerifyPaymentResponse,
    WebhookAck,
)
from licensestore.schemas.order import OrderResponse
from licensestore.services.base_service import BaseService
from licensestore.services.completion_service import OrderCompletionService
from licensestore.services.gateway import (
    PaymentGateway,
    PaymentGatewayError,
    create_payment_gateway,
)
from licensestore.services.order_service import CartItem, OrderService

logger = logging.getLogger(__name__)


class CheckoutService(BaseService):
    """
    Gateway checkout and payment confirmation.

    Both confirmation paths end in ``OrderCompletionService.complete_order``,
    so a webhook racing a verify poll still completes the order once.
    """

    def __init__(
        self,
        adapter: Optional[BaseDatabaseAdapter] = None,
        order_service: Optional[OrderService] = None,
        completion_service: Optional[OrderCompletionService] = None,
        gateway: Optional[PaymentGateway] = None,
    ) -> None:
        super().__init__(adapter)
        self._orders = order_service or OrderService(adapter)
        self._completion = completion_service or OrderCompletionService(adapter)
        self._gateway = gateway or create_payment_gateway()

    @property
    def gateway(self) -> PaymentGateway:
        return self._gateway

    # ==========================================================================
    # SESSION CREATION
    # ==========================================================================

    async def create_checkout_session(
        self,
        user_id: str,
        items: Sequence[CartItem],
        promo_code: Optional[str] = None,
    ) -> CheckoutSessionResponse:
        """
        Create an EXTERNAL order and open a gateway session for it.

        If the gateway call fails the PENDING order stays behind; it can be
        cancelled or left to expire.

        Raises:
            ServiceUnavailableError: The gateway could not create a session
        """
        order = await self._orders.create_order(
            user_id,
            items,
            PaymentMethod.EXTERNAL,
            promo_code,
        )

        try:
            session = await self._gateway.create_session(
                order.total,
                {"order_id": order.id, "user_id": user_id},
            )
        except PaymentGatewayError as e:
            logger.error(f"Gateway session creation failed for order {order.id}: {e}")
            raise ServiceUnavailableError(
                ErrorMessages.GATEWAY_UNAVAILABLE.format(error=e),
                service_name="payment_gateway",
            )

        async with self.unit_of_work() as uow:
            await uow.orders.set_payment_ref(order.id, session.session_id)

        logger.info(f"Checkout session {session.session_id} opened for order {order.id}")
        return CheckoutSessionResponse(
            order_id=order.id,
            session_id=session.session_id,
            url=session.url,
            total=order.total,
        )

    # ==========================================================================
    # CONFIRMATION
    # ==========================================================================

    async def confirm_payment(
        self,
        event_id: str,
        session_id: Optional[str] = None,
        order_id: Optional[str] = None,
        paid: bool = True,
        event_type: Optional[str] = None,
    ) -> Optional[OrderResponse]:
        """
        Handle one gateway event.

        The event id is recorded in the same transaction as the completion,
        so a redelivered event is a no-op and a failed completion lets the
        gateway retry.

        Returns:
            The order after handling, or None for an already processed event

        Raises:
            BadRequestError: Neither ``session_id`` nor ``order_id`` given, or
                the order is not an EXTERNAL order with that gateway session
            NotFoundError: No order matches the reference
        """
        if not session_id and not order_id:
            raise BadRequestError(ErrorMessages.NO_PAYMENT_REFERENCE)

        async with self.unit_of_work() as uow:
            if not await uow.webhook_events.try_record(event_id, event_type, order_id):
                logger.info(f"Duplicate gateway event {event_id} ignored")
                return None

            if order_id:
                order = await uow.orders.get_with_items(order_id)
            else:
                order = await uow.orders.get_by_payment_ref(session_id)
            if order is None:
                raise NotFoundError(
                    ErrorMessages.ORDER_NOT_FOUND,
                    resource_type="order",
                    resource_id=order_id or session_id,
                )

            self._check_gateway_order(order, session_id, event_id)

            if not paid:
                logger.info(f"Gateway event {event_id} for order {order.id} is not a payment")
                return OrderResponse.model_validate(await uow.orders.get_with_items(order.id))

            return await self._completion.complete_order(order.id, uow=uow)

    @staticmethod
    def _check_gateway_order(order: Order, session_id: Optional[str], event_id: str) -> None:
        """
        Only EXTERNAL orders with an open gateway session can be confirmed,
        and a session id on the event must be that order's session.

        Raises:
            BadRequestError: The event does not belong to a gateway checkout
        """
        if order.payment_method != PaymentMethod.EXTERNAL:
            logger.warning(
                f"Gateway event {event_id} names {order.payment_method} order {order.id}"
            )
            raise BadRequestError(ErrorMessages.ORDER_NOT_EXTERNAL)
        if not order.payment_ref:
            logger.warning(f"Gateway event {event_id} for order {order.id} without a session")
            raise BadRequestError(ErrorMessages.NO_PAYMENT_REFERENCE)
        if session_id and session_id != order.payment_ref:
            logger.warning(
                f"Gateway event {event_id} session {session_id} does not match order {order.id}"
            )
            raise BadRequestError(ErrorMessages.PAYMENT_REFERENCE_MISMATCH)

    async def handle_webhook(self, event: PaymentWebhookEvent) -> WebhookAck:
        """Confirm a verified webhook payload and build the acknowledgement."""
        order = await self.confirm_payment(
            event.event_id,
            session_id=event.session_id,
            order_id=event.order_id or event.metadata.get("order_id"),
            paid=event.paid,
            event_type=event.type,
        )
        if order is None:
            return WebhookAck(received=True, duplicate=True)
        return WebhookAck(received=True, order_status=order.status)

    async def verify_payment(
        self,
        order_id: str,
        user_id: Optional[str] = None,
    ) -> VerifyPaymentResponse:
        """
        Ask the gateway whether an order has been paid and complete it if so.

        Raises:
            NotFoundError: Unknown order
            BadRequestError: Not the owner, or no gateway session on the order
            ServiceUnavailableError: The gateway could not be reached
        """
        order = await self._orders.get_order(order_id, user_id)

        if order.status == OrderStatus.COMPLETED:
            return VerifyPaymentResponse(status="completed", order_id=order_id, order=order)
        if order.status in (OrderStatus.CANCELLED, OrderStatus.REFUNDED):
            return VerifyPaymentResponse(status="cancelled", order_id=order_id, order=order)
        if not order.payment_ref:
            raise BadRequestError(ErrorMessages.NO_PAYMENT_REFERENCE)

        try:
            status = await self._gateway.retrieve_session(order.payment_ref)
        except PaymentGatewayError as e:
            logger.error(f"Gateway lookup failed for order {order_id}: {e}")
            raise ServiceUnavailableError(
                ErrorMessages.GATEWAY_UNAVAILABLE.format(error=e),
                service_name="payment_gateway",
            )

        if not status.paid:
            return VerifyPaymentResponse(status="pending", order_id=order_id, order=order)

        completed = await self._completion.complete_order(order_id)
        return VerifyPaymentResponse(
            status="completed" if completed.status == OrderStatus.COMPLETED else "pending",
            order_id=order_id,
            order=completed,
        )
