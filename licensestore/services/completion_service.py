# ==============================================================================
# COMPLETION SERVICE - Exactly-Once Order Completion
# ==============================================================================
# Every completion trigger (webhook, verify poll, balance payment, admin)
# funnels into complete_order; a guarded status flip picks the single winner
# ==============================================================================

from __future__ import annotations

import logging
from typing import List, Optional

from licensestore.core.constants import ErrorMessages, NotificationText
from licensestore.core.exceptions import InsufficientStockError, NotFoundError
from licensestore.database.adapters.base_adapter import BaseDatabaseAdapter
from licensestore.database.unit_of_work.uow import UnitOfWork
from licensestore.domain_models.license import License
from licensestore.domain_models.notification import NotificationType
from licensestore.domain_models.order import OPEN_ORDER_STATUSES, Order, OrderStatus
from licensestore.domain_models.transaction import TransactionType
from licensestore.schemas.license import LicenseResponse
from licensestore.schemas.order import OrderResponse
from licensestore.schemas.user import UserSnapshot
from licensestore.services.base_service import BaseService
from licensestore.services.license_service import LicenseService
from licensestore.services.notification_service import (
    LoggingNotificationSink,
    NotificationSink,
    PostCommitDispatcher,
)
from licensestore.services.promo_service import PromoCodeService
from licensestore.utils.helpers import utc_now

logger = logging.getLogger(__name__)


def points_for(order: Order) -> int:
    """Reward points earned by an order: quantity times per-unit points."""
    return sum(
        item.quantity * item.product.reward_points
        for item in order.items
        if item.product.reward_points and item.product.reward_points > 0
    )


class OrderCompletionService(BaseService):
    """
    Order completion engine.

    ``complete_order`` either performs the full completion (status,
    promo redemption, points, stock, licenses, notifications) or, when
    another trigger already won, returns the persisted order untouched.
    All of it commits or rolls back together.
    """

    def __init__(
        self,
        adapter: Optional[BaseDatabaseAdapter] = None,
        license_service: Optional[LicenseService] = None,
        promo_service: Optional[PromoCodeService] = None,
        sink: Optional[NotificationSink] = None,
        dispatcher: Optional[PostCommitDispatcher] = None,
    ) -> None:
        super().__init__(adapter)
        self._licenses = license_service or LicenseService()
        self._promos = promo_service or PromoCodeService(adapter)
        self._sink = sink or LoggingNotificationSink()
        self._dispatcher = dispatcher or PostCommitDispatcher()

    @property
    def dispatcher(self) -> PostCommitDispatcher:
        return self._dispatcher

    async def complete_order(
        self,
        order_id: str,
        uow: Optional[UnitOfWork] = None,
    ) -> OrderResponse:
        """
        Complete an order exactly once.

        Args:
            order_id: Order to complete
            uow: Ambient unit of work; a new one is opened when omitted

        Returns:
            The completed order, or the current order if it was already
            past PENDING/PROCESSING

        Raises:
            NotFoundError: Unknown order
            InsufficientStockError: A tracked product ran out; nothing
                from this completion is persisted
        """
        if uow is None:
            async with self.unit_of_work() as own:
                return await self._complete(own, order_id)
        return await self._complete(uow, order_id)

    async def _complete(self, uow: UnitOfWork, order_id: str) -> OrderResponse:
        won = await uow.orders.transition(
            order_id,
            OPEN_ORDER_STATUSES,
            OrderStatus.COMPLETED,
            completed_at=utc_now(),
        )
        order = await uow.orders.get_with_items(order_id)
        if order is None:
            raise NotFoundError(
                ErrorMessages.ORDER_NOT_FOUND,
                resource_type="order",
                resource_id=order_id,
            )
        if not won:
            logger.warning(
                f"Completion skipped for order {order_id}: status is {order.status.value}"
            )
            return OrderResponse.model_validate(order)

        if order.promo_code_id:
            await self._promos.record_usage(uow, order.user_id, order.promo_code_id, order.id)

        await self._award_points(uow, order)

        for item in order.items:
            if item.product.tracks_stock:
                if not await uow.products.decrement_stock(item.product_id, item.quantity):
                    logger.warning(
                        f"Completion of order {order_id} aborted: "
                        f"insufficient stock for {item.product.name}"
                    )
                    raise InsufficientStockError(item.product.name, item.product_id)

        issued: List[License] = []
        for item in order.items:
            for _ in range(item.quantity):
                issued.append(
                    await self._licenses.issue(uow, order.user_id, item.product_id, order.id)
                )
                await uow.notifications.push(
                    order.user_id,
                    NotificationText.ORDER_TITLE,
                    NotificationText.ORDER_MESSAGE.format(product_name=item.product.name),
                    NotificationType.ORDER,
                )

        user = await uow.users.get_by_id(order.user_id)
        await uow.users.refresh_counters(user)
        snapshot = UserSnapshot.model_validate(user)

        response = OrderResponse.model_validate(await uow.orders.get_with_items(order_id))
        self._schedule_notifications(
            uow,
            response,
            snapshot,
            [LicenseResponse.model_validate(entity) for entity in issued],
        )

        logger.info(
            f"Order {order_id} completed: {len(issued)} license(s) issued, "
            f"payment {order.payment_method.value}"
        )
        return response

    async def _award_points(self, uow: UnitOfWork, order: Order) -> None:
        points = points_for(order)
        if points <= 0:
            return

        await uow.users.add_points(order.user_id, points)
        await uow.transactions.append(
            user_id=order.user_id,
            type=TransactionType.POINTS_EARNED,
            points=points,
            payment_method=order.payment_method.value,
            payment_ref=order.id,
            description=f"Points earned from order {order.id}",
        )
        await uow.notifications.push(
            order.user_id,
            NotificationText.POINTS_TITLE,
            NotificationText.POINTS_MESSAGE.format(points=points, order_ref=order.id[:8]),
            NotificationType.SYSTEM,
        )

    def _schedule_notifications(
        self,
        uow: UnitOfWork,
        order: OrderResponse,
        user: UserSnapshot,
        licenses: List[LicenseResponse],
    ) -> None:
        """Queue sink calls to run only once ``uow`` has committed."""
        sink = self._sink
        dispatcher = self._dispatcher

        def _dispatch() -> None:
            dispatcher.dispatch(
                lambda: sink.notify_order_confirmed(order, user),
                name=f"order-confirmed:{order.id}",
            )
            for entry in licenses:
                dispatcher.dispatch(
                    lambda entry=entry: sink.notify_license_issued(user, entry),
                    name=f"license-issued:{entry.license_key}",
                )

        uow.on_commit(_dispatch)
