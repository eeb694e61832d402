# ==============================================================================
# API DEPENDENCIES - Dependency Injection
# ==============================================================================
# FastAPI dependencies for caller identity, database access and services
# ==============================================================================

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request, status

from licensestore.core.constants import APIConstants, ErrorMessages
from licensestore.core.exceptions import BadRequestError, ServiceUnavailableError
from licensestore.core.settings import settings
from licensestore.database.adapters.base_adapter import BaseDatabaseAdapter
from licensestore.database.factory import DatabaseFactory
from licensestore.services.balance_service import BalancePaymentService
from licensestore.services.checkout_service import CheckoutService
from licensestore.services.completion_service import OrderCompletionService
from licensestore.services.gateway import PaymentGateway, verify_webhook_signature
from licensestore.services.notification_service import NotificationSink, PostCommitDispatcher
from licensestore.services.order_service import OrderService
from licensestore.services.promo_service import PromoCodeService

logger = logging.getLogger(__name__)


# ==============================================================================
# DATABASE DEPENDENCIES
# ==============================================================================

async def get_adapter() -> BaseDatabaseAdapter:
    """
    Get database adapter dependency.

    Returns initialized adapter from factory.
    """
    return DatabaseFactory.get_adapter()


# Annotated type for database adapter
DatabaseDep = Annotated[BaseDatabaseAdapter, Depends(get_adapter)]


# ==============================================================================
# IDENTITY DEPENDENCIES
# ==============================================================================

async def get_current_user_id(
    x_user_id: Annotated[Optional[str], Header(alias=APIConstants.USER_ID_HEADER)] = None,
) -> str:
    """
    Read the caller's user id set by the upstream auth layer.

    Raises:
        HTTPException: If the header is missing
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return x_user_id.strip()


CurrentUserID = Annotated[str, Depends(get_current_user_id)]


async def verify_webhook_request(
    request: Request,
    x_webhook_signature: Annotated[
        Optional[str], Header(alias=APIConstants.WEBHOOK_SIGNATURE_HEADER)
    ] = None,
) -> None:
    """
    Check the HMAC-SHA256 signature of a gateway callback against its raw body.

    Raises:
        ServiceUnavailableError: No webhook secret is configured
        BadRequestError: The signature is missing or does not match
    """
    secret = settings.PAYMENT_WEBHOOK_SECRET
    if not secret:
        logger.error("Webhook received but PAYMENT_WEBHOOK_SECRET is not set")
        raise ServiceUnavailableError(
            ErrorMessages.WEBHOOK_SECRET_MISSING,
            service_name="payment_gateway",
        )
    if not x_webhook_signature:
        raise BadRequestError(ErrorMessages.WEBHOOK_SIGNATURE_MISSING)

    payload = await request.body()
    if not verify_webhook_signature(payload, x_webhook_signature, secret):
        logger.warning("Rejected webhook with an invalid signature")
        raise BadRequestError(ErrorMessages.WEBHOOK_SIGNATURE_INVALID)


# ==============================================================================
# APPLICATION-SCOPED COLLABORATORS
# ==============================================================================

def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway


def get_dispatcher(request: Request) -> PostCommitDispatcher:
    return request.app.state.dispatcher


def get_notification_sink(request: Request) -> NotificationSink:
    return request.app.state.notification_sink


GatewayDep = Annotated[PaymentGateway, Depends(get_gateway)]
DispatcherDep = Annotated[PostCommitDispatcher, Depends(get_dispatcher)]
SinkDep = Annotated[NotificationSink, Depends(get_notification_sink)]


# ==============================================================================
# SERVICE DEPENDENCIES
# ==============================================================================

async def get_promo_service(adapter: DatabaseDep) -> PromoCodeService:
    """Get promo code service instance."""
    return PromoCodeService(adapter)


async def get_order_service(
    adapter: DatabaseDep,
    promo_service: Annotated[PromoCodeService, Depends(get_promo_service)],
) -> OrderService:
    """Get order service instance."""
    return OrderService(adapter, promo_service=promo_service)


async def get_completion_service(
    adapter: DatabaseDep,
    promo_service: Annotated[PromoCodeService, Depends(get_promo_service)],
    sink: SinkDep,
    dispatcher: DispatcherDep,
) -> OrderCompletionService:
    """Get order completion service instance."""
    return OrderCompletionService(
        adapter,
        promo_service=promo_service,
        sink=sink,
        dispatcher=dispatcher,
    )


async def get_balance_service(
    adapter: DatabaseDep,
    completion_service: Annotated[OrderCompletionService, Depends(get_completion_service)],
) -> BalancePaymentService:
    """Get balance payment service instance."""
    return BalancePaymentService(adapter, completion_service=completion_service)


async def get_checkout_service(
    adapter: DatabaseDep,
    order_service: Annotated[OrderService, Depends(get_order_service)],
    completion_service: Annotated[OrderCompletionService, Depends(get_completion_service)],
    gateway: GatewayDep,
) -> CheckoutService:
    """Get checkout service instance."""
    return CheckoutService(
        adapter,
        order_service=order_service,
        completion_service=completion_service,
        gateway=gateway,
    )


# Annotated service types
PromoServiceDep = Annotated[PromoCodeService, Depends(get_promo_service)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
BalanceServiceDep = Annotated[BalancePaymentService, Depends(get_balance_service)]
CheckoutServiceDep = Annotated[CheckoutService, Depends(get_checkout_service)]
