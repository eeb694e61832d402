# ==============================================================================
# CHECKOUT ENDPOINTS - Payment Flows
# ==============================================================================

from __future__ import annotations

from fastapi import APIRouter, status

from licensestore.api.dependencies import (
    BalanceServiceDep,
    CheckoutServiceDep,
    CurrentUserID,
)
from licensestore.schemas.base import APIResponse
from licensestore.schemas.checkout import (
    BalancePaymentResult,
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    VerifyPaymentResponse,
)

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.post(
    "/session",
    response_model=APIResponse[CheckoutSessionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Start gateway checkout",
    description="Create an order and a payment gateway session for it.",
)
async def create_session(
    schema: CheckoutSessionRequest,
    user_id: CurrentUserID,
    service: CheckoutServiceDep,
) -> APIResponse[CheckoutSessionResponse]:
    session = await service.create_checkout_session(
        user_id,
        schema.items,
        schema.promo_code,
    )
    return APIResponse.ok(data=session, message="Checkout session created")


@router.post(
    "/balance/{order_id}",
    response_model=APIResponse[BalancePaymentResult],
    summary="Pay with balance",
    description="Pay a BALANCE order from the account balance and complete it.",
)
async def pay_with_balance(
    order_id: str,
    user_id: CurrentUserID,
    service: BalanceServiceDep,
) -> APIResponse[BalancePaymentResult]:
    result = await service.pay(user_id, order_id)
    return APIResponse.ok(data=result, message="Payment successful")


@router.post(
    "/verify/{order_id}",
    response_model=APIResponse[VerifyPaymentResponse],
    summary="Verify gateway payment",
    description="Poll the gateway and complete the order if it has been paid.",
)
async def verify_payment(
    order_id: str,
    user_id: CurrentUserID,
    service: CheckoutServiceDep,
) -> APIResponse[VerifyPaymentResponse]:
    result = await service.verify_payment(order_id, user_id)
    return APIResponse.ok(data=result)
