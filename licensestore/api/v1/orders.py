# ==============================================================================
# ORDERS ENDPOINTS - Order Creation and Queries
# ==============================================================================

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query, status

from licensestore.api.dependencies import CurrentUserID, OrderServiceDep
from licensestore.schemas.base import APIResponse
from licensestore.schemas.order import (
    CartValidationResponse,
    OrderCreate,
    OrderItemCreate,
    OrderResponse,
)

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post(
    "",
    response_model=APIResponse[OrderResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create order",
    description="Price the cart and create a PENDING order.",
)
async def create_order(
    user_id: CurrentUserID,
    schema: OrderCreate,
    service: OrderServiceDep,
) -> APIResponse[OrderResponse]:
    """Create a new order."""
    order = await service.create_order(
        user_id,
        schema.items,
        schema.payment_method,
        schema.promo_code,
    )
    return APIResponse.ok(data=order, message="Order created successfully")


@router.get(
    "",
    response_model=APIResponse[List[OrderResponse]],
    summary="List orders",
    description="Get the current user's orders, newest first.",
)
async def list_orders(
    user_id: CurrentUserID,
    service: OrderServiceDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
) -> APIResponse[List[OrderResponse]]:
    orders = await service.list_user_orders(user_id, skip=skip, limit=limit)
    return APIResponse.ok(data=orders)


@router.post(
    "/validate",
    response_model=APIResponse[CartValidationResponse],
    summary="Validate cart",
    description="Check prices and stock for a cart without creating an order.",
)
async def validate_cart(
    items: List[OrderItemCreate],
    service: OrderServiceDep,
) -> APIResponse[CartValidationResponse]:
    report = await service.validate_cart(items)
    return APIResponse.ok(data=report)


@router.get(
    "/{order_id}",
    response_model=APIResponse[OrderResponse],
    summary="Get order",
)
async def get_order(
    order_id: str,
    user_id: CurrentUserID,
    service: OrderServiceDep,
) -> APIResponse[OrderResponse]:
    order = await service.get_order(order_id, user_id)
    return APIResponse.ok(data=order)


@router.post(
    "/{order_id}/cancel",
    response_model=APIResponse[OrderResponse],
    summary="Cancel order",
    description="Cancel a PENDING order. Used promo slots are not returned.",
)
async def cancel_order(
    order_id: str,
    user_id: CurrentUserID,
    service: OrderServiceDep,
) -> APIResponse[OrderResponse]:
    order = await service.cancel_order(order_id, user_id)
    return APIResponse.ok(data=order, message="Order cancelled")
