# ==============================================================================
# ORDER SERVICE - Order Builder and Order Queries
# ==============================================================================
# Prices a cart (flash sales, tier and promo discounts), reserves the promo
# slot and persists a PENDING order in one transaction
# ==============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from licensestore.core.constants import ErrorMessages
from licensestore.core.exceptions import (
    BadRequestError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from licensestore.core.settings import settings
from licensestore.database.adapters.base_adapter import BaseDatabaseAdapter
from licensestore.domain_models.order import Order, OrderItem, OrderStatus, PaymentMethod
from licensestore.domain_models.product import Product
from licensestore.schemas.order import (
    CartLineReport,
    CartValidationResponse,
    OrderItemCreate,
    OrderResponse,
)
from licensestore.services.base_service import BaseService
from licensestore.services.promo_service import PromoCodeService, normalize_code
from licensestore.services.tier_service import TierService
from licensestore.utils.helpers import round_money, utc_now

logger = logging.getLogger(__name__)

CartItem = Union[OrderItemCreate, Mapping[str, Any]]


@dataclass
class PricedLine:
    """Cart line with its unit price fixed."""

    product: Product
    quantity: int
    price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


def _normalize_items(items: Sequence[CartItem]) -> Dict[str, int]:
    """
    Validate cart lines and merge repeated products.

    Returns:
        product_id -> total quantity, in first-seen order

    Raises:
        ValidationError: Empty cart or a non-positive quantity
    """
    if not items:
        raise ValidationError(ErrorMessages.ORDER_EMPTY, errors={"items": "must not be empty"})

    merged: Dict[str, int] = {}
    errors: Dict[str, Any] = {}
    for index, item in enumerate(items):
        if isinstance(item, OrderItemCreate):
            product_id, quantity = item.product_id, item.quantity
        else:
            product_id = item.get("product_id") or item.get("id")
            quantity = item.get("quantity")

        if not product_id:
            errors[f"items.{index}.product_id"] = "is required"
            continue
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            errors[f"items.{index}.quantity"] = "must be a positive integer"
            continue
        merged[product_id] = merged.get(product_id, 0) + quantity

    if errors:
        raise ValidationError("Invalid order items", errors=errors)
    return merged


class OrderService(BaseService):
    """
    Order builder and order lifecycle queries.

    Creation never touches stock, licenses or points; those happen once,
    at completion.
    """

    def __init__(
        self,
        adapter: Optional[BaseDatabaseAdapter] = None,
        tier_service: Optional[TierService] = None,
        promo_service: Optional[PromoCodeService] = None,
    ) -> None:
        super().__init__(adapter)
        self._tiers = tier_service or TierService()
        self._promos = promo_service or PromoCodeService(adapter)

    def _to_response(self, order: Order) -> OrderResponse:
        return OrderResponse.model_validate(order)

    # ==========================================================================
    # PRICING
    # ==========================================================================

    @staticmethod
    def _price_lines(
        quantities: Dict[str, int],
        products: List[Product],
    ) -> List[PricedLine]:
        """
        Fix unit prices and check tracked stock.

        Raises:
            BadRequestError: Unknown or inactive product ids
            InsufficientStockError: Tracked stock below the quantity
        """
        by_id = {product.id: product for product in products}
        missing = [pid for pid in quantities if pid not in by_id]
        if missing:
            raise BadRequestError(
                ErrorMessages.PRODUCTS_NOT_FOUND.format(ids=", ".join(missing)),
                details={"missing_ids": missing},
            )

        now = utc_now()
        lines: List[PricedLine] = []
        for product_id, quantity in quantities.items():
            product = by_id[product_id]
            if not product.has_stock_for(quantity):
                raise InsufficientStockError(product.name, product.id)
            lines.append(
                PricedLine(
                    product=product,
                    quantity=quantity,
                    price=round_money(product.effective_price(now)),
                )
            )
        return lines

    # ==========================================================================
    # ORDER CREATION
    # ==========================================================================

    async def create_order(
        self,
        user_id: str,
        items: Sequence[CartItem],
        payment_method: Union[PaymentMethod, str] = PaymentMethod.EXTERNAL,
        promo_code: Optional[str] = None,
    ) -> OrderResponse:
        """
        Price a cart and persist it as a PENDING order.

        Args:
            user_id: Buyer
            items: Cart lines (product id and quantity)
            payment_method: EXTERNAL or BALANCE
            promo_code: Optional promo code (case-insensitive)

        Returns:
            The persisted order with items

        Raises:
            ValidationError: Malformed cart or unknown payment method
            NotFoundError: Unknown user or promo code
            BadRequestError: Suspended user, unknown products, insufficient
                stock or a rejected promo code
        """
        quantities = _normalize_items(items)
        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            raise ValidationError(
                ErrorMessages.INVALID_PAYMENT_METHOD.format(method=payment_method),
                errors={"payment_method": "must be EXTERNAL or BALANCE"},
            )
        code = normalize_code(promo_code) if promo_code and promo_code.strip() else None

        # Reads happen in their own short transaction
        async with self.unit_of_work() as uow:
            user = await uow.users.get_by_id(user_id)
            if user is None:
                raise NotFoundError(
                    ErrorMessages.USER_NOT_FOUND,
                    resource_type="user",
                    resource_id=user_id,
                )
            if user.is_banned:
                logger.warning(f"Order rejected for suspended user {user_id}")
                raise BadRequestError(ErrorMessages.USER_BANNED, error_code="ACCOUNT_SUSPENDED")
            products = await uow.products.get_active(quantities.keys())
            lines = self._price_lines(quantities, products)
            total_spent = await uow.orders.completed_spend(user_id)

        subtotal = round_money(sum((line.line_total for line in lines), Decimal("0")))
        tier = self._tiers.tier_of(total_spent)
        tier_discount = self._tiers.tier_discount(subtotal, total_spent)

        promo_discount = Decimal("0")
        if code:
            preview = await self._promos.preview(code, subtotal, user_id)
            promo_discount = preview.computed_discount

        # Combined discount never exceeds the subtotal
        if tier_discount + promo_discount > subtotal:
            promo_discount = max(subtotal - tier_discount, Decimal("0"))
        discount = round_money(tier_discount + promo_discount)
        total = round_money(subtotal - discount)

        async with self.unit_of_work() as uow:
            promo_code_id = None
            if code:
                promo = await self._promos.reserve(uow, code, user_id, subtotal)
                promo_code_id = promo.id

            order = Order(
                user_id=user_id,
                status=OrderStatus.PENDING,
                payment_method=method,
                subtotal=subtotal,
                tier_discount=round_money(tier_discount),
                promo_discount=round_money(promo_discount),
                discount=discount,
                total=total,
                promo_code=code,
                promo_code_id=promo_code_id,
            )
            order.items = [
                OrderItem(
                    product_id=line.product.id,
                    quantity=line.quantity,
                    price=line.price,
                )
                for line in lines
            ]
            await uow.orders.add(order)
            persisted = await uow.orders.get_with_items(order.id)
            response = self._to_response(persisted)

        logger.info(
            f"Order {response.id} created for user {user_id}: subtotal {subtotal}, "
            f"tier {tier.name} -{tier_discount}, promo -{promo_discount}, total {total}"
        )
        return response

    # ==========================================================================
    # QUERIES
    # ==========================================================================

    async def get_order(
        self,
        order_id: str,
        user_id: Optional[str] = None,
    ) -> OrderResponse:
        """
        Load one order.

        Raises:
            NotFoundError: Unknown order
            BadRequestError: ``user_id`` given and not the owner
        """
        async with self.unit_of_work() as uow:
            order = await uow.orders.get_with_items(order_id)
            if order is None:
                raise NotFoundError(
                    ErrorMessages.ORDER_NOT_FOUND,
                    resource_type="order",
                    resource_id=order_id,
                )
            if user_id is not None and order.user_id != user_id:
                raise BadRequestError(ErrorMessages.ORDER_FORBIDDEN)
            return self._to_response(order)

    async def list_user_orders(
        self,
        user_id: str,
        skip: int = 0,
        limit: int = 50,
    ) -> List[OrderResponse]:
        """List a user's orders, newest first."""
        async with self.unit_of_work() as uow:
            orders = await uow.orders.list_for_user(user_id, skip=skip, limit=limit)
            return [self._to_response(order) for order in orders]

    async def validate_cart(self, items: Sequence[CartItem]) -> CartValidationResponse:
        """
        Report price and stock per cart line without reserving anything.
        """
        quantities = _normalize_items(items)
        now = utc_now()

        async with self.unit_of_work() as uow:
            products = {p.id: p for p in await uow.products.get_active(quantities.keys())}

        reports: List[CartLineReport] = []
        subtotal = Decimal("0")
        for product_id, quantity in quantities.items():
            product = products.get(product_id)
            if product is None:
                reports.append(
                    CartLineReport(
                        product_id=product_id,
                        available=False,
                        message="Product not found",
                    )
                )
                continue

            price = round_money(product.effective_price(now))
            in_stock = product.has_stock_for(quantity)
            line_total = price * quantity
            subtotal += line_total
            reports.append(
                CartLineReport(
                    product_id=product_id,
                    available=in_stock,
                    name=product.name,
                    unit_price=price,
                    is_flash_sale=product.flash_sale_active(now),
                    in_stock=in_stock,
                    line_total=line_total,
                    message=None if in_stock else f"Insufficient stock for {product.name}",
                )
            )

        return CartValidationResponse(
            valid=all(report.available for report in reports),
            items=reports,
            subtotal=round_money(subtotal),
        )

    # ==========================================================================
    # CANCELLATION
    # ==========================================================================

    async def cancel_order(self, order_id: str, user_id: str) -> OrderResponse:
        """
        Cancel a PENDING order owned by ``user_id``.

        A reserved promo slot stays consumed.

        Raises:
            NotFoundError: Unknown order
            BadRequestError: Not the owner, or the order is no longer PENDING
        """
        async with self.unit_of_work() as uow:
            order = await uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(
                    ErrorMessages.ORDER_NOT_FOUND,
                    resource_type="order",
                    resource_id=order_id,
                )
            if order.user_id != user_id:
                raise BadRequestError(ErrorMessages.ORDER_FORBIDDEN)

            cancelled = await uow.orders.transition(
                order_id,
                [OrderStatus.PENDING],
                OrderStatus.CANCELLED,
            )
            if not cancelled:
                logger.warning(f"Cancel rejected for order {order_id}: not pending")
                raise BadRequestError(ErrorMessages.ORDER_NOT_CANCELLABLE)

            response = self._to_response(await uow.orders.get_with_items(order_id))

        logger.info(f"Order {order_id} cancelled by user {user_id}")
        return response

    async def cancel_expired_orders(
        self,
        older_than_minutes: Optional[int] = None,
    ) -> int:
        """
        Cancel PENDING orders older than the configured timeout.

        Returns:
            Number of orders cancelled
        """
        minutes = older_than_minutes
        if minutes is None:
            minutes = settings.ORDER_PENDING_TIMEOUT_MINUTES
        cutoff = utc_now() - timedelta(minutes=minutes)

        async with self.unit_of_work() as uow:
            count = await uow.orders.cancel_stale(cutoff)

        if count:
            logger.info(f"Cancelled {count} pending order(s) older than {minutes} minutes")
        return count
