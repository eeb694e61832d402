# ==============================================================================
# ORDER MODELS - License Purchases
# ==============================================================================
# Order and OrderItem entities; items carry a unit-price snapshot
# ==============================================================================

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from licensestore.domain_models.base import SQLBase, TimestampMixin

if TYPE_CHECKING:
    from licensestore.domain_models.license import License
    from licensestore.domain_models.product import Product
    from licensestore.domain_models.promo_code import PromoCode
    from licensestore.domain_models.user import User


class OrderStatus(str, enum.Enum):
    """Order lifecycle status states."""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


# States from which completion may still happen
OPEN_ORDER_STATUSES = (OrderStatus.PENDING, OrderStatus.PROCESSING)


class PaymentMethod(str, enum.Enum):
    """How an order is paid for."""
    EXTERNAL = "EXTERNAL"
    BALANCE = "BALANCE"


class Order(SQLBase, TimestampMixin):
    """
    Order model representing a customer purchase.

    Pricing columns are fixed at creation time and satisfy
    ``discount == tier_discount + promo_discount`` and
    ``total == subtotal - discount``.

    Attributes:
        user_id: Customer who placed the order
        status: Current lifecycle status
        subtotal: Sum of snapshot price times quantity
        tier_discount: Loyalty tier discount
        promo_discount: Promo code discount
        discount: Combined discount
        total: Amount charged
        promo_code: Code text as entered (normalised upper-case)
        promo_code_id: Reserved promo code, if any
        payment_method: EXTERNAL gateway or internal BALANCE
        payment_ref: Gateway session id for external payments
        completed_at: Completion timestamp

    Relationships:
        user: Customer who placed order
        items: Line items in the order
        licenses: Keys issued at completion
    """

    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("total >= 0", name="ck_orders_total_non_negative"),
    )

    # Foreign keys
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    promo_code_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("promo_codes.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Status
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(OrderStatus),
        default=OrderStatus.PENDING,
        index=True,
        nullable=False,
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod),
        default=PaymentMethod.EXTERNAL,
        nullable=False,
    )
    payment_ref: Mapped[Optional[str]] = mapped_column(
        String(255),
        index=True,
        nullable=True,
    )

    # Pricing
    subtotal: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        nullable=False,
    )
    tier_discount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    promo_discount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    discount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    total: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        nullable=False,
    )
    promo_code: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )

    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="orders",
    )
    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
    )
    licenses: Mapped[List["License"]] = relationship(
        "License",
        back_populates="order",
    )
    promo: Mapped[Optional["PromoCode"]] = relationship("PromoCode")

    @property
    def item_count(self) -> int:
        """Get total number of units in order."""
        return sum(item.quantity for item in self.items)

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, status={self.status}, total={self.total})>"


class OrderItem(SQLBase, TimestampMixin):
    """
    Order line item linking orders to products.

    Attributes:
        order_id: Parent order
        product_id: Ordered product
        quantity: Number of units (one license each)
        price: Unit price at time of order, never updated

    Relationships:
        order: Parent order
        product: Ordered product
    """

    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
    )

    # Foreign keys
    order_id: Mapped[str] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    product_id: Mapped[str] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"),
        index=True,
        nullable=False,
    )

    # Item details
    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        nullable=False,
    )

    # Relationships
    order: Mapped["Order"] = relationship(
        "Order",
        back_populates="items",
    )
    product: Mapped["Product"] = relationship(
        "Product",
        back_populates="order_items",
    )

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def __repr__(self) -> str:
        return f"<OrderItem(id={self.id}, product_id={self.product_id}, qty={self.quantity})>"
