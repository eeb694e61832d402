# ==============================================================================
# PRODUCT MODEL - Digital License Catalog
# ==============================================================================
# Sellable software product with optional flash-sale window and finite stock
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from licensestore.core.constants import ProductConstants
from licensestore.domain_models.base import SQLBase, TimestampMixin
from licensestore.utils.helpers import as_utc, utc_now

if TYPE_CHECKING:
    from licensestore.domain_models.license import License
    from licensestore.domain_models.order import OrderItem


class Product(SQLBase, TimestampMixin):
    """
    Product model for the license catalog.

    A ``stock`` of -1 means unlimited; any other value is decremented
    once per completed order and may never drop below zero.

    Attributes:
        name: Display name
        slug: URL-friendly unique identifier
        price: List price
        original_price: Crossed-out price for display
        is_flash_sale: Flash-sale flag
        flash_sale_price: Discounted price while the sale window is open
        flash_sale_starts: Optional start of the sale window
        flash_sale_ends: End of the sale window
        stock: Remaining units, or -1 for unlimited
        reward_points: Loyalty points granted per unit purchased
        download_key: Internal download credential (never exposed)
        download_file_key: Internal storage key (never exposed)
    """

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= -1", name="ck_products_stock_sentinel"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    slug: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    category: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    version: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )

    # Pricing
    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        nullable=False,
    )
    original_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=18, scale=2),
        nullable=True,
    )

    # Flash sale
    is_flash_sale: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    flash_sale_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=18, scale=2),
        nullable=True,
    )
    flash_sale_starts: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    flash_sale_ends: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Inventory and rewards
    stock: Mapped[int] = mapped_column(
        Integer,
        default=ProductConstants.UNLIMITED_STOCK,
        nullable=False,
    )
    reward_points: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    # Delivery secrets
    download_key: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    download_file_key: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Relationships
    order_items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="product",
    )
    licenses: Mapped[List["License"]] = relationship(
        "License",
        back_populates="product",
    )

    @property
    def tracks_stock(self) -> bool:
        """True unless stock is the unlimited sentinel."""
        return self.stock != ProductConstants.UNLIMITED_STOCK

    def has_stock_for(self, quantity: int) -> bool:
        return not self.tracks_stock or self.stock >= quantity

    def flash_sale_active(self, now: Optional[datetime] = None) -> bool:
        """Whether the flash-sale price applies at ``now``."""
        if not self.is_flash_sale or self.flash_sale_price is None:
            return False
        now = now or utc_now()
        starts = as_utc(self.flash_sale_starts)
        ends = as_utc(self.flash_sale_ends)
        if starts is not None and now < starts:
            return False
        if ends is None or now >= ends:
            return False
        return True

    def effective_price(self, now: Optional[datetime] = None) -> Decimal:
        """Unit price charged at ``now``."""
        if self.flash_sale_active(now):
            return self.flash_sale_price
        return self.price

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.name}, stock={self.stock})>"
