# ==============================================================================
# ORDER SCHEMAS - License Purchases
# ==============================================================================
# Request/Response schemas for order management
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from licensestore.domain_models.order import OrderStatus, PaymentMethod
from licensestore.schemas.base import BaseSchema, TimestampSchema
from licensestore.schemas.license import LicenseResponse


class OrderItemCreate(BaseSchema):
    """Schema for one cart line."""

    product_id: str = Field(
        ...,
        min_length=1,
        description="Product ID to order",
    )
    quantity: int = Field(
        ...,
        ge=1,
        description="Quantity to order (one license per unit)",
    )


class OrderCreate(BaseSchema):
    """Schema for creating an order."""

    items: List[OrderItemCreate] = Field(
        ...,
        min_length=1,
        description="Order items",
    )
    payment_method: PaymentMethod = Field(
        PaymentMethod.EXTERNAL,
        description="EXTERNAL gateway or internal BALANCE",
    )
    promo_code: Optional[str] = Field(
        None,
        max_length=50,
        description="Promo code to apply",
    )

    @field_validator("promo_code")
    @classmethod
    def normalize_promo_code(cls, v: Optional[str]) -> Optional[str]:
        """Blank codes mean no code."""
        if v is None:
            return None
        v = v.strip().upper()
        return v or None


class ProductSummary(BaseSchema):
    """
    Public product projection embedded in order responses.

    Carries no download credentials.
    """

    id: str
    name: str
    slug: str
    price: Decimal
    version: Optional[str] = None
    category: Optional[str] = None


class OrderItemResponse(BaseSchema):
    """Schema for order item response."""

    id: str = Field(
        ...,
        description="Order item unique identifier",
    )
    product_id: str = Field(
        ...,
        description="Product ID",
    )
    quantity: int = Field(
        ...,
        description="Ordered quantity",
    )
    price: Decimal = Field(
        ...,
        description="Unit price at order time",
    )
    product: Optional[ProductSummary] = None


class OrderResponse(TimestampSchema):
    """Schema for order response."""

    id: str = Field(
        ...,
        description="Order unique identifier",
    )
    user_id: str = Field(
        ...,
        description="Customer ID",
    )
    status: OrderStatus = Field(
        ...,
        description="Order status",
    )
    payment_method: PaymentMethod
    payment_ref: Optional[str] = None
    subtotal: Decimal
    tier_discount: Decimal
    promo_discount: Decimal
    discount: Decimal
    total: Decimal
    promo_code: Optional[str] = None
    promo_code_id: Optional[str] = None
    completed_at: Optional[datetime] = None
    items: List[OrderItemResponse] = Field(default_factory=list)
    licenses: List[LicenseResponse] = Field(default_factory=list)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


class CartLineReport(BaseSchema):
    """Read-only price and stock check for one cart line."""

    product_id: str
    available: bool
    name: Optional[str] = None
    unit_price: Optional[Decimal] = None
    is_flash_sale: bool = False
    in_stock: bool = False
    line_total: Optional[Decimal] = None
    message: Optional[str] = None


class CartValidationResponse(BaseSchema):
    """Result of validating a whole cart."""

    valid: bool
    items: List[CartLineReport]
    subtotal: Decimal
