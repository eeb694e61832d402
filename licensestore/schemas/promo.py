# ==============================================================================
# PROMO SCHEMAS - Promo Code Preview
# ==============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field

from licensestore.domain_models.promo_code import DiscountType
from licensestore.schemas.base import BaseSchema


class PromoPreviewRequest(BaseSchema):
    """Schema for checking a code against a cart total."""

    code: str = Field(..., min_length=1, max_length=50)
    cart_total: Decimal = Field(..., ge=0)


class PromoPreview(BaseSchema):
    """Outcome of a successful promo code check."""

    valid: bool = True
    code: str
    promo_code_id: str
    type: DiscountType
    discount_value: Decimal = Field(..., description="Percentage or fixed amount as configured")
    computed_discount: Decimal = Field(..., description="Discount for the given cart total")
    message: Optional[str] = None
