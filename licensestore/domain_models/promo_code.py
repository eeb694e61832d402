# ==============================================================================
# PROMO CODE MODELS - Discount Codes and Redemptions
# ==============================================================================
# PromoCode carries a monotonic used_count; PromoCodeUsage records one
# redemption per (user, code)
# ==============================================================================

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from licensestore.domain_models.base import SQLBase, TimestampMixin
from licensestore.utils.helpers import utc_now


class DiscountType(str, enum.Enum):
    """How a promo code's ``discount`` value is applied."""
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class PromoCode(SQLBase, TimestampMixin):
    """
    Promo code definition.

    Attributes:
        code: Upper-case unique code
        discount: Percentage (0-100) or fixed amount, depending on type
        type: PERCENTAGE or FIXED
        min_purchase: Minimum cart total required
        max_discount: Cap for percentage discounts
        usage_limit: Global redemption cap, unlimited when NULL
        used_count: Redemptions reserved so far; only ever increases
        expires_at: Expiry timestamp
        is_active: Manual on/off switch
    """

    __tablename__ = "promo_codes"
    __table_args__ = (
        CheckConstraint(
            "usage_limit IS NULL OR used_count <= usage_limit",
            name="ck_promo_codes_usage_within_limit",
        ),
        CheckConstraint("used_count >= 0", name="ck_promo_codes_used_count_non_negative"),
    )

    code: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False,
    )
    discount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        nullable=False,
    )
    type: Mapped[DiscountType] = mapped_column(
        SQLEnum(DiscountType),
        default=DiscountType.PERCENTAGE,
        nullable=False,
    )
    min_purchase: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=18, scale=2),
        nullable=True,
    )
    max_discount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=18, scale=2),
        nullable=True,
    )
    usage_limit: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    used_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<PromoCode(code={self.code}, used={self.used_count}/{self.usage_limit})>"


class PromoCodeUsage(SQLBase):
    """One redemption of a promo code by a user, written at order completion."""

    __tablename__ = "promo_code_usages"
    __table_args__ = (
        UniqueConstraint("user_id", "promo_code_id", name="uq_promo_code_usages_user_code"),
    )

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    promo_code_id: Mapped[str] = mapped_column(
        ForeignKey("promo_codes.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    order_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("orders.id", ondelete="SET NULL"),
        nullable=True,
    )
    used_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )
