# ==============================================================================
# TIER SCHEMAS - Loyalty Tiers
# ==============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field

from licensestore.schemas.base import BaseSchema


class TierInfo(BaseSchema):
    """One loyalty tier breakpoint."""

    name: str = Field(..., description="Tier name")
    min_spent: Decimal = Field(..., ge=0, description="Lifetime spend required")
    discount_percent: int = Field(..., ge=0, le=100, description="Order discount in percent")


class TierProgress(BaseSchema):
    """Current tier plus distance to the next one."""

    current: TierInfo
    next: Optional[TierInfo] = None
    total_spent: Decimal
    remaining: Decimal = Field(
        default=Decimal("0"),
        description="Spend still needed to reach the next tier",
    )
    progress_percent: float = Field(default=100.0, ge=0, le=100)
