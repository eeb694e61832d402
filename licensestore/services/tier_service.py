# ==============================================================================
# TIER SERVICE - Loyalty Tier Discounts
# ==============================================================================
# Maps lifetime completed spend to a tier and its order discount
# ==============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence, Tuple

from licensestore.schemas.tier import TierInfo, TierProgress
from licensestore.utils.helpers import round_whole, to_decimal

# Ascending spend breakpoints
DEFAULT_TIERS: Tuple[TierInfo, ...] = (
    TierInfo(name="Bronze", min_spent=Decimal("0"), discount_percent=0),
    TierInfo(name="Silver", min_spent=Decimal("1000"), discount_percent=2),
    TierInfo(name="Gold", min_spent=Decimal("3000"), discount_percent=4),
    TierInfo(name="Platinum", min_spent=Decimal("7000"), discount_percent=6),
    TierInfo(name="Diamond", min_spent=Decimal("15000"), discount_percent=8),
    TierInfo(name="Elite", min_spent=Decimal("30000"), discount_percent=10),
    TierInfo(name="Royal", min_spent=Decimal("60000"), discount_percent=12),
    TierInfo(name="Legend", min_spent=Decimal("100000"), discount_percent=15),
)


class TierService:
    """
    Loyalty tier calculator.

    Pure computation: the caller supplies the user's total spend over
    COMPLETED orders (``OrderRepository.completed_spend``), recomputed on
    every use.

    Example:
        >>> tiers = TierService()
        >>> tiers.tier_of(Decimal("3500")).name
        'Gold'
        >>> tiers.tier_discount(Decimal("1000"), Decimal("3500"))
        Decimal('40')
    """

    def __init__(self, tiers: Sequence[TierInfo] = DEFAULT_TIERS) -> None:
        if not tiers:
            raise ValueError("At least one tier is required")
        self._tiers = tuple(sorted(tiers, key=lambda t: t.min_spent))

    @property
    def tiers(self) -> Tuple[TierInfo, ...]:
        return self._tiers

    def tier_of(self, total_spent: Decimal) -> TierInfo:
        """
        Highest tier whose threshold is met.

        Args:
            total_spent: Lifetime spend over completed orders

        Returns:
            Matching tier (the lowest tier for zero or negative spend)
        """
        spent = to_decimal(total_spent)
        current = self._tiers[0]
        for tier in self._tiers:
            if spent >= tier.min_spent:
                current = tier
            else:
                break
        return current

    def next_tier(self, total_spent: Decimal) -> Optional[TierInfo]:
        """Next tier above the current one, None at the top."""
        spent = to_decimal(total_spent)
        for tier in self._tiers:
            if spent < tier.min_spent:
                return tier
        return None

    def progress(self, total_spent: Decimal) -> TierProgress:
        """Current tier with distance to the next one."""
        spent = to_decimal(total_spent)
        current = self.tier_of(spent)
        upcoming = self.next_tier(spent)
        if upcoming is None:
            return TierProgress(current=current, total_spent=spent)

        span = upcoming.min_spent - current.min_spent
        done = spent - current.min_spent
        percent = float(done / span * 100) if span > 0 else 100.0
        return TierProgress(
            current=current,
            next=upcoming,
            total_spent=spent,
            remaining=upcoming.min_spent - spent,
            progress_percent=max(0.0, min(100.0, percent)),
        )

    def tier_discount(self, amount: Decimal, total_spent: Decimal) -> Decimal:
        """
        Discount on ``amount`` for a user with ``total_spent``.

        Rounded half-up to a whole currency unit.
        """
        percent = self.tier_of(total_spent).discount_percent
        if percent == 0:
            return Decimal("0")
        return round_whole(to_decimal(amount) * percent / 100)
