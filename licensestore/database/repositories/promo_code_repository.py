# ==============================================================================
# PROMO CODE REPOSITORY - Redemption Admission Control
# ==============================================================================

from __future__ import annotations

from typing import Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError

from licensestore.database.repositories.base_repository import BaseRepository
from licensestore.domain_models.promo_code import PromoCode, PromoCodeUsage


class PromoCodeRepository(BaseRepository[PromoCode]):
    """Promo code lookups, usage slots and per-user redemption rows."""

    model = PromoCode

    async def get_by_code(self, code: str) -> Optional[PromoCode]:
        """Look up a code, case-insensitively."""
        result = await self._session.execute(
            select(PromoCode)
            .where(PromoCode.code == code.strip().upper())
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def try_reserve(self, promo_code_id: str) -> bool:
        """
        Claim one usage slot.

        The WHERE clause re-checks the limit at write time, so concurrent
        reservations can never push ``used_count`` past ``usage_limit``.

        Returns:
            True if a slot was claimed
        """
        stmt = (
            update(PromoCode)
            .where(
                PromoCode.id == promo_code_id,
                or_(
                    PromoCode.usage_limit.is_(None),
                    PromoCode.used_count < PromoCode.usage_limit,
                ),
            )
            .values(used_count=PromoCode.used_count + 1)
            .returning(PromoCode.id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def has_usage(self, user_id: str, promo_code_id: str) -> bool:
        result = await self._session.execute(
            select(PromoCodeUsage.id).where(
                PromoCodeUsage.user_id == user_id,
                PromoCodeUsage.promo_code_id == promo_code_id,
            ).limit(1)
        )
        return result.first() is not None

    async def add_usage(
        self,
        user_id: str,
        promo_code_id: str,
        order_id: Optional[str],
    ) -> bool:
        """
        Insert the (user, code) redemption row.

        Returns:
            False if the user already has a row for this code
        """
        usage = PromoCodeUsage(
            user_id=user_id,
            promo_code_id=promo_code_id,
            order_id=order_id,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(usage)
        except IntegrityError:
            return False
        return True
