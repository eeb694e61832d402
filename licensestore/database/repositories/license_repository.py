# ==============================================================================
# LICENSE REPOSITORY
# ==============================================================================

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from licensestore.database.repositories.base_repository import BaseRepository
from licensestore.domain_models.license import License


class LicenseRepository(BaseRepository[License]):
    """License inserts and per-order queries."""

    model = License

    async def try_insert(self, entity: License) -> bool:
        """
        Insert inside a savepoint.

        Returns:
            False on a unique violation (key collision); the savepoint is
            rolled back and the outer transaction stays usable
        """
        try:
            async with self._session.begin_nested():
                self._session.add(entity)
        except IntegrityError:
            return False
        return True

    async def count_for_order(self, order_id: str) -> int:
        result = await self._session.execute(
            select(func.count()).select_from(License).where(License.order_id == order_id)
        )
        return result.scalar() or 0

    async def key_exists(self, license_key: str) -> bool:
        result = await self._session.execute(
            select(License.id).where(License.license_key == license_key).limit(1)
        )
        return result.first() is not None
