# ==============================================================================
# USER REPOSITORY - Balance and Points Counters
# ==============================================================================

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import update

from licensestore.database.repositories.base_repository import BaseRepository
from licensestore.domain_models.user import User


class UserRepository(BaseRepository[User]):
    """Account lookups and atomic counter updates."""

    model = User

    async def debit_balance(self, user_id: str, amount: Decimal) -> bool:
        """
        Subtract ``amount`` from the balance if it covers it.

        Single conditional UPDATE; the affected row count decides
        whether the debit happened.

        Returns:
            True if the balance was debited
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.balance >= amount)
            .values(balance=User.balance - amount)
            .returning(User.id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def add_points(self, user_id: str, points: int) -> bool:
        """Atomically increment the points counter."""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(points=User.points + points)
            .returning(User.id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def refresh_counters(self, user: User) -> User:
        """Reload balance and points after a guarded update."""
        await self._session.refresh(user, attribute_names=["balance", "points"])
        return user
