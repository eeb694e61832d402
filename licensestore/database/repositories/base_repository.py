# ==============================================================================
# BASE REPOSITORY - Generic Data Access Abstraction
# ==============================================================================
# Repository Pattern over one AsyncSession (one transaction)
# ==============================================================================

from __future__ import annotations

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from licensestore.domain_models.base import SQLBase

# Type variable for generic repository
ModelType = TypeVar("ModelType", bound=SQLBase)


class BaseRepository(Generic[ModelType]):
    """
    Base repository providing standard lookups and inserts.

    Repositories never commit; the owning unit of work decides the
    transaction boundary. Shared counters are only changed through the
    guarded ``UPDATE ... RETURNING`` helpers defined on subclasses.

    Generic Parameters:
        ModelType: SQLAlchemy model handled by the repository

    Attributes:
        model: Model class (set by subclasses)
        _session: Session bound to the current transaction

    Example:
        >>> class UserRepository(BaseRepository[User]):
        ...     model = User
        ...
        >>> repo = UserRepository(session)
        >>> user = await repo.get_by_id(user_id)
    """

    model: Type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize repository.

        Args:
            session: Active session of the surrounding transaction
        """
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    # ==========================================================================
    # READ OPERATIONS
    # ==========================================================================

    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        """
        Retrieve entity by ID.

        Args:
            id: Primary key value

        Returns:
            Entity if found, None otherwise
        """
        return await self._session.get(self.model, id)

    async def find_one(self, **filters: Any) -> Optional[ModelType]:
        """
        Find a single entity matching equality filters.

        Returns:
            First matching entity, None if not found
        """
        stmt = select(self.model).filter_by(**filters).limit(1)
        result = await self._session.execute(stmt)
        return result.scalars().first()

    # ==========================================================================
    # WRITE OPERATIONS
    # ==========================================================================

    async def add(self, entity: ModelType) -> ModelType:
        """
        Insert an entity and flush so database defaults are populated.

        Args:
            entity: New model instance

        Returns:
            The flushed entity
        """
        self._session.add(entity)
        await self._session.flush()
        return entity
