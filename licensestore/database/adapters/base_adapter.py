# ==============================================================================
# BASE DATABASE ADAPTER - Abstract Interface
# ==============================================================================
# Defines the contract for all database adapters
# Ensures consistent API across SQLite and PostgreSQL
# ==============================================================================

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)

from licensestore.core.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class BaseDatabaseAdapter(ABC):
    """
    Abstract Base Class for relational database adapters.

    Every adapter owns one async SQLAlchemy engine and hands out
    transactional sessions. Concrete adapters only decide how the engine
    is built (driver, pooling, transaction start mode).

    Thread Safety:
        All methods are async and designed for concurrent access.
        Connection pooling is handled by the underlying driver.

    Example:
        >>> adapter = SQLiteAdapter()
        >>> await adapter.connect()
        >>> async with adapter.session() as session:
        ...     await session.execute(query)
        >>> await adapter.disconnect()
    """

    name: str = "database"

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    # ==========================================================================
    # ENGINE CONSTRUCTION
    # ==========================================================================

    @abstractmethod
    def _create_engine(self) -> AsyncEngine:
        """
        Build the async engine for this backend.

        Returns:
            Configured AsyncEngine (not yet connected)
        """

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._engine

    # ==========================================================================
    # LIFECYCLE METHODS
    # ==========================================================================

    async def connect(self, create_tables: bool = True) -> None:
        """
        Initialize the engine and (optionally) create all tables.

        Args:
            create_tables: Run ``metadata.create_all`` after connecting

        Raises:
            DatabaseError: If connection cannot be established
        """
        try:
            self._engine = self._create_engine()
            self._session_factory = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
            if create_tables:
                await self.create_tables()
            logger.info(f"{self.name} adapter connected successfully")
        except Exception as e:
            logger.error(f"Failed to connect to {self.name}: {e}")
            raise DatabaseError(f"{self.name} connection failed: {e}")

    async def disconnect(self) -> None:
        """Close database connections and dispose engine."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info(f"{self.name} adapter disconnected")

    async def create_tables(self) -> None:
        """Create every table registered on ``SQLBase.metadata``."""
        # Importing the package registers all models on the metadata
        from licensestore.domain_models import SQLBase

        async with self.engine.begin() as conn:
            await conn.run_sync(SQLBase.metadata.create_all)

    async def health_check(self) -> bool:
        """
        Verify database connectivity.

        Returns:
            True if connection is healthy
        """
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"{self.name} health check failed: {e}")
            return False

    # ==========================================================================
    # SESSION MANAGEMENT
    # ==========================================================================

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Provide transactional session scope.

        Commits on successful exit, rolls back on exception.

        Yields:
            AsyncSession instance

        Raises:
            RuntimeError: If database not connected
        """
        if not self._session_factory:
            raise RuntimeError(
                "Database not connected. Call connect() first."
            )

        session: AsyncSession = self._session_factory()
        try:
            yield session
            await session.commit()
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()
