# ==============================================================================
# POSTGRESQL ADAPTER - SQLAlchemy Async with asyncpg
# ==============================================================================
# Production database adapter with connection pooling
# Runs at READ COMMITTED: a blocked conditional UPDATE re-checks its
# predicate once the competing transaction commits
# ==============================================================================

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from licensestore.core.settings import settings
from licensestore.database.adapters.base_adapter import BaseDatabaseAdapter

logger = logging.getLogger(__name__)


class PostgreSQLAdapter(BaseDatabaseAdapter):
    """
    PostgreSQL database adapter using SQLAlchemy async with asyncpg.

    Example:
        >>> adapter = PostgreSQLAdapter()
        >>> await adapter.connect()
    """

    name = "PostgreSQL"

    def __init__(self, database_url: Optional[str] = None) -> None:
        """
        Initialize PostgreSQL adapter.

        Args:
            database_url: asyncpg connection URL (defaults to settings)
        """
        super().__init__(database_url or settings.postgres_url)

    def _create_engine(self) -> AsyncEngine:
        return create_async_engine(
            self._database_url,
            echo=settings.DEBUG,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=True,
            isolation_level="READ COMMITTED",
        )
