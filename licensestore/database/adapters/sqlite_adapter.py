# ==============================================================================
# SQLITE ADAPTER - SQLAlchemy Async with aiosqlite
# ==============================================================================
# Lightweight database adapter for development and testing
# Transactions start with BEGIN IMMEDIATE so concurrent writers queue on
# the busy timeout instead of failing on lock upgrade
# ==============================================================================

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from licensestore.core.settings import settings
from licensestore.database.adapters.base_adapter import BaseDatabaseAdapter

logger = logging.getLogger(__name__)


class SQLiteAdapter(BaseDatabaseAdapter):
    """
    SQLite database adapter using SQLAlchemy async with aiosqlite.

    Ideal for development, testing, and small-scale deployments.

    Features:
        - Async SQLite operations using aiosqlite
        - Foreign keys enforced on every connection
        - Write lock taken at transaction start (BEGIN IMMEDIATE)
        - Busy timeout from ``SQLITE_BUSY_TIMEOUT``

    Example:
        >>> adapter = SQLiteAdapter("sqlite+aiosqlite:///./store.db")
        >>> await adapter.connect()  # Creates tables automatically
    """

    name = "SQLite"

    def __init__(
        self,
        database_url: Optional[str] = None,
        busy_timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize SQLite adapter.

        Args:
            database_url: SQLite connection URL (defaults to settings)
            busy_timeout: Seconds to wait for the write lock
        """
        # Ensure async driver is used
        url = database_url or settings.SQLITE_URL
        if "sqlite://" in url and "aiosqlite" not in url:
            url = url.replace("sqlite://", "sqlite+aiosqlite://")

        super().__init__(url)
        self._busy_timeout = busy_timeout or settings.SQLITE_BUSY_TIMEOUT

    def _create_engine(self) -> AsyncEngine:
        engine = create_async_engine(
            self._database_url,
            echo=settings.DEBUG,
            connect_args={
                "check_same_thread": False,
                "timeout": self._busy_timeout,
            },
        )
        self._install_transaction_hooks(engine)
        return engine

    @staticmethod
    def _install_transaction_hooks(engine: AsyncEngine) -> None:
        """Take over BEGIN from the driver and issue BEGIN IMMEDIATE."""

        @event.listens_for(engine.sync_engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            # Disable the driver's implicit transaction handling
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine.sync_engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
