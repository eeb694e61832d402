# ==============================================================================
# DATABASE FACTORY - Process-Wide Store
# ==============================================================================
# Builds the adapter selected by DATABASE_TYPE and holds it for the lifetime
# of the process; services and units of work fall back to it
# ==============================================================================

from __future__ import annotations

import logging
from typing import Dict, Optional, Type

from licensestore.core.settings import DatabaseType, settings
from licensestore.database.adapters.base_adapter import BaseDatabaseAdapter
from licensestore.database.adapters.postgresql_adapter import PostgreSQLAdapter
from licensestore.database.adapters.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

ADAPTERS: Dict[DatabaseType, Type[BaseDatabaseAdapter]] = {
    DatabaseType.SQLITE: SQLiteAdapter,
    DatabaseType.POSTGRESQL: PostgreSQLAdapter,
}


class DatabaseFactory:
    """
    Owner of the single order store.

    ``initialize`` is called from the application lifespan (or a test
    fixture); everything else reads the adapter through ``get_adapter``.
    """

    _adapter: Optional[BaseDatabaseAdapter] = None

    @classmethod
    async def initialize(
        cls,
        db_type: Optional[DatabaseType] = None,
        database_url: Optional[str] = None,
    ) -> BaseDatabaseAdapter:
        """
        Connect the store and create its tables.

        Calling it again while connected returns the existing adapter.

        Raises:
            ValueError: Unknown database type
            DatabaseError: The store could not be reached
        """
        if cls._adapter is not None:
            return cls._adapter

        db_type = db_type or settings.DATABASE_TYPE
        adapter_cls = ADAPTERS.get(db_type)
        if adapter_cls is None:
            raise ValueError(f"Unsupported database type: {db_type}")

        adapter = adapter_cls(database_url=database_url)
        await adapter.connect()
        cls._adapter = adapter
        logger.info(f"Order store ready on {adapter.name}")
        return adapter

    @classmethod
    def get_adapter(cls) -> BaseDatabaseAdapter:
        if cls._adapter is None:
            raise RuntimeError("Order store is not initialized; call DatabaseFactory.initialize()")
        return cls._adapter

    @classmethod
    async def health_check(cls) -> bool:
        if cls._adapter is None:
            return False
        return await cls._adapter.health_check()

    @classmethod
    async def shutdown(cls) -> None:
        adapter, cls._adapter = cls._adapter, None
        if adapter is not None:
            await adapter.disconnect()
            logger.info(f"Order store on {adapter.name} closed")

    @classmethod
    def reset(cls) -> None:
        """Forget the adapter without disconnecting it."""
        cls._adapter = None
