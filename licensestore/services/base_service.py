# ==============================================================================
# BASE SERVICE - Shared Service Plumbing
# ==============================================================================
# Adapter resolution and unit-of-work construction for business services
# ==============================================================================

from __future__ import annotations

from typing import Optional

from licensestore.database.adapters.base_adapter import BaseDatabaseAdapter
from licensestore.database.factory import DatabaseFactory
from licensestore.database.unit_of_work.uow import UnitOfWork


class BaseService:
    """
    Base class for services that own transactions.

    Services receive an adapter (or fall back to the factory default) and
    open one ``UnitOfWork`` per logical operation. Operations that compose
    with a caller's transaction accept an optional ``uow`` instead.

    Attributes:
        _adapter: Database adapter for operations

    Example:
        >>> class OrderService(BaseService):
        ...     async def cancel(self, order_id):
        ...         async with self.unit_of_work() as uow:
        ...             ...
    """

    def __init__(self, adapter: Optional[BaseDatabaseAdapter] = None) -> None:
        """
        Initialize service.

        Args:
            adapter: Database adapter instance (defaults to factory adapter)
        """
        self._adapter = adapter

    @property
    def adapter(self) -> BaseDatabaseAdapter:
        if self._adapter is None:
            self._adapter = DatabaseFactory.get_adapter()
        return self._adapter

    def unit_of_work(self) -> UnitOfWork:
        """Create a new unit of work on this service's adapter."""
        return UnitOfWork(self.adapter)
