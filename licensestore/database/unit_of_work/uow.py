# ==============================================================================
# UNIT OF WORK - Transaction Coordination
# ==============================================================================
# One database transaction shared by every repository, plus callbacks that
# run only after that transaction has committed
# ==============================================================================

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, AsyncContextManager, Awaitable, Callable, List, Optional, Type, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from licensestore.core.exceptions import TransactionError
from licensestore.database.adapters.base_adapter import BaseDatabaseAdapter
from licensestore.database.factory import DatabaseFactory
from licensestore.database.repositories import (
    LicenseRepository,
    NotificationRepository,
    OrderRepository,
    ProductRepository,
    PromoCodeRepository,
    TransactionRepository,
    UserRepository,
    WebhookEventRepository,
)

logger = logging.getLogger(__name__)

PostCommitHook = Callable[[], Union[None, Awaitable[None]]]


class AbstractUnitOfWork(ABC):
    """
    Abstract Unit of Work pattern interface.

    Defines the contract for managing transactional boundaries
    and coordinating repository access.
    """

    @abstractmethod
    async def __aenter__(self) -> "AbstractUnitOfWork":
        """Enter transactional context."""

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Any,
    ) -> None:
        """Exit transactional context."""

    @abstractmethod
    def on_commit(self, hook: PostCommitHook) -> None:
        """Register a callback to run after a successful commit."""


class UnitOfWork(AbstractUnitOfWork):
    """
    Concrete Unit of Work implementation.

    Opens one session (one transaction) on enter and exposes a repository
    per aggregate bound to it. Commits on clean exit, rolls back on any
    exception. Hooks registered with ``on_commit`` run after the commit
    has succeeded and never after a rollback; a failing hook is logged
    and does not affect the caller.

    Attributes:
        session: Active AsyncSession
        users, products, orders, promo_codes, licenses, transactions,
        notifications, webhook_events: Repositories sharing ``session``

    Example:
        >>> async with UnitOfWork() as uow:
        ...     won = await uow.orders.transition(order_id, [PENDING], CANCELLED)
        ...     uow.on_commit(lambda: logger.info("cancelled"))
    """

    def __init__(
        self,
        adapter: Optional[BaseDatabaseAdapter] = None,
    ) -> None:
        """
        Initialize Unit of Work.

        Args:
            adapter: Database adapter (defaults to factory adapter)
        """
        self._adapter = adapter
        self._session_cm: Optional[AsyncContextManager[AsyncSession]] = None
        self._session: Optional[AsyncSession] = None
        self._hooks: List[PostCommitHook] = []
        self._is_active = False

    @property
    def adapter(self) -> BaseDatabaseAdapter:
        """Get database adapter, resolving the factory default if needed."""
        if self._adapter is None:
            self._adapter = DatabaseFactory.get_adapter()
        return self._adapter

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Unit of work is not active")
        return self._session

    @property
    def is_active(self) -> bool:
        """Check if unit of work has an active session."""
        return self._is_active

    # ==========================================================================
    # CONTEXT MANAGEMENT
    # ==========================================================================

    async def __aenter__(self) -> "UnitOfWork":
        """
        Start a new transaction and bind the repositories to it.

        Returns:
            Self for context manager usage
        """
        self._session_cm = self.adapter.session()
        self._session = await self._session_cm.__aenter__()
        self._hooks = []

        self.users = UserRepository(self._session)
        self.products = ProductRepository(self._session)
        self.orders = OrderRepository(self._session)
        self.promo_codes = PromoCodeRepository(self._session)
        self.licenses = LicenseRepository(self._session)
        self.transactions = TransactionRepository(self._session)
        self.notifications = NotificationRepository(self._session)
        self.webhook_events = WebhookEventRepository(self._session)

        self._is_active = True
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Any,
    ) -> None:
        """
        Commit on clean exit, roll back otherwise, then run hooks.

        Raises:
            TransactionError: If the commit itself fails
        """
        try:
            await self._session_cm.__aexit__(exc_type, exc_val, exc_tb)
        except SQLAlchemyError as e:
            if exc_type is not None:
                raise
            logger.error(f"Commit failed: {e}")
            raise TransactionError(
                "Transaction could not be committed",
                details={"error": str(e)},
            ) from e
        finally:
            self._is_active = False
            self._session = None
            self._session_cm = None

        hooks, self._hooks = self._hooks, []
        if exc_type is None:
            await self._run_hooks(hooks)

    # ==========================================================================
    # POST-COMMIT HOOKS
    # ==========================================================================

    def on_commit(self, hook: PostCommitHook) -> None:
        """
        Register a zero-argument callback (sync or async) to run after commit.

        Args:
            hook: Callback; discarded if the transaction rolls back
        """
        if not self._is_active:
            raise RuntimeError("on_commit() requires an active unit of work")
        self._hooks.append(hook)

    @staticmethod
    async def _run_hooks(hooks: List[PostCommitHook]) -> None:
        for hook in hooks:
            try:
                result = hook()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Post-commit hook failed")

