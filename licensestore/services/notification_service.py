# ==============================================================================
# NOTIFICATION SERVICE - Post-Commit Delivery
# ==============================================================================
# Sink protocol for order and license notifications plus a dispatcher that
# runs sink calls in the background once a transaction has committed
# ==============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol, Set, runtime_checkable

from licensestore.schemas.license import LicenseResponse
from licensestore.schemas.order import OrderResponse
from licensestore.schemas.user import UserSnapshot

logger = logging.getLogger(__name__)


@runtime_checkable
class NotificationSink(Protocol):
    """Outbound notification transport (email, chat, push)."""

    async def notify_order_confirmed(
        self,
        order: OrderResponse,
        user: UserSnapshot,
    ) -> None:
        ...

    async def notify_license_issued(
        self,
        user: UserSnapshot,
        license: LicenseResponse,
    ) -> None:
        ...


class LoggingNotificationSink:
    """Default sink that writes notifications to the application log."""

    async def notify_order_confirmed(
        self,
        order: OrderResponse,
        user: UserSnapshot,
    ) -> None:
        logger.info(
            f"Order {order.id} confirmed for {user.username}: "
            f"{order.item_count} item(s), total {order.total}"
        )

    async def notify_license_issued(
        self,
        user: UserSnapshot,
        license: LicenseResponse,
    ) -> None:
        logger.info(
            f"License {license.license_key} issued to {user.username} "
            f"for product {license.product_id}"
        )


class PostCommitDispatcher:
    """
    Runs sink calls as background tasks.

    Failures are logged and never propagate to whoever scheduled them.

    Example:
        >>> dispatcher = PostCommitDispatcher()
        >>> uow.on_commit(lambda: dispatcher.dispatch(lambda: sink.notify_...))
        >>> await dispatcher.drain()  # at shutdown
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(
        self,
        coro_factory: Callable[[], Awaitable[None]],
        name: Optional[str] = None,
    ) -> asyncio.Task:
        """
        Schedule ``coro_factory()`` on the running loop.

        Args:
            coro_factory: Zero-argument callable returning the coroutine
            name: Task name used in failure logs

        Returns:
            The created task
        """
        task = asyncio.ensure_future(self._run(coro_factory, name))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(
        self,
        coro_factory: Callable[[], Awaitable[None]],
        name: Optional[str],
    ) -> None:
        try:
            await coro_factory()
        except Exception:
            logger.exception(f"Notification delivery failed: {name or 'unnamed'}")

    async def drain(self) -> None:
        """Wait for every outstanding notification task."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
