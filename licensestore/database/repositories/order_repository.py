# ==============================================================================
# ORDER REPOSITORY - Guarded Status Transitions
# ==============================================================================
# Every status change is one conditional UPDATE whose affected row count
# tells the caller whether it won the transition
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import selectinload

from licensestore.database.repositories.base_repository import BaseRepository
from licensestore.domain_models.order import Order, OrderItem, OrderStatus
from licensestore.utils.helpers import to_decimal


class OrderRepository(BaseRepository[Order]):
    """Order persistence and state machine guards."""

    model = Order

    # ==========================================================================
    # READS
    # ==========================================================================

    async def get_with_items(self, order_id: str) -> Optional[Order]:
        """
        Load an order with items, products and licenses.

        Always re-reads the row so values changed by guarded updates in
        this transaction are visible.
        """
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .options(
                selectinload(Order.items).selectinload(OrderItem.product),
                selectinload(Order.licenses),
            )
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def get_by_payment_ref(self, payment_ref: str) -> Optional[Order]:
        return await self.find_one(payment_ref=payment_ref)

    async def list_for_user(
        self,
        user_id: str,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Order]:
        """List a user's orders, newest first."""
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .options(
                selectinload(Order.items).selectinload(OrderItem.product),
                selectinload(Order.licenses),
            )
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def completed_spend(self, user_id: str) -> Decimal:
        """Sum of totals over the user's COMPLETED orders."""
        stmt = select(func.coalesce(func.sum(Order.total), 0)).where(
            Order.user_id == user_id,
            Order.status == OrderStatus.COMPLETED,
        )
        result = await self._session.execute(stmt)
        return to_decimal(result.scalar())

    # ==========================================================================
    # GUARDED TRANSITIONS
    # ==========================================================================

    async def transition(
        self,
        order_id: str,
        from_statuses: Iterable[OrderStatus],
        to_status: OrderStatus,
        **values: Any,
    ) -> bool:
        """
        Move an order to ``to_status`` only if it is in ``from_statuses``.

        Args:
            order_id: Order to transition
            from_statuses: Statuses the order must currently have
            to_status: Target status
            **values: Extra columns to set in the same statement

        Returns:
            True if this call performed the transition
        """
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status.in_(list(from_statuses)))
            .values(status=to_status, **values)
            .returning(Order.id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def cancel_stale(self, created_before: datetime) -> int:
        """
        Cancel PENDING orders created before ``created_before``.

        Returns:
            Number of orders cancelled
        """
        stmt = (
            update(Order)
            .where(
                Order.status == OrderStatus.PENDING,
                Order.created_at < created_before,
            )
            .values(status=OrderStatus.CANCELLED)
            .returning(Order.id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return len(result.scalars().all())

    async def set_payment_ref(self, order_id: str, payment_ref: str) -> bool:
        stmt = (
            update(Order)
            .where(Order.id == order_id)
            .values(payment_ref=payment_ref)
            .returning(Order.id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None
