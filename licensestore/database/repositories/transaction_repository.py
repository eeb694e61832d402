# ==============================================================================
# TRANSACTION REPOSITORY - Append-Only Ledger
# ==============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select

from licensestore.core.constants import TransactionConstants
from licensestore.database.repositories.base_repository import BaseRepository
from licensestore.domain_models.transaction import (
    Transaction,
    TransactionStatus,
    TransactionType,
)
from licensestore.utils.helpers import generate_reference_id


class TransactionRepository(BaseRepository[Transaction]):
    """Ledger appends and lookups."""

    model = Transaction

    async def append(
        self,
        user_id: str,
        type: TransactionType,
        amount: Decimal = Decimal("0.00"),
        points: int = 0,
        payment_method: Optional[str] = None,
        payment_ref: Optional[str] = None,
        description: Optional[str] = None,
        status: TransactionStatus = TransactionStatus.COMPLETED,
    ) -> Transaction:
        """
        Append one ledger entry with a fresh ``TXN-`` reference.

        Returns:
            The flushed Transaction row
        """
        entry = Transaction(
            user_id=user_id,
            type=type,
            amount=amount,
            points=points,
            status=status,
            payment_method=payment_method,
            payment_ref=payment_ref,
            description=description,
            reference_id=generate_reference_id(
                TransactionConstants.REFERENCE_PREFIX,
                TransactionConstants.REFERENCE_LENGTH,
            ),
        )
        return await self.add(entry)

    async def list_for_ref(self, payment_ref: str) -> List[Transaction]:
        result = await self._session.execute(
            select(Transaction)
            .where(Transaction.payment_ref == payment_ref)
            .order_by(Transaction.created_at)
        )
        return list(result.scalars().all())
