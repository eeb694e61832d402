# ==============================================================================
# TRANSACTION MODEL - Account Ledger
# ==============================================================================
# Append-only record of balance and points movements
# ==============================================================================

from __future__ import annotations

import enum
from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Integer, Numeric, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from licensestore.domain_models.base import SQLBase, TimestampMixin


class TransactionType(str, enum.Enum):
    """Kinds of ledger entries."""
    TOPUP = "TOPUP"
    PURCHASE = "PURCHASE"
    REFUND = "REFUND"
    BONUS = "BONUS"
    POINTS_EARNED = "POINTS_EARNED"
    POINTS_REDEEMED = "POINTS_REDEEMED"


class TransactionStatus(str, enum.Enum):
    """Status states for transactions."""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class Transaction(SQLBase, TimestampMixin):
    """
    Ledger entry for a user's balance or points.

    Rows are inserted in the same transaction as the counter change
    they describe and are never updated afterwards.

    Attributes:
        user_id: Account holder
        type: Entry kind
        amount: Money moved (0 for points-only entries)
        points: Points moved (0 for money-only entries)
        status: Entry status
        payment_method: BALANCE, EXTERNAL, ...
        payment_ref: Triggering order id
        reference_id: Human-facing unique reference (TXN-XXXXXXXXXXXX)
    """

    __tablename__ = "transactions"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    type: Mapped[TransactionType] = mapped_column(
        SQLEnum(TransactionType),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    points: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    status: Mapped[TransactionStatus] = mapped_column(
        SQLEnum(TransactionStatus),
        default=TransactionStatus.COMPLETED,
        nullable=False,
    )
    payment_method: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    payment_ref: Mapped[Optional[str]] = mapped_column(
        String(255),
        index=True,
        nullable=True,
    )
    reference_id: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Transaction(ref={self.reference_id}, type={self.type}, amount={self.amount})>"
