# ==============================================================================
# USER MODEL - Customer Account
# ==============================================================================
# Account holder with a spendable balance and reward points
# ==============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, CheckConstraint, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from licensestore.domain_models.base import SQLBase, TimestampMixin

if TYPE_CHECKING:
    from licensestore.domain_models.license import License
    from licensestore.domain_models.order import Order


class User(SQLBase, TimestampMixin):
    """
    Customer account.

    ``balance`` and ``points`` are shared counters: they are only ever
    changed through single conditional UPDATE statements (see
    ``UserRepository``), never read-modify-written in Python.

    Attributes:
        username: Display name
        email: Contact address for delivery notifications
        balance: Internal wallet balance, never negative
        points: Loyalty points balance
        is_banned: Account suspension flag
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_users_balance_non_negative"),
        CheckConstraint("points >= 0", name="ck_users_points_non_negative"),
    )

    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
    )

    # Wallet
    balance: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    points: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    is_banned: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Relationships
    orders: Mapped[List["Order"]] = relationship(
        "Order",
        back_populates="user",
    )
    licenses: Mapped[List["License"]] = relationship(
        "License",
        back_populates="user",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
