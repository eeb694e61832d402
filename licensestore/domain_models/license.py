# ==============================================================================
# LICENSE MODEL - Issued License Keys
# ==============================================================================
# One row per purchased unit, created exactly once at order completion
# ==============================================================================

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from licensestore.core.constants import LicenseConstants
from licensestore.domain_models.base import SQLBase, TimestampMixin

if TYPE_CHECKING:
    from licensestore.domain_models.order import Order
    from licensestore.domain_models.product import Product
    from licensestore.domain_models.user import User


class LicenseStatus(str, enum.Enum):
    """License validity states."""
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"


class License(SQLBase, TimestampMixin):
    """
    License key bound to a user, product and the order that paid for it.

    Attributes:
        license_key: Unique key in XXXX-XXXX-XXXX-XXXX form
        status: ACTIVE, EXPIRED or REVOKED
        ip_whitelist: IP addresses allowed to activate the key
        max_ips: Maximum whitelist size
        expires_at: Optional expiry
    """

    __tablename__ = "licenses"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    product_id: Mapped[str] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"),
        index=True,
        nullable=False,
    )
    order_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("orders.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )

    license_key: Mapped[str] = mapped_column(
        String(32),
        unique=True,
        index=True,
        nullable=False,
    )
    status: Mapped[LicenseStatus] = mapped_column(
        SQLEnum(LicenseStatus),
        default=LicenseStatus.ACTIVE,
        nullable=False,
    )
    ip_whitelist: Mapped[Optional[List[str]]] = mapped_column(
        JSON,
        nullable=True,
    )
    max_ips: Mapped[int] = mapped_column(
        Integer,
        default=LicenseConstants.DEFAULT_MAX_IPS,
        nullable=False,
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="licenses")
    product: Mapped["Product"] = relationship("Product", back_populates="licenses")
    order: Mapped[Optional["Order"]] = relationship("Order", back_populates="licenses")

    def __repr__(self) -> str:
        return f"<License(key={self.license_key}, status={self.status})>"
