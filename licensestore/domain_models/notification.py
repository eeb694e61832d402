# ==============================================================================
# NOTIFICATION MODEL - In-App Inbox
# ==============================================================================

from __future__ import annotations

import enum

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from licensestore.domain_models.base import SQLBase, TimestampMixin


class NotificationType(str, enum.Enum):
    UPDATE = "UPDATE"
    PROMOTION = "PROMOTION"
    SYSTEM = "SYSTEM"
    ORDER = "ORDER"


class Notification(SQLBase, TimestampMixin):
    """Inbox row shown to the user in the storefront."""

    __tablename__ = "notifications"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(
        SQLEnum(NotificationType),
        default=NotificationType.SYSTEM,
        nullable=False,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
