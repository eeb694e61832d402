# ==============================================================================
# WEBHOOK EVENT MODEL - Gateway Delivery Dedupe
# ==============================================================================

from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from licensestore.domain_models.base import CreatedAtMixin, SQLBase


class ProcessedWebhookEvent(SQLBase, CreatedAtMixin):
    """
    Gateway event id that has already been handled.

    The unique constraint on ``event_id`` turns redelivered events into
    no-ops.
    """

    __tablename__ = "processed_webhook_events"

    event_id: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    event_type: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    order_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
    )
