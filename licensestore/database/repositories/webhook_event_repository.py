# ==============================================================================
# WEBHOOK EVENT REPOSITORY - Delivery Dedupe
# ==============================================================================

from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import IntegrityError

from licensestore.database.repositories.base_repository import BaseRepository
from licensestore.domain_models.webhook_event import ProcessedWebhookEvent


class WebhookEventRepository(BaseRepository[ProcessedWebhookEvent]):
    model = ProcessedWebhookEvent

    async def try_record(
        self,
        event_id: str,
        event_type: Optional[str] = None,
        order_id: Optional[str] = None,
    ) -> bool:
        """
        Record a gateway event id.

        Returns:
            False if the event was already processed
        """
        event = ProcessedWebhookEvent(
            event_id=event_id,
            event_type=event_type,
            order_id=order_id,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(event)
        except IntegrityError:
            return False
        return True
