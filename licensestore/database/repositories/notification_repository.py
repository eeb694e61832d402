# ==============================================================================
# NOTIFICATION REPOSITORY - In-App Inbox Rows
# ==============================================================================

from __future__ import annotations

from typing import List

from sqlalchemy import select

from licensestore.database.repositories.base_repository import BaseRepository
from licensestore.domain_models.notification import Notification, NotificationType


class NotificationRepository(BaseRepository[Notification]):
    model = Notification

    async def push(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.SYSTEM,
    ) -> Notification:
        return await self.add(
            Notification(user_id=user_id, title=title, message=message, type=type)
        )

    async def list_for_user(self, user_id: str) -> List[Notification]:
        result = await self._session.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
        )
        return list(result.scalars().all())
