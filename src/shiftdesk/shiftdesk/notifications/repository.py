from __future__ import annotations

from typing import Protocol, Sequence

from ..core.enums import RecipientType
from .model import NewNotification, Notification


class NotificationRepository(Protocol):
    def create_many(self, company_id: int, notifications: Sequence[NewNotification]) -> int:
        raise NotImplementedError

    def list_for_recipient(
        self,
        company_id: int,
        *,
        recipient_type: RecipientType,
        recipient_id: int,
        unread_only: bool = False,
        limit: int = 50,
    ) -> Sequence[Notification]:
        raise NotImplementedError

    def mark_read(self, company_id: int, notification_id: int) -> bool:
        raise NotImplementedError
