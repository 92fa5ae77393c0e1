from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import NotificationType, RecipientType


@dataclass(frozen=True)
class NewNotification:
    recipient_id: int
    recipient_type: RecipientType
    type: NotificationType
    title: str
    body: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Notification:
    notification_id: int
    company_id: int
    recipient_id: int
    recipient_type: RecipientType
    type: NotificationType
    title: str
    body: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "notification_id": self.notification_id,
            "recipient_id": self.recipient_id,
            "recipient_type": self.recipient_type.value,
            "type": self.type.value,
            "title": self.title,
            "body": self.body,
            "metadata": dict(self.metadata),
            "read": self.read_at is not None,
        }
