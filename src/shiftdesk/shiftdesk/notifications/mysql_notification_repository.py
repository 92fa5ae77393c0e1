from __future__ import annotations

from typing import Sequence

from ..core.enums import NotificationType, RecipientType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, load_json
from .model import NewNotification, Notification
from .repository import NotificationRepository


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_many(self, company_id: int, notifications: Sequence[NewNotification]) -> int:
        if not notifications:
            return 0
        rows = [
            (
                int(company_id),
                int(n.recipient_id),
                n.recipient_type.value,
                n.type.value,
                n.title,
                n.body,
                dump_json(n.metadata),
            )
            for n in notifications
        ]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO notifications(company_id, recipient_id, recipient_type, type, title, body, metadata)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                rows,
            )
            return len(rows)

    def list_for_recipient(
        self,
        company_id: int,
        *,
        recipient_type: RecipientType,
        recipient_id: int,
        unread_only: bool = False,
        limit: int = 50,
    ) -> Sequence[Notification]:
        where = "company_id=%s AND recipient_type=%s AND recipient_id=%s"
        if unread_only:
            where += " AND read_at IS NULL"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT notification_id, company_id, recipient_id, recipient_type, type, title, body,
                       metadata, read_at, created_at
                FROM notifications
                WHERE {where}
                ORDER BY created_at DESC, notification_id DESC
                LIMIT %s
                """,
                (int(company_id), recipient_type.value, int(recipient_id), int(limit)),
            )
            return [
                Notification(
                    notification_id=int(r["notification_id"]),
                    company_id=int(r["company_id"]),
                    recipient_id=int(r["recipient_id"]),
                    recipient_type=RecipientType(r["recipient_type"]),
                    type=NotificationType(r["type"]),
                    title=r["title"],
                    body=r.get("body") or "",
                    metadata=load_json(r.get("metadata")),
                    read_at=r.get("read_at"),
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]

    def mark_read(self, company_id: int, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET read_at=NOW() WHERE company_id=%s AND notification_id=%s AND read_at IS NULL",
                (int(company_id), int(notification_id)),
            )
            return cur.rowcount > 0
