"""
SQLite-based in-app notification inbox.

Records are written by the notification dispatcher and read back by
whatever presents the inbox to employees and HR staff.
"""

import sqlite3
from datetime import datetime
from functools import lru_cache
from typing import Optional

from ..claims.schema import Notification, NotificationCategory, RecipientRole
from .database import Database, from_iso, get_database


class NotificationStore:
    """Persist and query in-app notifications."""

    def __init__(self, db: Database):
        self.db = db

    def create(
        self,
        title: str,
        body: str,
        recipient_id: int,
        recipient_role: RecipientRole,
        category: NotificationCategory = NotificationCategory.CLAIM,
    ) -> Notification:
        """Store a new unread notification for a recipient."""
        notification = Notification(
            title=title,
            body=body,
            recipient_id=recipient_id,
            recipient_role=recipient_role,
            category=category,
            created_at=datetime.now(),
        )
        with self.db.connection() as conn:
            cursor = conn.execute("""
                INSERT INTO notifications (
                    title, body, recipient_id, recipient_role, category, is_read, created_at
                ) VALUES (?, ?, ?, ?, ?, 0, ?)
            """, (
                notification.title,
                notification.body,
                notification.recipient_id,
                notification.recipient_role.value,
                notification.category.value,
                notification.created_at.isoformat(),
            ))
            conn.commit()
            notification.id = cursor.lastrowid
        return notification

    def get(self, notification_id: int) -> Optional[Notification]:
        with self.db.connection() as conn:
            row = conn.execute(
                "SELECT * FROM notifications WHERE id = ?", (notification_id,)
            ).fetchone()
        return _row_to_notification(row) if row else None

    def list_for_recipient(
        self,
        recipient_id: int,
        recipient_role: RecipientRole,
        unread_only: bool = False,
    ) -> list[Notification]:
        """Newest first."""
        query = "SELECT * FROM notifications WHERE recipient_id = ? AND recipient_role = ?"
        if unread_only:
            query += " AND is_read = 0"
        query += " ORDER BY id DESC"

        with self.db.connection() as conn:
            rows = conn.execute(query, (recipient_id, recipient_role.value)).fetchall()
        return [_row_to_notification(row) for row in rows]

    def mark_read(self, notification_id: int) -> bool:
        """
        Mark a notification as read.

        Returns:
            True if updated, False if notification not found
        """
        with self.db.connection() as conn:
            result = conn.execute(
                "UPDATE notifications SET is_read = 1 WHERE id = ?", (notification_id,)
            )
            conn.commit()
            return result.rowcount > 0

    def count_unread(self, recipient_id: int, recipient_role: RecipientRole) -> int:
        with self.db.connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM notifications "
                "WHERE recipient_id = ? AND recipient_role = ? AND is_read = 0",
                (recipient_id, recipient_role.value),
            ).fetchone()
            return row[0]


def _row_to_notification(row: sqlite3.Row) -> Notification:
    return Notification(
        id=row["id"],
        title=row["title"],
        body=row["body"],
        recipient_id=row["recipient_id"],
        recipient_role=RecipientRole(row["recipient_role"]),
        category=NotificationCategory(row["category"]),
        read=bool(row["is_read"]),
        created_at=from_iso(row["created_at"]),
    )


@lru_cache
def get_notification_store() -> NotificationStore:
    """Get the default notification store (singleton)."""
    return NotificationStore(get_database())
