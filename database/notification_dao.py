from database.db_manager import DatabaseManager
from models.notification import Notification


class NotificationDAO:
    """Fire-and-forget sink for (title, body, severity) notifications."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def add(self, notification: Notification, commit: bool = True) -> int:
        conn = self._db.get_connection()
        cursor = conn.execute(
            "INSERT INTO notifications(title, body, severity, key) VALUES (?, ?, ?, ?)",
            (notification.title, notification.body, notification.severity, notification.key),
        )
        if commit:
            conn.commit()
        return cursor.lastrowid

    def get_unread(self) -> list[Notification]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM notifications WHERE is_read = 0 ORDER BY id"
        ).fetchall()
        return [
            Notification(
                title=row["title"], body=row["body"],
                severity=row["severity"], key=row["key"],
            )
            for row in rows
        ]

    def mark_all_read(self) -> None:
        conn = self._db.get_connection()
        conn.execute("UPDATE notifications SET is_read = 1 WHERE is_read = 0")
        conn.commit()
