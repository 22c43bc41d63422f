from database.db_manager import DatabaseManager
from models.recurring_history import RecurringHistoryEntry


class HistoryDAO:
    """Append-only store of recurring item due-cycle outcomes."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> RecurringHistoryEntry:
        return RecurringHistoryEntry(
            id=row["id"],
            recurring_item_id=row["recurring_item_id"],
            expected_date=row["expected_date"],
            expected_amount=row["expected_amount"],
            actual_amount=row["actual_amount"],
            transaction_id=row["transaction_id"],
            status=row["status"],
            variance_amount_pct=row["variance_amount_pct"],
            created_at=row["created_at"],
        )

    def append(self, entry: RecurringHistoryEntry, commit: bool = True) -> RecurringHistoryEntry:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO recurring_item_history
               (recurring_item_id, expected_date, expected_amount, actual_amount,
                transaction_id, status, variance_amount_pct)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                entry.recurring_item_id, entry.expected_date, entry.expected_amount,
                entry.actual_amount, entry.transaction_id, entry.status,
                entry.variance_amount_pct,
            ),
        )
        if commit:
            conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def get_by_id(self, entry_id: int) -> RecurringHistoryEntry | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM recurring_item_history WHERE id = ?", (entry_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_for_item(self, item_id: int) -> list[RecurringHistoryEntry]:
        """Newest expected_date first."""
        conn = self._db.get_connection()
        rows = conn.execute(
            """SELECT * FROM recurring_item_history
               WHERE recurring_item_id = ?
               ORDER BY expected_date DESC, id DESC""",
            (item_id,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def count_for_item(self, item_id: int, status: str | None = None) -> int:
        conn = self._db.get_connection()
        sql = "SELECT COUNT(*) AS cnt FROM recurring_item_history WHERE recurring_item_id = ?"
        params: list = [item_id]
        if status:
            sql += " AND status = ?"
            params.append(status)
        return conn.execute(sql, params).fetchone()["cnt"]
