from typing import Optional
from database.db_manager import DatabaseManager
from models.recurring_item import RecurringItem


class RecurringDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> RecurringItem:
        return RecurringItem(
            id=row["id"],
            name=row["name"],
            item_type=row["item_type"],
            amount=row["amount"],
            currency=row["currency"],
            frequency=row["frequency"],
            start_date=row["start_date"],
            end_date=row["end_date"],
            next_due_date=row["next_due_date"],
            context=row["context"],
            auto_create_transaction=bool(row["auto_create_transaction"]),
            is_active=bool(row["is_active"]),
            category_id=row["category_id"],
            bank_account_id=row["bank_account_id"],
            payee_name=row["payee_name"],
            description=row["description"],
            last_generated_at=row["last_generated_at"],
            last_processed_date=row["last_processed_date"],
            category_name=row["category_name"] if "category_name" in row.keys() else "",
            account_name=row["account_name"] if "account_name" in row.keys() else "",
        )

    def _select(self) -> str:
        return """
            SELECT r.*,
                   COALESCE(c.name, '') AS category_name,
                   COALESCE(a.name, '') AS account_name
            FROM recurring_items r
            LEFT JOIN categories c ON r.category_id = c.id
            LEFT JOIN bank_accounts a ON r.bank_account_id = a.id
        """

    def get_all(self) -> list[RecurringItem]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " ORDER BY r.name"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_active(self) -> list[RecurringItem]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " WHERE r.is_active = 1 ORDER BY r.name"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_due(self, as_of: str) -> list[RecurringItem]:
        """Active items whose cursor is on or before as_of (YYYY-MM-DD), oldest first.

        Items whose cursor has moved past their end_date are finished and
        never returned.
        """
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + """
            WHERE r.is_active = 1 AND r.next_due_date <= ?
              AND (r.end_date IS NULL OR r.next_due_date <= r.end_date)
            ORDER BY r.next_due_date, r.id
            """,
            (as_of,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, item_id: int) -> Optional[RecurringItem]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " WHERE r.id = ?", (item_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        name: str,
        item_type: str,
        amount: float,
        frequency: str,
        start_date: str,
        next_due_date: str,
        context: str = "business",
        currency: str = "ZAR",
        end_date: str | None = None,
        auto_create_transaction: bool = False,
        category_id: int | None = None,
        bank_account_id: int | None = None,
        payee_name: str = "",
        description: str = "",
    ) -> RecurringItem:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO recurring_items
               (name, item_type, amount, currency, frequency, start_date,
                end_date, next_due_date, context, auto_create_transaction,
                category_id, bank_account_id, payee_name, description)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                name, item_type, amount, currency, frequency, start_date,
                end_date, next_due_date, context, 1 if auto_create_transaction else 0,
                category_id, bank_account_id, payee_name, description,
            ),
        )
        conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def update(
        self,
        item_id: int,
        name: str,
        item_type: str,
        amount: float,
        frequency: str,
        start_date: str,
        next_due_date: str,
        context: str = "business",
        currency: str = "ZAR",
        end_date: str | None = None,
        auto_create_transaction: bool = False,
        category_id: int | None = None,
        bank_account_id: int | None = None,
        payee_name: str = "",
        description: str = "",
        is_active: bool = True,
    ) -> RecurringItem:
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE recurring_items SET
               name=?, item_type=?, amount=?, currency=?, frequency=?,
               start_date=?, end_date=?, next_due_date=?, context=?,
               auto_create_transaction=?, category_id=?, bank_account_id=?,
               payee_name=?, description=?, is_active=?,
               updated_at=datetime('now')
               WHERE id=?""",
            (
                name, item_type, amount, currency, frequency,
                start_date, end_date, next_due_date, context,
                1 if auto_create_transaction else 0, category_id, bank_account_id,
                payee_name, description, 1 if is_active else 0, item_id,
            ),
        )
        conn.commit()
        return self.get_by_id(item_id)

    def set_active(self, item_id: int, is_active: bool):
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE recurring_items SET is_active = ?, updated_at = datetime('now') WHERE id = ?",
            (1 if is_active else 0, item_id),
        )
        conn.commit()

    def unit_of_work(self):
        return self._db.unit_of_work()

    def claim_cycle(
        self,
        item_id: int,
        expected_due: str,
        new_due: str,
        generated_at: str,
        processed_date: str,
        commit: bool = True,
    ) -> bool:
        """Advance the cursor only if it still reads expected_due.

        Returns False when another session already moved it, in which case
        nothing was written.
        """
        conn = self._db.get_connection()
        cursor = conn.execute(
            """UPDATE recurring_items
               SET next_due_date = ?, last_generated_at = ?,
                   last_processed_date = ?, updated_at = datetime('now')
               WHERE id = ? AND next_due_date = ? AND next_due_date < ?""",
            (new_due, generated_at, processed_date, item_id, expected_due, new_due),
        )
        if commit:
            conn.commit()
        return cursor.rowcount == 1
