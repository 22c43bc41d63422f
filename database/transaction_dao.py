from typing import Optional
from database.db_manager import DatabaseManager
from models.transaction import FinancialTransaction


class TransactionDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> FinancialTransaction:
        return FinancialTransaction(
            id=row["id"],
            transaction_type=row["transaction_type"],
            status=row["status"],
            amount=row["amount"],
            currency=row["currency"],
            transaction_date=row["transaction_date"],
            context=row["context"],
            category_id=row["category_id"],
            bank_account_id=row["bank_account_id"],
            description=row["description"],
            payee_name=row["payee_name"],
            recurring_item_id=row["recurring_item_id"],
            created_at=row["created_at"],
        )

    def get_all(self, include_void: bool = False) -> list[FinancialTransaction]:
        conn = self._db.get_connection()
        sql = "SELECT * FROM transactions"
        if not include_void:
            sql += " WHERE status != 'void'"
        rows = conn.execute(
            sql + " ORDER BY transaction_date ASC, id ASC"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, tx_id: int) -> Optional[FinancialTransaction]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM transactions WHERE id = ?", (tx_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_recurring_item(self, item_id: int) -> list[FinancialTransaction]:
        conn = self._db.get_connection()
        rows = conn.execute(
            """SELECT * FROM transactions WHERE recurring_item_id = ?
               ORDER BY transaction_date ASC, id ASC""",
            (item_id,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def create(self, tx: FinancialTransaction, commit: bool = True) -> FinancialTransaction:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO transactions
               (transaction_type, status, amount, currency, transaction_date,
                context, category_id, bank_account_id, description, payee_name,
                recurring_item_id)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                tx.transaction_type, tx.status, tx.amount, tx.currency,
                tx.transaction_date, tx.context, tx.category_id,
                tx.bank_account_id, tx.description, tx.payee_name,
                tx.recurring_item_id,
            ),
        )
        if commit:
            conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def set_status(self, tx_id: int, status: str):
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE transactions SET status = ? WHERE id = ?", (status, tx_id)
        )
        conn.commit()
