from typing import Optional
from database.db_manager import DatabaseManager
from models.account import BankAccount


class AccountDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> BankAccount:
        return BankAccount(
            id=row["id"],
            name=row["name"],
            current_balance=row["current_balance"],
            currency=row["currency"],
            context=row["context"],
            is_active=bool(row["is_active"]),
            created_at=row["created_at"],
        )

    def get_all(self) -> list[BankAccount]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM bank_accounts ORDER BY name"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_active(self) -> list[BankAccount]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM bank_accounts WHERE is_active = 1 ORDER BY name"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, account_id: int) -> Optional[BankAccount]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM bank_accounts WHERE id = ?", (account_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_name(self, name: str) -> Optional[BankAccount]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM bank_accounts WHERE name = ?", (name,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        name: str,
        current_balance: float = 0.0,
        currency: str = "ZAR",
        context: str = "business",
    ) -> BankAccount:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO bank_accounts(name, current_balance, currency, context)
               VALUES (?, ?, ?, ?)""",
            (name, current_balance, currency, context),
        )
        conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def update_balance(self, account_id: int, current_balance: float):
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE bank_accounts SET current_balance = ? WHERE id = ?",
            (current_balance, account_id),
        )
        conn.commit()

    def set_active(self, account_id: int, is_active: bool):
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE bank_accounts SET is_active = ? WHERE id = ?",
            (1 if is_active else 0, account_id),
        )
        conn.commit()
