from typing import Optional
from database.db_manager import DatabaseManager
from models.budget import Budget


class BudgetDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row, spent: float = 0.0) -> Budget:
        return Budget(
            id=row["id"],
            category_id=row["category_id"],
            category_name=row["category_name"] if "category_name" in row.keys() else "",
            period_type=row["period_type"],
            period_start=row["period_start"],
            amount=row["amount"],
            rollover=bool(row["rollover"]),
            rollover_amount=row["rollover_amount"],
            currency=row["currency"],
            context=row["context"],
            spent_amount=spent,
        )

    def _select(self) -> str:
        return """
            SELECT b.*, COALESCE(c.name, '') AS category_name
            FROM budgets b
            LEFT JOIN categories c ON b.category_id = c.id
        """

    def get_all(self) -> list[Budget]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " ORDER BY b.period_start DESC, c.name"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, budget_id: int) -> Optional[Budget]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " WHERE b.id = ?", (budget_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_period_start(self, period_start: str) -> list[Budget]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " WHERE b.period_start = ? ORDER BY c.name",
            (period_start,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def create(
        self,
        category_id: int,
        period_type: str,
        period_start: str,
        amount: float,
        rollover: bool = False,
        rollover_amount: float = 0.0,
        currency: str = "ZAR",
        context: str = "business",
        commit: bool = True,
    ) -> Budget:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO budgets
               (category_id, period_type, period_start, amount, rollover,
                rollover_amount, currency, context)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                category_id, period_type, period_start, amount,
                1 if rollover else 0, rollover_amount, currency, context,
            ),
        )
        if commit:
            conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def update_rollover(self, budget_id: int, rollover_amount: float):
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE budgets SET rollover_amount = ? WHERE id = ?",
            (rollover_amount, budget_id),
        )
        conn.commit()

    def delete(self, budget_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM budgets WHERE id = ?", (budget_id,))
        conn.commit()
