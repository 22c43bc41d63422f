from dataclasses import dataclass
from typing import Optional
from utils.frequency import to_monthly_equivalent


@dataclass
class RecurringItem:
    id: int
    name: str
    item_type: str          # 'expense' | 'income' | 'retainer'
    amount: float
    frequency: str          # 'weekly' | 'biweekly' | 'monthly' | 'quarterly' | 'yearly'
    start_date: str         # 'YYYY-MM-DD'
    next_due_date: str      # schedule cursor, only ever moves forward
    context: str = "business"
    currency: str = "ZAR"
    end_date: Optional[str] = None
    auto_create_transaction: bool = False
    is_active: bool = True
    category_id: Optional[int] = None
    bank_account_id: Optional[int] = None
    payee_name: str = ""
    description: str = ""
    last_generated_at: Optional[str] = None
    last_processed_date: Optional[str] = None
    category_name: str = ""
    account_name: str = ""

    @property
    def monthly_amount(self) -> float:
        return to_monthly_equivalent(self.amount, self.frequency)

    @property
    def is_income(self) -> bool:
        return self.item_type in ("income", "retainer")

    @property
    def type_label(self) -> str:
        if self.item_type == "retainer":
            return "retainer payment"
        return self.item_type
