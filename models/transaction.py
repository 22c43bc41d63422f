from dataclasses import dataclass
from typing import Optional


@dataclass
class FinancialTransaction:
    id: Optional[int]
    transaction_type: str   # 'income' | 'expense' | 'transfer'
    amount: float
    transaction_date: str   # 'YYYY-MM-DD'
    context: str = "business"
    status: str = "completed"   # 'pending' | 'completed' | 'reconciled' | 'void'
    currency: str = "ZAR"
    category_id: Optional[int] = None
    bank_account_id: Optional[int] = None
    description: str = ""
    payee_name: str = ""
    recurring_item_id: Optional[int] = None
    created_at: str = ""

    @property
    def is_void(self) -> bool:
        return self.status == "void"
