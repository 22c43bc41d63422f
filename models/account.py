from dataclasses import dataclass


@dataclass
class BankAccount:
    id: int
    name: str
    current_balance: float = 0.0
    currency: str = "ZAR"
    context: str = "business"
    is_active: bool = True
    created_at: str = ""
