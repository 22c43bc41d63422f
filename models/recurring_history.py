from dataclasses import dataclass
from typing import Optional


@dataclass
class RecurringHistoryEntry:
    recurring_item_id: int
    expected_date: str          # 'YYYY-MM-DD'
    expected_amount: float
    status: str = "expected"    # 'expected' | 'matched' | 'missed' | 'skipped'
    actual_amount: Optional[float] = None
    transaction_id: Optional[int] = None
    variance_amount_pct: Optional[float] = None
    id: Optional[int] = None
    created_at: str = ""
