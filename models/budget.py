from dataclasses import dataclass
from typing import Optional
from utils.constants import PERIOD_MONTHS
from utils.date_helpers import add_months, format_date, parse_date


@dataclass
class Budget:
    id: Optional[int]
    category_id: int
    period_type: str        # 'monthly' | 'quarterly' | 'yearly'
    period_start: str       # 'YYYY-MM-DD'
    amount: float
    rollover: bool = False
    rollover_amount: float = 0.0
    currency: str = "ZAR"
    context: str = "business"
    category_name: str = ""
    spent_amount: float = 0.0

    @property
    def period_end(self) -> str:
        """Exclusive end of the budget period."""
        start = parse_date(self.period_start)
        if start is None:
            raise ValueError(f"Invalid period start: {self.period_start}")
        return format_date(add_months(start, PERIOD_MONTHS[self.period_type]))

    @property
    def effective_amount(self) -> float:
        return (self.amount or 0.0) + (self.rollover_amount or 0.0)

    @property
    def utilization_pct(self) -> float:
        effective = self.effective_amount
        if effective <= 0:
            return 0.0
        return 100.0 * self.spent_amount / effective

    @property
    def variance(self) -> float:
        return self.effective_amount - self.spent_amount

    @property
    def remaining(self) -> float:
        return max(0.0, self.variance)
