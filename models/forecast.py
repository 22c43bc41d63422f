from dataclasses import dataclass, field
from typing import Optional


@dataclass
class HistoricalAverage:
    avg_monthly_income: float = 0.0
    avg_monthly_expenses: float = 0.0


@dataclass
class HistoricalMonth:
    month: str              # 'YYYY-MM'
    income: float
    expenses: float

    @property
    def net(self) -> float:
        return self.income - self.expenses


@dataclass
class ForecastMonth:
    month: str              # 'YYYY-MM'
    recurring_income: float
    retainer_income: float
    recurring_expenses: float
    additional_income: float
    additional_expenses: float
    total_projected_income: float
    total_projected_expenses: float
    net_projected: float
    cumulative_balance: float


@dataclass
class ForecastSummary:
    cash_position: float
    total_projected_income: float
    total_projected_expenses: float
    end_balance: float
    lowest_balance: float
    months_until_negative: Optional[int]
    runway_months: int


@dataclass
class CashFlowForecast:
    scenario: str
    summary: ForecastSummary
    months: list[ForecastMonth] = field(default_factory=list)


@dataclass
class CommitmentSummary:
    monthly_out: float
    monthly_in: float

    @property
    def net(self) -> float:
        return self.monthly_in - self.monthly_out
