from datetime import date
from database.transaction_dao import TransactionDAO
from models.forecast import HistoricalAverage, HistoricalMonth
from models.transaction import FinancialTransaction
from utils.constants import HISTORY_LOOKBACK_MONTHS
from utils.context import in_context
from utils.currency import round_cents
from utils.date_helpers import add_months, format_date, month_keys, today


def _counted(tx: FinancialTransaction, context: str | None) -> bool:
    return not tx.is_void and in_context(tx.context, context)


def compute_historical_average(
    transactions: list[FinancialTransaction],
    context: str | None = None,
    reference_date: date | None = None,
) -> HistoricalAverage:
    """
    Average monthly income and expenses over the six calendar months ending
    at reference_date. The divisor is always six, even when the data covers
    less; a short history underestimates rather than extrapolates.
    """
    ref = reference_date or today()
    cutoff = format_date(add_months(ref, -HISTORY_LOOKBACK_MONTHS))
    end = format_date(ref)

    income = 0.0
    expenses = 0.0
    for tx in transactions:
        if not _counted(tx, context):
            continue
        if not tx.transaction_date or not cutoff <= tx.transaction_date <= end:
            continue
        if tx.transaction_type == "income":
            income += tx.amount or 0.0
        elif tx.transaction_type == "expense":
            expenses += tx.amount or 0.0

    return HistoricalAverage(
        avg_monthly_income=round_cents(income / HISTORY_LOOKBACK_MONTHS),
        avg_monthly_expenses=round_cents(expenses / HISTORY_LOOKBACK_MONTHS),
    )


def compute_historical_months(
    transactions: list[FinancialTransaction],
    context: str | None = None,
    reference_date: date | None = None,
) -> list[HistoricalMonth]:
    """Income/expense totals for each of the six full months before reference_date's month."""
    ref = reference_date or today()
    first = add_months(ref.replace(day=1), -HISTORY_LOOKBACK_MONTHS)
    keys = month_keys(first, HISTORY_LOOKBACK_MONTHS)
    totals = {k: [0.0, 0.0] for k in keys}

    for tx in transactions:
        if not _counted(tx, context) or not tx.transaction_date:
            continue
        bucket = totals.get(tx.transaction_date[:7])
        if bucket is None:
            continue
        if tx.transaction_type == "income":
            bucket[0] += tx.amount or 0.0
        elif tx.transaction_type == "expense":
            bucket[1] += tx.amount or 0.0

    return [
        HistoricalMonth(month=k, income=round_cents(inc), expenses=round_cents(exp))
        for k, (inc, exp) in totals.items()
    ]


class ReportService:
    def __init__(self, tx_dao: TransactionDAO):
        self._tx_dao = tx_dao

    def get_historical_average(
        self, context: str | None = None, reference_date: date | None = None
    ) -> HistoricalAverage:
        return compute_historical_average(self._tx_dao.get_all(), context, reference_date)

    def get_historical_months(
        self, context: str | None = None, reference_date: date | None = None
    ) -> list[HistoricalMonth]:
        return compute_historical_months(self._tx_dao.get_all(), context, reference_date)
