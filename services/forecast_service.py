from datetime import date
from numbers import Number

import structlog

from models.forecast import CashFlowForecast, ForecastMonth, ForecastSummary, HistoricalAverage
from models.recurring_item import RecurringItem
from utils.app_config import get_forecast_months, get_forecast_scenario
from utils.constants import (
    GAP_FILL_DAMPING, SCENARIO_MULTIPLIERS, SUBSTANTIAL_RECURRING_COUNT,
)
from utils.context import in_context
from utils.currency import round_cents
from utils.date_helpers import friendly_month, is_active_for_month, month_keys, today

log = structlog.get_logger(__name__)


def _num(value) -> float:
    return float(value) if isinstance(value, Number) else 0.0


def _monthly_total(items: list[RecurringItem], item_type: str, month: str) -> float:
    return sum(
        _num(i.monthly_amount) for i in items
        if i.item_type == item_type and is_active_for_month(i, month)
    )


def build_forecast(
    items: list[RecurringItem],
    historical: HistoricalAverage | None,
    cash_position: float,
    months: int,
    scenario: str = "realistic",
    start_month: date | None = None,
    context: str | None = None,
) -> CashFlowForecast:
    """
    Project `months` months of income, expenses and running balance.

    Month 0 is the month of start_month (default: today). Recurring items
    supply the base flows; when fewer than three are active, half of the gap
    between the historical average and the recurring totals is added on top.
    The scenario multipliers then scale the income and expense totals.
    Pure: the same inputs always give the same series.
    """
    if scenario not in SCENARIO_MULTIPLIERS:
        raise ValueError(f"Unknown scenario '{scenario}'.")
    if months < 0:
        raise ValueError("Forecast horizon cannot be negative.")
    multiplier = SCENARIO_MULTIPLIERS[scenario]

    active = [i for i in items if i.is_active and in_context(i.context, context)]
    gap_fill = len(active) < SUBSTANTIAL_RECURRING_COUNT
    avg_income = _num(historical.avg_monthly_income) if historical else 0.0
    avg_expenses = _num(historical.avg_monthly_expenses) if historical else 0.0
    cash = round_cents(_num(cash_position))

    running = cash
    result: list[ForecastMonth] = []
    for month in month_keys(start_month or today(), months):
        recurring_income = _monthly_total(active, "income", month)
        retainer_income = _monthly_total(active, "retainer", month)
        recurring_expenses = _monthly_total(active, "expense", month)

        additional_income = 0.0
        additional_expenses = 0.0
        if gap_fill:
            additional_income = max(
                0.0, avg_income - recurring_income - retainer_income
            ) * GAP_FILL_DAMPING
            additional_expenses = max(
                0.0, avg_expenses - recurring_expenses
            ) * GAP_FILL_DAMPING

        total_income = round_cents(
            (recurring_income + retainer_income + additional_income) * multiplier["income"]
        )
        total_expenses = round_cents(
            (recurring_expenses + additional_expenses) * multiplier["expenses"]
        )
        net = round_cents(total_income - total_expenses)
        running = round_cents(running + net)

        result.append(ForecastMonth(
            month=month,
            recurring_income=round_cents(recurring_income),
            retainer_income=round_cents(retainer_income),
            recurring_expenses=round_cents(recurring_expenses),
            additional_income=round_cents(additional_income),
            additional_expenses=round_cents(additional_expenses),
            total_projected_income=total_income,
            total_projected_expenses=total_expenses,
            net_projected=net,
            cumulative_balance=running,
        ))

    return CashFlowForecast(
        scenario=scenario,
        months=result,
        summary=summarize(result, cash, months),
    )


def summarize(
    months: list[ForecastMonth], cash_position: float, horizon: int
) -> ForecastSummary:
    """
    KPIs over the balance series [cash_position, month 0, month 1, ...].

    months_until_negative is the position in that series of the first
    balance below zero, so 0 means the starting cash is already negative
    and n means the balance turns negative after n projected months.
    """
    balances = [cash_position] + [m.cumulative_balance for m in months]
    months_until_negative = next(
        (i for i, balance in enumerate(balances) if balance < 0), None
    )
    return ForecastSummary(
        cash_position=cash_position,
        total_projected_income=round_cents(sum(m.total_projected_income for m in months)),
        total_projected_expenses=round_cents(sum(m.total_projected_expenses for m in months)),
        end_balance=balances[-1],
        lowest_balance=min(balances),
        months_until_negative=months_until_negative,
        runway_months=horizon if months_until_negative is None else months_until_negative,
    )


class ForecastService:
    def __init__(self, recurring_svc, report_svc, account_svc):
        self._recurring_svc = recurring_svc
        self._report_svc = report_svc
        self._account_svc = account_svc

    def get_forecast(
        self,
        context: str | None = None,
        months: int | None = None,
        scenario: str | None = None,
        reference_date: date | None = None,
    ) -> CashFlowForecast:
        """Forecast from the current stores; months/scenario default to the saved config."""
        months = get_forecast_months() if months is None else months
        if months <= 0:
            raise ValueError("Forecast horizon must be at least one month.")
        scenario = scenario or get_forecast_scenario()
        ref = reference_date or today()

        forecast = build_forecast(
            items=self._recurring_svc.get_active(context),
            historical=self._report_svc.get_historical_average(context, ref),
            cash_position=self._account_svc.get_cash_position(context),
            months=months,
            scenario=scenario,
            start_month=ref,
        )
        log.debug(
            "forecast.generated",
            scenario=scenario,
            months=months,
            context=context,
            end_balance=forecast.summary.end_balance,
            runway_months=forecast.summary.runway_months,
        )
        return forecast

    def get_chart_data(
        self,
        context: str | None = None,
        months: int | None = None,
        scenario: str | None = None,
        reference_date: date | None = None,
    ) -> list[dict]:
        """
        [{month:'YYYY-MM', label, income, expenses, net, is_projected}]
        six historical months followed by the projected months.
        """
        ref = reference_date or today()
        rows = [
            {
                "month": h.month,
                "label": friendly_month(h.month),
                "income": h.income,
                "expenses": h.expenses,
                "net": round_cents(h.net),
                "is_projected": False,
            }
            for h in self._report_svc.get_historical_months(context, ref)
        ]
        forecast = self.get_forecast(context, months, scenario, ref)
        rows += [
            {
                "month": m.month,
                "label": friendly_month(m.month),
                "income": m.total_projected_income,
                "expenses": m.total_projected_expenses,
                "net": m.net_projected,
                "is_projected": True,
            }
            for m in forecast.months
        ]
        return rows
