from datetime import date
from decimal import Decimal

import pytest

from models.forecast import HistoricalAverage
from models.recurring_item import RecurringItem
from services.forecast_service import build_forecast
from utils.app_config import set_forecast_months, set_forecast_scenario


JAN = date(2024, 1, 10)


def _item(item_type="expense", amount=1000.0, frequency="monthly",
          start_date="2024-01-01", end_date=None, context="business", item_id=1):
    return RecurringItem(
        id=item_id, name=f"{item_type} {item_id}", item_type=item_type,
        amount=amount, frequency=frequency, start_date=start_date,
        next_due_date=start_date, end_date=end_date, context=context,
    )


class TestBuildForecast:
    """Month-by-month projection from recurring items and history."""

    def test_balance_turns_negative_in_sixth_month(self):
        forecast = build_forecast([_item()], None, 5000.0, 6, start_month=JAN)

        assert [m.cumulative_balance for m in forecast.months] == [
            4000.0, 3000.0, 2000.0, 1000.0, 0.0, -1000.0,
        ]
        assert [m.month for m in forecast.months][0] == "2024-01"
        assert forecast.summary.months_until_negative == 6
        assert forecast.summary.runway_months == 6
        assert forecast.summary.lowest_balance == -1000.0
        assert forecast.summary.end_balance == -1000.0

    def test_negative_starting_cash(self):
        forecast = build_forecast([], None, -50.0, 3, start_month=JAN)
        assert forecast.summary.months_until_negative == 0
        assert forecast.summary.runway_months == 0

    def test_never_negative(self):
        forecast = build_forecast([_item("income")], None, 0.0, 12, start_month=JAN)
        assert forecast.summary.months_until_negative is None
        assert forecast.summary.runway_months == 12
        assert forecast.summary.total_projected_income == 12000.0

    def test_gap_fill_adds_half_the_shortfall(self):
        history = HistoricalAverage(avg_monthly_income=3000.0, avg_monthly_expenses=2000.0)

        forecast = build_forecast([], history, 0.0, 1, start_month=JAN)

        [month] = forecast.months
        assert month.additional_income == 1500.0
        assert month.additional_expenses == 1000.0
        assert month.total_projected_income == 1500.0
        assert month.net_projected == 500.0

    def test_gap_fill_counts_recurring_flows(self):
        history = HistoricalAverage(avg_monthly_income=3000.0, avg_monthly_expenses=500.0)
        items = [_item("retainer", 2000.0), _item("expense", 800.0, item_id=2)]

        [month] = build_forecast(items, history, 0.0, 1, start_month=JAN).months

        assert month.retainer_income == 2000.0
        assert month.additional_income == 500.0
        assert month.additional_expenses == 0.0

    def test_pessimistic_scales_totals_only(self):
        history = HistoricalAverage(avg_monthly_income=3000.0, avg_monthly_expenses=2000.0)

        [month] = build_forecast(
            [], history, 0.0, 1, scenario="pessimistic", start_month=JAN
        ).months

        assert month.additional_income == 1500.0
        assert month.total_projected_income == 1275.0
        assert month.total_projected_expenses == 1100.0

    def test_substantial_recurring_skips_gap_fill(self):
        history = HistoricalAverage(avg_monthly_income=3000.0, avg_monthly_expenses=2000.0)
        items = [_item("income", 100.0, item_id=i) for i in range(1, 4)]

        [month] = build_forecast(items, history, 0.0, 1, start_month=JAN).months

        assert month.additional_income == 0.0
        assert month.additional_expenses == 0.0
        assert month.total_projected_income == 300.0

    def test_realistic_matches_unscaled_flows(self):
        items = [_item("income", 2500.0), _item("expense", 1234.56, item_id=2)]
        [month] = build_forecast(items, None, 0.0, 1, start_month=JAN).months
        assert month.total_projected_income == 2500.0
        assert month.total_projected_expenses == 1234.56

    def test_optimistic_never_below_realistic(self):
        items = [_item("income", 2500.0), _item("expense", 1800.0, item_id=2)]
        realistic = build_forecast(items, None, 100.0, 6, start_month=JAN)
        optimistic = build_forecast(items, None, 100.0, 6, "optimistic", start_month=JAN)
        for r, o in zip(realistic.months, optimistic.months):
            assert o.cumulative_balance >= r.cumulative_balance

    def test_cumulative_balance_has_no_drift(self):
        forecast = build_forecast(
            [_item("expense", 10.0, "weekly")], None, 1000.0, 12, start_month=JAN
        )
        assert forecast.months[0].net_projected == -43.3
        assert forecast.months[-1].cumulative_balance == 480.4

    def test_item_starting_later_is_excluded_until_active(self):
        items = [_item(start_date="2024-03-01"), _item(end_date="2024-01-31", item_id=2)]
        months = build_forecast(items, None, 0.0, 4, start_month=JAN).months
        assert [m.recurring_expenses for m in months] == [1000.0, 0.0, 1000.0, 1000.0]

    def test_inactive_and_other_context_items_are_ignored(self):
        paused = _item()
        paused.is_active = False
        items = [paused, _item(context="personal", item_id=2)]
        [month] = build_forecast(items, None, 0.0, 1, start_month=JAN, context="business").months
        assert month.recurring_expenses == 0.0

    def test_zero_months(self):
        forecast = build_forecast([_item()], None, 250.0, 0, start_month=JAN)
        assert forecast.months == []
        assert forecast.summary.end_balance == 250.0
        assert forecast.summary.months_until_negative is None

    def test_decimal_money_inputs(self):
        history = HistoricalAverage(
            avg_monthly_income=Decimal("3000.00"), avg_monthly_expenses=Decimal("0"),
        )
        items = [_item(amount=Decimal("1000.00"))]

        forecast = build_forecast(items, history, Decimal("5000.00"), 2, start_month=JAN)

        assert forecast.summary.cash_position == 5000.0
        assert forecast.months[0].recurring_expenses == 1000.0
        assert forecast.months[0].additional_income == 1500.0
        assert [m.cumulative_balance for m in forecast.months] == [5500.0, 6000.0]

    def test_unknown_scenario(self):
        with pytest.raises(ValueError):
            build_forecast([], None, 0.0, 3, scenario="wishful")

    def test_negative_horizon(self):
        with pytest.raises(ValueError):
            build_forecast([], None, 0.0, -1)

    def test_deterministic(self):
        items = [_item("income", 999.99, "biweekly"), _item(item_id=2)]
        history = HistoricalAverage(avg_monthly_income=5000.0, avg_monthly_expenses=100.0)
        first = build_forecast(items, history, 123.45, 9, "pessimistic", start_month=JAN)
        second = build_forecast(items, history, 123.45, 9, "pessimistic", start_month=JAN)
        assert first == second


class TestForecastService:

    def test_forecast_from_stores(self, forecast_svc, account_svc, recurring_svc):
        account_svc.create("Cheque", 5000.0)
        recurring_svc.create("Rent", "expense", 1000.0, "monthly", "2024-01-01")

        forecast = forecast_svc.get_forecast(months=3, reference_date=JAN)

        assert forecast.summary.cash_position == 5000.0
        assert [m.cumulative_balance for m in forecast.months] == [4000.0, 3000.0, 2000.0]

    def test_uses_saved_defaults(self, forecast_svc):
        set_forecast_months(3)
        set_forecast_scenario("optimistic")

        forecast = forecast_svc.get_forecast(reference_date=JAN)

        assert len(forecast.months) == 3
        assert forecast.scenario == "optimistic"

    def test_rejects_empty_horizon(self, forecast_svc):
        with pytest.raises(ValueError):
            forecast_svc.get_forecast(months=0, reference_date=JAN)

    def test_chart_data_joins_history_and_projection(self, forecast_svc):
        rows = forecast_svc.get_chart_data(months=3, reference_date=JAN)

        assert len(rows) == 9
        assert [r["is_projected"] for r in rows] == [False] * 6 + [True] * 3
        assert rows[0]["month"] == "2023-07"
        assert rows[-1]["month"] == "2024-03"
        assert rows[-1]["label"] == "Mar 24"
