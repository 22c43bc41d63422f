from datetime import date
from decimal import Decimal

import pytest

from utils.constants import FREQUENCIES
from utils.frequency import advance_due_date, to_monthly_equivalent


class TestMonthlyEquivalent:
    """Normalizing recurring amounts to a per-month value."""

    @pytest.mark.parametrize("frequency, expected", [
        ("weekly", 433.0),
        ("biweekly", 217.0),
        ("monthly", 100.0),
        ("quarterly", 100 / 3),
        ("yearly", 100 / 12),
    ])
    def test_known_frequencies(self, frequency, expected):
        assert to_monthly_equivalent(100, frequency) == pytest.approx(expected)

    def test_unknown_frequency_passes_through(self):
        assert to_monthly_equivalent(250.0, "fortnightly-ish") == 250.0

    @pytest.mark.parametrize("frequency", FREQUENCIES)
    def test_linear_in_amount(self, frequency):
        assert to_monthly_equivalent(2 * 123.45, frequency) == pytest.approx(
            2 * to_monthly_equivalent(123.45, frequency)
        )

    def test_deterministic(self):
        assert to_monthly_equivalent(99.99, "weekly") == to_monthly_equivalent(99.99, "weekly")

    def test_decimal_amount(self):
        assert to_monthly_equivalent(Decimal("300.00"), "quarterly") == pytest.approx(100.0)
        assert to_monthly_equivalent(Decimal("12.50"), "unknown") == 12.5

    def test_none_amount_is_zero(self):
        assert to_monthly_equivalent(None, "monthly") == 0.0


class TestAdvanceDueDate:
    """Moving a schedule cursor forward by one cycle."""

    @pytest.mark.parametrize("frequency, expected", [
        ("weekly", date(2024, 1, 8)),
        ("biweekly", date(2024, 1, 15)),
        ("monthly", date(2024, 2, 1)),
        ("quarterly", date(2024, 4, 1)),
        ("yearly", date(2025, 1, 1)),
    ])
    def test_one_cycle(self, frequency, expected):
        assert advance_due_date(date(2024, 1, 1), frequency) == expected

    def test_month_end_is_clamped(self):
        assert advance_due_date(date(2024, 1, 31), "monthly") == date(2024, 2, 29)

    def test_anchor_day_restores_after_short_month(self):
        assert advance_due_date(date(2024, 2, 29), "monthly", anchor_day=31) == date(2024, 3, 31)

    def test_leap_day_yearly(self):
        assert advance_due_date(date(2024, 2, 29), "yearly") == date(2025, 2, 28)

    @pytest.mark.parametrize("frequency", FREQUENCIES)
    def test_always_moves_forward(self, frequency):
        d = date(2024, 12, 31)
        assert advance_due_date(d, frequency) > d

    def test_unknown_frequency_raises(self):
        with pytest.raises(ValueError):
            advance_due_date(date(2024, 1, 1), "daily")
