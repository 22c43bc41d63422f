"""Cadence arithmetic for recurring items."""
from datetime import date, timedelta
from utils.constants import MONTHLY_FACTORS, DAY_INTERVALS, MONTH_INTERVALS
from utils.date_helpers import add_months, clamp_day_to_month


def to_monthly_equivalent(amount: float, frequency: str) -> float:
    """Monthly-equivalent value of `amount` paid once per `frequency`.

    Unknown frequencies pass the amount through unchanged.
    """
    if amount is None:
        return 0.0
    factor = MONTHLY_FACTORS.get(frequency)
    if factor is None:
        return float(amount)
    return float(amount) * factor


def advance_due_date(d: date, frequency: str, anchor_day: int | None = None) -> date:
    """Move a due date forward by exactly one cycle of `frequency`.

    Month-based cadences land on `anchor_day` (default: d.day), clamped to
    the length of the target month, so a schedule anchored on the 31st goes
    Jan 31 -> Feb 28 -> Mar 31 rather than drifting to the 28th.
    """
    if frequency in DAY_INTERVALS:
        return d + timedelta(days=DAY_INTERVALS[frequency])
    if frequency in MONTH_INTERVALS:
        moved = add_months(d.replace(day=1), MONTH_INTERVALS[frequency])
        day = clamp_day_to_month(moved.year, moved.month, anchor_day or d.day)
        return moved.replace(day=day)
    raise ValueError(f"Cannot advance schedule with frequency '{frequency}'.")
