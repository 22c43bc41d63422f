from datetime import date, datetime
import calendar
from utils.constants import DATE_FORMAT, MONTH_FORMAT


def today() -> date:
    return date.today()


def now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def parse_date(date_str: str) -> date | None:
    """Parse a date string in YYYY-MM-DD format, returning None on failure."""
    if not date_str:
        return None
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y.%m.%d"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue
    return None


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def format_month(d: date) -> str:
    return d.strftime(MONTH_FORMAT)


def parse_month(month_str: str) -> date | None:
    """Return the first day of the given YYYY-MM month string."""
    if not month_str:
        return None
    try:
        return datetime.strptime(month_str, MONTH_FORMAT).date()
    except ValueError:
        return None


def month_range(month_str: str) -> tuple[str, str]:
    """Return (first_day_str, last_day_str) for a YYYY-MM month."""
    d = parse_month(month_str)
    if d is None:
        raise ValueError(f"Invalid month: {month_str}")
    last_day = calendar.monthrange(d.year, d.month)[1]
    return (
        format_date(d),
        format_date(d.replace(day=last_day)),
    )


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    max_day = calendar.monthrange(year, month)[1]
    return min(day, max_day)


def add_months(d: date, n: int) -> date:
    """Add n months to date d, clamping day to month end."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = clamp_day_to_month(year, month, d.day)
    return d.replace(year=year, month=month, day=day)


def month_keys(start: date, count: int) -> list[str]:
    """`count` consecutive YYYY-MM keys starting with the month of `start`."""
    first = start.replace(day=1)
    return [format_month(add_months(first, i)) for i in range(count)]


def is_active_for_month(item, month_str: str) -> bool:
    """True when the item's [start_date, end_date] window overlaps the month.

    An open end_date means the item runs indefinitely. ISO date strings
    compare correctly as text, so no parsing is needed beyond the month key.
    """
    month_start, month_end = month_range(month_str)
    if not item.start_date or item.start_date > month_end:
        return False
    if item.end_date and item.end_date < month_start:
        return False
    return True


def friendly_month(month_str: str) -> str:
    """Convert YYYY-MM to e.g. 'Feb 26'."""
    d = parse_month(month_str)
    if d is None:
        return month_str
    return d.strftime("%b %y")
