from decimal import Decimal, ROUND_HALF_UP

_CENT = Decimal("0.01")


def round_cents(amount) -> float:
    """Round to the nearest cent, halves away from zero. None counts as 0."""
    if amount is None:
        return 0.0
    return float(Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP))


def format_currency(amount: float, symbol: str = "R") -> str:
    """Format a float as currency string, e.g. 'R1,234.56'."""
    return f"{symbol}{round_cents(amount):,.2f}"

