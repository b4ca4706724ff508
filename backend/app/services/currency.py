"""Money helpers for integer minor-unit amounts.

Amounts are stored and transmitted as integers in minor units (pence for
GBP). Display always divides by 100 with exactly two decimals, computed with
integer arithmetic so no float rounding can creep into what the user sees.
"""

CURRENCY_SYMBOLS = {
    "GBP": "£",
    "USD": "$",
    "EUR": "€",
}


def format_minor_units(amount: int, currency: str = "GBP") -> str:
    """Render ``amount`` minor units as e.g. ``£100.00`` or ``-£0.05``."""
    sign = "-" if amount < 0 else ""
    major, minor = divmod(abs(amount), 100)
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol is None:
        return f"{sign}{major}.{minor:02d} {currency.upper()}"
    return f"{sign}{symbol}{major}.{minor:02d}"


def pounds_to_pence(pounds: int) -> int:
    """Convert a whole-pound fee to pence."""
    return pounds * 100
