"""
Amount formatting for wire transfer letters.

Amounts are printed the Spanish way, e.g. 1.234,50:
- Two fixed decimals, rounded half away from zero
- Comma as decimal separator
- Dot as thousands separator, applied from four digits up
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any

DECIMAL_SEPARATOR = ","
THOUSANDS_SEPARATOR = "."

_CENTS = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a submitted amount to Decimal.

    Floats go through ``str`` so 1234.5 stays 1234.5 instead of its
    binary expansion.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"Invalid amount: {value!r}") from exc
    if not number.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return number


def format_amount(value: Any) -> str:
    """
    Format an amount with two decimals and Spanish separators.

    Args:
        value: Decimal, int, float or numeric string

    Returns:
        Formatted amount, e.g. "1.234,50"
    """
    number = to_decimal(value)
    with localcontext() as ctx:
        # Every integer digit plus the two decimals must fit
        ctx.prec = max(ctx.prec, number.adjusted() + 3)
        number = number.quantize(_CENTS, rounding=ROUND_HALF_UP)
        # Format with US separators first, then swap them
        us_style = f"{number:,.2f}"
    return (
        us_style.replace(",", "\x00")
        .replace(".", DECIMAL_SEPARATOR)
        .replace("\x00", THOUSANDS_SEPARATOR)
    )


def format_money(value: Any, currency: str) -> str:
    """Format an amount followed by its currency code, e.g. "1.234,50 USD"."""
    return f"{format_amount(value)} {currency}"
