"""Fixed-point money arithmetic.

Every helper rounds its result to 2 decimal places (half-up), so chained
calculations never accumulate binary floating point drift. All money
arithmetic in gigbook goes through these functions.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from gigbook.domain.models import Money

CENT = Decimal("0.01")

MoneyLike = Decimal | int | float | str


def _decimal(value: MoneyLike) -> Decimal:
    """Exact Decimal for a number or numeric string.

    Floats go through ``str`` first so that 0.1 becomes Decimal("0.1"),
    not its binary expansion.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if isinstance(value, Decimal):
        dec = value
    else:
        try:
            dec = Decimal(str(value) if isinstance(value, float) else value)
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    if not dec.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return dec


def to_money(value: MoneyLike) -> Money:
    """Convert a number or numeric string to Money (2 places, half-up).

    Raises:
        ValueError: If the value is not a finite number.
    """
    return Money(_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def add(a: MoneyLike, b: MoneyLike) -> Money:
    return to_money(_decimal(a) + _decimal(b))


def subtract(a: MoneyLike, b: MoneyLike) -> Money:
    return to_money(_decimal(a) - _decimal(b))


def multiply(a: MoneyLike, b: MoneyLike) -> Money:
    return to_money(_decimal(a) * _decimal(b))


def divide(a: MoneyLike, b: MoneyLike) -> Money:
    """Divide a by b, rounded to 2 places.

    Raises:
        ZeroDivisionError: If b is zero.
    """
    divisor = _decimal(b)
    if divisor == 0:
        raise ZeroDivisionError("Cannot divide money by zero")
    return to_money(_decimal(a) / divisor)


def total(amounts: list[Money]) -> Money:
    """Sum amounts, rounding after each step."""
    result = Money(Decimal("0.00"))
    for amount in amounts:
        result = add(result, amount)
    return result


def to_minor_units(amount: MoneyLike) -> int:
    """Convert Money to integer minor units for storage (e.g. 12.34 -> 1234)."""
    return int(to_money(amount) * 100)


def from_minor_units(minor: int | None) -> Money:
    """Convert stored integer minor units back to Money."""
    if minor is None:
        return Money(Decimal("0.00"))
    return to_money(Decimal(minor) / 100)


def format_money(amount: MoneyLike, symbol: str = "₪") -> str:
    """Format money for display.

    Args:
        amount: Amount to format.
        symbol: Currency symbol prefix.

    Returns:
        Formatted string (e.g., "₪ 1,250.50" or "-₪ 20.00").
    """
    value = to_money(amount)
    formatted = f"{symbol} {abs(value):,.2f}"
    if value < 0:
        return f"-{formatted}"
    return formatted
