"""
Money -- Decimal helpers for single-currency amounts.

Responsibility:
    Converts boundary values (str, int, float) into ``Decimal`` and owns the
    only sanctioned rounding function for currency amounts in the kernel.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by catalog, cart, pricing and the reporting module.

Invariants enforced:
    - Amounts are ``Decimal`` in every domain object, never ``float``.
      Floats handed in at the boundary are converted through ``str()`` so
      ``25.1`` becomes ``Decimal("25.1")`` rather than its binary expansion.
    - Rounding happens once, at final currency precision (ROUND_HALF_UP).

Failure modes:
    - ValueError when a value cannot be interpreted as a number.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP
ZERO = Decimal("0")


def to_decimal(value: Decimal | str | int | float) -> Decimal:
    """
    Convert a boundary value into a Decimal without rounding.

    Raises:
        ValueError: If value cannot be converted, or is NaN/infinite.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return result


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the currency precision.

    This is the ONLY sanctioned rounding function for currency amounts in
    the kernel. All other code delegates here.
    """
    quantizer = Decimal(10) ** -decimal_places
    return value.quantize(quantizer, rounding=rounding)


def format_amount(value: Decimal, symbol: str = "", decimal_places: int = MONEY_DECIMAL_PLACES) -> str:
    """Format an amount as ``<symbol> 1,234.50`` for display."""
    text = f"{round_money(value, decimal_places):,.{decimal_places}f}"
    return f"{symbol} {text}" if symbol else text


def to_money(value: Decimal | str | int | float) -> Decimal:
    """
    Parse an amount entered at the till.

    Amounts finer than the currency precision are rejected rather than
    rounded, so 84.995 can never pass as 85.00.

    Raises:
        ValueError: If value is not a number or has sub-cent precision.
    """
    amount = to_decimal(value)
    rounded = round_money(amount)
    if amount != rounded:
        raise ValueError(f"Amount has more than {MONEY_DECIMAL_PLACES} decimal places: {value!r}")
    return rounded
