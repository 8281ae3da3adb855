"""Decimal helpers for money amounts.

Amounts are stored as ``Numeric(14, 2)`` and never touch ``float`` on the
way through the ledger and report code.
"""

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def to_money(value: Decimal | int | str | None) -> Decimal:
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal, symbol: str = "") -> str:
    return f"{symbol}{to_money(value):,.2f}"
