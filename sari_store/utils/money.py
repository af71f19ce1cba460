"""
utils/money.py

Centavo <-> Decimal conversion for ledger amounts.

Storage keeps whole centavos (INTEGER columns); Python code works with
Decimal quantized to 0.01. Floats are accepted at the edges but are routed
through str() first so 0.1 + 0.2 style drift never reaches the ledger.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Union

MoneyLike = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Largest single amount the ledger accepts. Keeps every centavo column and
# every SUM over them well inside SQLite's 64-bit INTEGER.
MAX_AMOUNT = Decimal("999999999.99")

__all__ = [
    "CENT",
    "ZERO",
    "MAX_AMOUNT",
    "MoneyLike",
    "to_decimal",
    "to_cents",
    "from_cents",
]


def to_decimal(x: Any) -> Decimal:
    """
    Parse and round half-up to the centavo.

    Raises ValueError on anything that is not a finite number, or whose
    magnitude exceeds MAX_AMOUNT.
    """
    if isinstance(x, bool) or x is None:
        raise ValueError(f"Could not parse {x!r} as an amount.")
    try:
        d = x if isinstance(x, Decimal) else Decimal(str(x).strip())
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValueError(f"Could not parse {x!r} as an amount.") from e
    if not d.is_finite():
        raise ValueError(f"Could not parse {x!r} as an amount.")
    if abs(d) > MAX_AMOUNT:
        raise ValueError(f"Amount {x!r} exceeds the ledger maximum of {MAX_AMOUNT:,}.")
    try:
        return d.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse {x!r} as an amount.") from e


def to_cents(x: MoneyLike) -> int:
    return int(to_decimal(x) * 100)


def from_cents(cents: int | None) -> Decimal:
    if not cents:
        return ZERO
    return (Decimal(int(cents)) / 100).quantize(CENT)
