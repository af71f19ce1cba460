# utils/validators.py
from decimal import Decimal

from .money import to_decimal


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

def try_parse_amount(x):
    """
    Best-effort parse to a centavo-rounded Decimal.

    Returns:
        (ok: bool, value: Decimal|None)
    """
    try:
        return True, to_decimal(x)
    except ValueError:
        return False, None


def is_non_negative_amount(x) -> bool:
    ok, val = try_parse_amount(x)
    return bool(ok and val is not None and val >= Decimal("0"))


def is_strictly_positive_amount(x) -> bool:
    """
    True iff x parses and is still > 0 after rounding to the centavo.
    """
    ok, val = try_parse_amount(x)
    return bool(ok and val is not None and val > Decimal("0"))
