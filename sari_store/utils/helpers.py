# utils/helpers.py
from datetime import date, datetime
import logging
from typing import Union, Optional

from ..constants import CURRENCY_SYMBOL

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)

TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S"


def local_today() -> date:
    return date.today()


def now_str() -> str:
    """Local wall-clock timestamp as stored in the ledger ('YYYY-MM-DD HH:MM:SS')."""
    return datetime.now().strftime(TIMESTAMP_FMT)


def parse_day(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Calendar day of a stored date/timestamp.

    Accepts 'YYYY-MM-DD', 'YYYY-MM-DD HH:MM:SS', ISO 'T' timestamps and
    date/datetime objects. Returns None for empty input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def normalize_timestamp(value: Union[str, date, datetime, None]) -> str:
    """
    Coerce a caller-supplied date/timestamp to the stored text form.

    A bare date becomes midnight of that day so ordering against full
    timestamps stays lexicographic. Offset-aware input is converted to
    local wall-clock time first.
    """
    if value is None:
        return now_str()
    if isinstance(value, datetime):
        return _local_wall_clock(value)
    if isinstance(value, date):
        return f"{value.isoformat()} 00:00:00"
    text = str(value).strip()
    if len(text) == 10:
        date.fromisoformat(text)
        return f"{text} 00:00:00"
    return _local_wall_clock(datetime.fromisoformat(text.replace("Z", "+00:00")))


def _local_wall_clock(dt: datetime) -> str:
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.strftime(TIMESTAMP_FMT)


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    symbol: str = CURRENCY_SYMBOL,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as pesos with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError.
    """
    try:
        x = float(v)
    except (TypeError, ValueError) as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    sign = "-" if x < 0 else ""
    return f"{sign}{symbol}{abs(x):,.{places}f}"
