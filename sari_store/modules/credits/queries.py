from __future__ import annotations

from datetime import date
import sqlite3
from typing import Callable, Dict, List, Optional

from ...database.repositories.errors import ValidationError
from ...database.repositories.ledger_repo import LedgerRepo
from .balance import CustomerSummary

FILTER_ALL = "all"
FILTER_WITH_BALANCE = "with_balance"
FILTER_PAID = "paid"
FILTER_OVERDUE = "overdue"

SORT_BALANCE_DESC = "balance_desc"
SORT_BALANCE_ASC = "balance_asc"
SORT_RECENT = "recent"
SORT_NAME_ASC = "name_asc"
SORT_NAME_DESC = "name_desc"

_FILTERS: Dict[str, Callable[[CustomerSummary], bool]] = {
    FILTER_ALL: lambda s: True,
    FILTER_WITH_BALANCE: lambda s: s.outstanding_balance > 0,
    FILTER_PAID: lambda s: s.outstanding_balance == 0,
    FILTER_OVERDUE: lambda s: s.is_overdue,
}

FILTERS: tuple[str, ...] = tuple(_FILTERS)
SORTS: tuple[str, ...] = (
    SORT_BALANCE_DESC,
    SORT_BALANCE_ASC,
    SORT_RECENT,
    SORT_NAME_ASC,
    SORT_NAME_DESC,
)


def _name_key(s: CustomerSummary):
    return (s.name.casefold(), s.customer_id)


def sort_summaries(rows: List[CustomerSummary], sort: str) -> List[CustomerSummary]:
    """Stable sorts; equal keys keep customer_id order."""
    if sort not in SORTS:
        raise ValidationError(f"Unknown sort {sort!r}; expected one of: {', '.join(SORTS)}")
    rows = sorted(rows, key=lambda s: s.customer_id)
    if sort == SORT_BALANCE_DESC:
        return sorted(rows, key=lambda s: s.outstanding_balance, reverse=True)
    if sort == SORT_BALANCE_ASC:
        return sorted(rows, key=lambda s: s.outstanding_balance)
    if sort == SORT_RECENT:
        # newest activity first; customers with no activity go last
        dated = [s for s in rows if s.last_transaction_date]
        undated = [s for s in rows if not s.last_transaction_date]
        return sorted(dated, key=lambda s: s.last_transaction_date, reverse=True) + undated
    if sort == SORT_NAME_DESC:
        return sorted(rows, key=_name_key, reverse=True)
    return sorted(rows, key=_name_key)


class CustomerQueryService:
    """Filtering / sorting / search over customer summaries. Read-only."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.ledger = LedgerRepo(conn)

    def list_customers(
        self,
        filter: str = FILTER_ALL,
        sort: str = SORT_NAME_ASC,
        today: Optional[date] = None,
    ) -> List[CustomerSummary]:
        keep = _FILTERS.get(filter)
        if keep is None:
            raise ValidationError(f"Unknown filter {filter!r}; expected one of: {', '.join(FILTERS)}")
        rows = [s for s in self.ledger.summaries(today) if keep(s)]
        return sort_summaries(rows, sort)

    def search_customers(self, query: str, today: Optional[date] = None) -> List[CustomerSummary]:
        """Case-insensitive substring match on name or phone, name order."""
        needle = (query or "").strip().casefold()
        if not needle:
            return []
        rows = [
            s for s in self.ledger.summaries(today)
            if needle in s.name.casefold() or (s.phone and needle in s.phone.casefold())
        ]
        return sort_summaries(rows, SORT_NAME_ASC)

    def customer_details(self, customer_id: int, today: Optional[date] = None) -> Optional[CustomerSummary]:
        """Summary with its credits and payments attached (newest first), or None."""
        return self.ledger.summary(customer_id, today, keep_rows=True)
