# sari_store/database/repositories/dashboard_repo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
import sqlite3
from typing import Any, Optional

from ...modules.credits.balance import CustomerSummary
from ...utils.helpers import local_today
from ...utils.money import ZERO, from_cents
from .ledger_repo import LedgerRepo


@dataclass
class MostOwedCustomer:
    customer_id: int
    name: str
    amount: Decimal


@dataclass
class CreditKPIs:
    total_outstanding: Decimal = ZERO
    total_customers_with_balance: int = 0
    most_owed_customer: Optional[MostOwedCustomer] = None
    total_collected_today: Decimal = ZERO
    total_credits_today: Decimal = ZERO
    overdue_count: int = 0


def _to_int(x: Optional[Any]) -> int:
    try:
        return int(x or 0)
    except (TypeError, ValueError):
        return 0


def day_bounds(day: date) -> tuple[str, str]:
    """[start, end) of a local calendar day in stored timestamp form."""
    nxt = day + timedelta(days=1)
    return f"{day.isoformat()} 00:00:00", f"{nxt.isoformat()} 00:00:00"


class DashboardRepo:
    """
    Thin query layer for the credits dashboard KPIs.

    All methods are read-only. Per-customer figures (balances, tags) come
    from LedgerRepo summaries so they follow exactly the same rules as the
    customer list; day totals are plain SQL sums.

    Performance note:
    - Date columns are compared directly (col >= ? AND col < ?) to keep
      SQLite eligible to use indexes. No SQLite clock (DATE('now')) inside
      filters; the caller's local day is passed in.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        # Ensure we can access columns by name.
        self.conn.row_factory = sqlite3.Row
        self.ledger = LedgerRepo(conn)

    def _scalar(self, sql: str, params: tuple = ()) -> Any:
        row = self.conn.execute(sql, params).fetchone()
        return None if row is None else row[0]

    # ----------------------------- Day totals ------------------------------

    def collected_on(self, day: date) -> Decimal:
        start, end = day_bounds(day)
        sql = """
            SELECT COALESCE(SUM(p.amount_cents), 0)
            FROM payments p
            WHERE p.date >= ? AND p.date < ?
        """
        return from_cents(_to_int(self._scalar(sql, (start, end))))

    def credits_on(self, day: date) -> Decimal:
        start, end = day_bounds(day)
        sql = """
            SELECT COALESCE(SUM(ct.amount_cents), 0)
            FROM credit_transactions ct
            WHERE ct.date >= ? AND ct.date < ?
        """
        return from_cents(_to_int(self._scalar(sql, (start, end))))

    # ----------------------------- Customer-level ---------------------------

    @staticmethod
    def most_owed(summaries: list[CustomerSummary]) -> Optional[MostOwedCustomer]:
        """Highest balance; ties go to the lowest customer_id. None if nobody owes."""
        best: Optional[CustomerSummary] = None
        for s in sorted(summaries, key=lambda s: s.customer_id):
            if s.outstanding_balance <= 0:
                continue
            if best is None or s.outstanding_balance > best.outstanding_balance:
                best = s
        if best is None:
            return None
        return MostOwedCustomer(best.customer_id, best.name, best.outstanding_balance)

    def credit_kpis(self, today: Optional[date] = None) -> CreditKPIs:
        day = today if today is not None else local_today()
        summaries = self.ledger.summaries(day)
        return CreditKPIs(
            total_outstanding=sum((s.outstanding_balance for s in summaries), ZERO),
            total_customers_with_balance=sum(1 for s in summaries if s.outstanding_balance > 0),
            most_owed_customer=self.most_owed(summaries),
            total_collected_today=self.collected_on(day),
            total_credits_today=self.credits_on(day),
            overdue_count=sum(1 for s in summaries if s.is_overdue),
        )
