# database/repositories/reporting_repo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
import sqlite3
from typing import List, Optional, Tuple

from ...constants import AGING_BUCKETS
from ...modules.credits.balance import AgingBucket, aging_buckets
from ...utils.helpers import local_today, parse_day
from ...utils.money import ZERO, from_cents
from .credit_transactions_repo import CreditTransactionsRepo


@dataclass
class CreditsOverview:
    issued: Decimal = ZERO
    collected: Decimal = ZERO
    outstanding: Decimal = ZERO
    active_accounts: int = 0


class ReportingRepo:
    """
    Credit reports for the reports screen.

    Range filters take inclusive 'YYYY-MM-DD' days and compare stored
    timestamps against [date_from 00:00:00, date_to + 1 day 00:00:00).
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        # Ensure we can access columns by name.
        self.conn.row_factory = sqlite3.Row
        self.credits = CreditTransactionsRepo(conn)

    @staticmethod
    def _range(date_from: str | date, date_to: str | date) -> Tuple[str, str]:
        start = parse_day(date_from)
        end = parse_day(date_to)
        if start is None or end is None:
            raise ValueError("Both date_from and date_to are required.")
        if end < start:
            start, end = end, start
        return f"{start.isoformat()} 00:00:00", f"{(end + timedelta(days=1)).isoformat()} 00:00:00"

    def credits_overview(self, date_from: str | date, date_to: str | date) -> CreditsOverview:
        start, end = self._range(date_from, date_to)
        issued = self.conn.execute(
            "SELECT COALESCE(SUM(amount_cents), 0) FROM credit_transactions WHERE date >= ? AND date < ?",
            (start, end),
        ).fetchone()[0]
        collected = self.conn.execute(
            "SELECT COALESCE(SUM(amount_cents), 0) FROM payments WHERE date >= ? AND date < ?",
            (start, end),
        ).fetchone()[0]
        # outstanding / active accounts are as of now, not range-bound
        open_row = self.conn.execute(
            """
            SELECT COALESCE(SUM(amount_cents - amount_paid_cents), 0) AS outstanding,
                   COUNT(DISTINCT customer_id)                         AS accounts
              FROM v_credit_transaction_paid
             WHERE amount_paid_cents < amount_cents
            """
        ).fetchone()
        return CreditsOverview(
            issued=from_cents(issued),
            collected=from_cents(collected),
            outstanding=from_cents(open_row["outstanding"]),
            active_accounts=int(open_row["accounts"] or 0),
        )

    def aging_buckets(
        self,
        today: Optional[date] = None,
        buckets: Tuple[Tuple[str, int, Optional[int]], ...] = AGING_BUCKETS,
    ) -> List[AgingBucket]:
        """Open credits across all customers, bucketed by age of their credit date."""
        day = today if today is not None else local_today()
        return aging_buckets(self.credits.list_all(), day, buckets)

    def customer_aging(self, customer_id: int, today: Optional[date] = None) -> List[AgingBucket]:
        day = today if today is not None else local_today()
        return aging_buckets(self.credits.list_by_customer(customer_id), day)
