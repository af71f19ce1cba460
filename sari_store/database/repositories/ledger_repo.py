# database/repositories/ledger_repo.py
from __future__ import annotations

from collections import defaultdict
from datetime import date
import sqlite3
from typing import Dict, List, Optional

from ...modules.credits.balance import CustomerSummary, summarize
from ...utils.helpers import local_today
from .credit_transactions_repo import CreditTransaction, CreditTransactionsRepo
from .customers_repo import CustomersRepo
from .payments_repo import Payment, PaymentsRepo


class LedgerRepo:
    """
    Read side of the ledger: customers joined with their credits and payments,
    turned into CustomerSummary view-models by the pure balance helpers.

    Nothing derived is cached; every call reads fresh rows.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.customers = CustomersRepo(conn)
        self.credits = CreditTransactionsRepo(conn)
        self.payments = PaymentsRepo(conn)

    @staticmethod
    def _today(today: Optional[date]) -> date:
        return today if today is not None else local_today()

    def summary(
        self,
        customer_id: int,
        today: Optional[date] = None,
        *,
        keep_rows: bool = False,
    ) -> Optional[CustomerSummary]:
        cust = self.customers.get(customer_id)
        if cust is None:
            return None
        credits = self.credits.list_by_customer(customer_id)
        payments = self.payments.list_by_customer(customer_id)
        return summarize(cust, credits, payments, self._today(today), keep_rows=keep_rows)

    def summaries(self, today: Optional[date] = None) -> List[CustomerSummary]:
        """One summary per customer, in customer_id order."""
        day = self._today(today)
        credits_by: Dict[int, List[CreditTransaction]] = defaultdict(list)
        for c in self.credits.list_all():
            credits_by[c.customer_id].append(c)
        payments_by: Dict[int, List[Payment]] = defaultdict(list)
        for p in self.payments.list_all():
            payments_by[p.customer_id].append(p)
        return [
            summarize(cust, credits_by.get(cust.customer_id, []), payments_by.get(cust.customer_id, []), day)
            for cust in self.customers.list_customers()
        ]
