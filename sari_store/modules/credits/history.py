from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
import sqlite3
from typing import Any, Iterator, List, Sequence

from ...database.repositories.credit_transactions_repo import CreditTransactionsRepo
from ...database.repositories.payments_repo import PaymentsRepo
from ...utils.money import ZERO

CREDIT = "credit"
PAYMENT = "payment"

# at the same timestamp a credit is replayed before a payment
_KIND_ORDER = {CREDIT: 0, PAYMENT: 1}


@dataclass(frozen=True)
class CreditHistoryEntry:
    entry_id: int               # credit_transaction_id or payment_id, depending on type
    customer_id: int
    type: str                   # 'credit' | 'payment'
    amount: Decimal
    running_balance: Decimal
    date: str
    description: str


def _events(credits: Sequence[Any], payments: Sequence[Any]) -> List[tuple]:
    events = [(c.date, _KIND_ORDER[CREDIT], c.credit_transaction_id, CREDIT, c) for c in credits]
    events += [(p.date, _KIND_ORDER[PAYMENT], p.payment_id, PAYMENT, p) for p in payments]
    events.sort(key=lambda e: (e[0] or "", e[1], e[2]))
    return events


def replay(customer_id: int, credits: Sequence[Any], payments: Sequence[Any]) -> Iterator[CreditHistoryEntry]:
    """
    Fold credits and payments in chronological order into running-balance
    entries. Credits add, payments subtract, starting from zero.
    """
    balance = ZERO
    for when, _, entry_id, kind, row in _events(credits, payments):
        if kind == CREDIT:
            balance += row.amount
        else:
            balance -= row.amount
        yield CreditHistoryEntry(
            entry_id=int(entry_id),
            customer_id=int(customer_id),
            type=kind,
            amount=row.amount,
            running_balance=balance,
            date=when,
            description=row.description,
        )


class CreditHistory:
    """
    Restartable timeline for one customer.

    Nothing is cached: every iteration re-reads the customer's credits and
    payments and replays them, so two iterations with no writes in between
    give identical entries.
    """

    def __init__(self, conn: sqlite3.Connection, customer_id: int) -> None:
        self.conn = conn
        self.customer_id = customer_id

    def __iter__(self) -> Iterator[CreditHistoryEntry]:
        credits = CreditTransactionsRepo(self.conn).list_by_customer(self.customer_id, newest_first=False)
        payments = PaymentsRepo(self.conn).list_by_customer(self.customer_id, newest_first=False)
        return replay(self.customer_id, credits, payments)


class CreditHistoryService:
    """
    Presenter/service for the per-customer credit timeline.

    Pulls data from:
      - credit_transactions (+ v_credit_transaction_paid)
      - payments
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def credit_history(self, customer_id: int) -> CreditHistory:
        return CreditHistory(self.conn, customer_id)

    def entries(self, customer_id: int, *, newest_first: bool = False) -> List[CreditHistoryEntry]:
        rows = list(self.credit_history(customer_id))
        if newest_first:
            rows.reverse()
        return rows

    def final_balance(self, customer_id: int) -> Decimal:
        balance = ZERO
        for entry in self.credit_history(customer_id):
            balance = entry.running_balance
        return balance


# Optional convenience factory
def get_credit_history_service(conn: sqlite3.Connection) -> CreditHistoryService:
    return CreditHistoryService(conn)
