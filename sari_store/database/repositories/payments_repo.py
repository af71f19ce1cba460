from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
import logging
import sqlite3
from typing import Optional

from .. import transaction
from ...constants import DEFAULT_PAYMENT_METHOD, PAYMENT_METHODS
from ...modules.credits.allocation import (
    STRATEGY_OLDEST_FIRST,
    AllocationLine,
    plan_allocation,
    sum_remaining_cents,
)
from ...utils.helpers import normalize_timestamp
from ...utils.money import MoneyLike, from_cents, to_cents
from .credit_transactions_repo import CreditTransactionsRepo
from .errors import AllocationError, IntegrityError, NotFoundError, ValidationError

_log = logging.getLogger(__name__)


@dataclass
class Payment:
    payment_id: int
    customer_id: int
    amount: Decimal
    payment_method: str
    date: str
    credit_transaction_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def description(self) -> str:
        return self.notes or "Payment"


@dataclass
class PaymentAllocation:
    allocation_id: int
    payment_id: int
    credit_transaction_id: int
    amount: Decimal


def _payment_from_row(r: sqlite3.Row) -> Payment:
    return Payment(
        payment_id=int(r["payment_id"]),
        customer_id=int(r["customer_id"]),
        amount=from_cents(r["amount_cents"]),
        payment_method=r["payment_method"],
        date=r["date"],
        credit_transaction_id=r["credit_transaction_id"],
        notes=r["notes"],
        created_at=r["created_at"],
    )


def _allocation_from_row(r: sqlite3.Row) -> PaymentAllocation:
    return PaymentAllocation(
        allocation_id=int(r["allocation_id"]),
        payment_id=int(r["payment_id"]),
        credit_transaction_id=int(r["credit_transaction_id"]),
        amount=from_cents(r["amount_cents"]),
    )


class PaymentsRepo:
    """
    Repository for customer payments (rows in payments + payment_allocations).

    Rules enforced here (mirrors DB-side guards):
      • amount > 0, method in PAYMENT_METHODS.
      • Targeted payment: the credit must belong to the customer, must still
        have something remaining, and the payment may not exceed that
        remaining. Never clamped; the caller splits the payment instead.
      • Untargeted payment: may not exceed what the customer owes; it is
        spread over open credits oldest first (FIFO).
      • Each payment writes ONE payments row plus one allocation row per
        credit it touches, inside a single transaction.

    Lifecycle:
      • record_payment(...) to insert.
      • delete_payment(...) to reverse; allocations go with it, restoring
        each credit's amount_paid.
    """

    METHODS: set[str] = set(PAYMENT_METHODS)

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.credits = CreditTransactionsRepo(conn)

    # ---- internals --------------------------------------------------------

    @classmethod
    def _normalize_method(cls, method: Optional[str]) -> str:
        m = (method or DEFAULT_PAYMENT_METHOD).strip().lower().replace(" ", "_")
        if m not in cls.METHODS:
            raise ValidationError(
                f"Payment method must be one of: {', '.join(PAYMENT_METHODS)}"
            )
        return m

    def _customer_exists(self, customer_id: int) -> bool:
        r = self.conn.execute(
            "SELECT 1 FROM customers WHERE customer_id = ?", (customer_id,)
        ).fetchone()
        return r is not None

    def _targeted_lines(self, customer_id: int, credit_transaction_id: int, cents: int) -> list[AllocationLine]:
        target = self.credits.get(credit_transaction_id)
        if target is None:
            raise ValidationError(f"Credit #{credit_transaction_id} does not exist.")
        if target.customer_id != int(customer_id):
            raise ValidationError("Credit does not belong to the specified customer.")
        remaining = target.remaining_cents
        if remaining <= 0:
            raise ValidationError(f"Credit #{credit_transaction_id} is already fully paid.")
        if cents > remaining:
            raise ValidationError(
                f"Cannot apply {from_cents(cents)}; remaining on credit is {from_cents(remaining)}."
            )
        return [AllocationLine(int(credit_transaction_id), cents)]

    def _fifo_lines(self, customer_id: int, cents: int, strategy: str) -> list[AllocationLine]:
        open_credits = self.credits.list_open_by_customer(customer_id)
        owed = sum_remaining_cents(open_credits)
        if owed <= 0:
            raise ValidationError("Customer has no outstanding balance.")
        if cents > owed:
            raise ValidationError(
                f"Payment {from_cents(cents)} exceeds outstanding balance {from_cents(owed)}."
            )
        plan = plan_allocation(cents, open_credits, strategy=strategy)
        if not plan.is_complete:
            raise AllocationError(
                f"{from_cents(plan.unallocated_cents)} of the payment could not be allocated."
            )
        return plan.lines

    # ---- API --------------------------------------------------------------

    def record_payment(
        self,
        *,
        customer_id: int,
        amount: MoneyLike,
        credit_transaction_id: Optional[int] = None,
        payment_method: Optional[str] = DEFAULT_PAYMENT_METHOD,
        notes: Optional[str] = None,
        date: Optional[str] = None,           # defaults to now (local time)
        strategy: str = STRATEGY_OLDEST_FIRST,
    ) -> int:
        """
        Record a payment and apply it. Returns the new payment_id.

        Nothing is written unless the whole amount lands on credits.
        """
        try:
            cents = to_cents(amount)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if cents <= 0:
            raise ValidationError("Payment amount must be greater than zero.")
        method = self._normalize_method(payment_method)
        try:
            when = normalize_timestamp(date)
        except ValueError as e:
            raise ValidationError(f"Date {date!r} is not a valid date.") from e

        try:
            with transaction(self.conn):
                if not self._customer_exists(customer_id):
                    raise NotFoundError(f"Customer #{customer_id} does not exist.")

                if credit_transaction_id is not None:
                    lines = self._targeted_lines(customer_id, credit_transaction_id, cents)
                else:
                    lines = self._fifo_lines(customer_id, cents, strategy)

                if sum(line.amount_cents for line in lines) != cents:
                    raise AllocationError("Allocation does not add up to the payment amount.")

                cur = self.conn.execute(
                    """
                    INSERT INTO payments
                        (customer_id, credit_transaction_id, amount_cents, payment_method, date, notes)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (customer_id, credit_transaction_id, cents, method, when, (notes or "").strip() or None),
                )
                payment_id = int(cur.lastrowid)
                self.conn.executemany(
                    """
                    INSERT INTO payment_allocations (payment_id, credit_transaction_id, amount_cents)
                    VALUES (?, ?, ?)
                    """,
                    [(payment_id, line.credit_transaction_id, line.amount_cents) for line in lines],
                )
        except sqlite3.IntegrityError as e:
            # guard triggers (over-allocation / cross-customer)
            _log.error("payment for customer #%s rejected by ledger guard: %s", customer_id, e)
            raise AllocationError(str(e)) from e

        _log.info(
            "payment #%s for customer #%s: %s centavos over %d credit(s)",
            payment_id, customer_id, cents, len(lines),
        )
        return payment_id

    def delete_payment(self, payment_id: int) -> None:
        """
        Reverse a payment: its allocations are removed with it, which
        restores amount_paid (and therefore status) on every credit it touched.
        """
        with transaction(self.conn):
            self.require(payment_id)
            allocations = self.allocations_for_payment(payment_id)
            for a in allocations:
                row = self.conn.execute(
                    "SELECT amount_paid_cents FROM v_credit_transaction_paid WHERE credit_transaction_id = ?",
                    (a.credit_transaction_id,),
                ).fetchone()
                paid = int(row["amount_paid_cents"]) if row else 0
                if paid - to_cents(a.amount) < 0:
                    raise IntegrityError(
                        f"Reversing payment #{payment_id} would make credit "
                        f"#{a.credit_transaction_id} negative."
                    )
            self.conn.execute("DELETE FROM payments WHERE payment_id = ?", (payment_id,))
        _log.info("payment #%s reversed (%d allocation(s))", payment_id, len(allocations))

    def get(self, payment_id: int) -> Payment | None:
        r = self.conn.execute(
            "SELECT * FROM payments WHERE payment_id = ?", (payment_id,)
        ).fetchone()
        return _payment_from_row(r) if r else None

    def require(self, payment_id: int) -> Payment:
        p = self.get(payment_id)
        if p is None:
            raise NotFoundError(f"Payment #{payment_id} does not exist.")
        return p

    def list_by_customer(self, customer_id: int, *, newest_first: bool = True) -> list[Payment]:
        order = "DESC" if newest_first else "ASC"
        rows = self.conn.execute(
            f"SELECT * FROM payments WHERE customer_id = ? ORDER BY date {order}, payment_id {order}",
            (customer_id,),
        ).fetchall()
        return [_payment_from_row(r) for r in rows]

    def list_all(self) -> list[Payment]:
        rows = self.conn.execute(
            "SELECT * FROM payments ORDER BY customer_id ASC, date ASC, payment_id ASC"
        ).fetchall()
        return [_payment_from_row(r) for r in rows]

    def allocations_for_payment(self, payment_id: int) -> list[PaymentAllocation]:
        rows = self.conn.execute(
            "SELECT * FROM payment_allocations WHERE payment_id = ? ORDER BY allocation_id",
            (payment_id,),
        ).fetchall()
        return [_allocation_from_row(r) for r in rows]

    def allocations_for_credit(self, credit_transaction_id: int) -> list[PaymentAllocation]:
        rows = self.conn.execute(
            "SELECT * FROM payment_allocations WHERE credit_transaction_id = ? ORDER BY allocation_id",
            (credit_transaction_id,),
        ).fetchall()
        return [_allocation_from_row(r) for r in rows]


# Optional convenience factory
def get_payments_repo(conn: sqlite3.Connection) -> PaymentsRepo:
    return PaymentsRepo(conn)
