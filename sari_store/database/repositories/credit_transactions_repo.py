# database/repositories/credit_transactions_repo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date as _date
from decimal import Decimal
import logging
import sqlite3
from typing import Optional

from .. import transaction
from ...constants import DEFAULT_PAYMENT_METHOD
from ...modules.credits import status as credit_status
from ...utils.helpers import normalize_timestamp
from ...utils.money import MoneyLike, ZERO, from_cents, to_cents
from .errors import IntegrityError, NotFoundError, ValidationError

_log = logging.getLogger(__name__)


@dataclass
class CreditTransaction:
    credit_transaction_id: int
    customer_id: int
    amount: Decimal
    amount_paid: Decimal
    date: str
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    quantity: Optional[int] = None
    due_date: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def status(self) -> str:
        return credit_status.from_amounts(self.amount, self.amount_paid)

    @property
    def remaining(self) -> Decimal:
        rem = self.amount - self.amount_paid
        return rem if rem > 0 else ZERO

    @property
    def remaining_cents(self) -> int:
        return to_cents(self.remaining)

    @property
    def description(self) -> str:
        return self.product_name or self.notes or "Credit"


_SELECT = """
    SELECT ct.credit_transaction_id,
           ct.customer_id,
           ct.product_id,
           ct.product_name,
           ct.quantity,
           ct.amount_cents,
           v.amount_paid_cents,
           ct.date,
           ct.due_date,
           ct.notes,
           ct.created_at,
           ct.updated_at
      FROM credit_transactions ct
      JOIN v_credit_transaction_paid v
        ON v.credit_transaction_id = ct.credit_transaction_id
"""


def _from_row(r: sqlite3.Row) -> CreditTransaction:
    return CreditTransaction(
        credit_transaction_id=int(r["credit_transaction_id"]),
        customer_id=int(r["customer_id"]),
        amount=from_cents(r["amount_cents"]),
        amount_paid=from_cents(r["amount_paid_cents"]),
        date=r["date"],
        product_id=r["product_id"],
        product_name=r["product_name"],
        quantity=r["quantity"],
        due_date=r["due_date"],
        notes=r["notes"],
        created_at=r["created_at"],
        updated_at=r["updated_at"],
    )


class CreditTransactionsRepo:
    """
    Credit ("utang") transactions.

    Conventions:
      • amount is fixed once anything has been paid against it (DB trigger
        trg_credit_amount_locked_after_payment backs this up).
      • amount_paid is the sum of payment_allocations; status is derived from
        amount vs amount_paid. Neither is stored.
      • Only PaymentsRepo writes allocations; mark_all_as_paid goes through it.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # ---- internals --------------------------------------------------------

    @staticmethod
    def _positive_cents(amount: MoneyLike, label: str = "Amount") -> int:
        try:
            cents = to_cents(amount)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if cents <= 0:
            raise ValidationError(f"{label} must be greater than zero.")
        return cents

    @staticmethod
    def _quantity(quantity: Optional[int]) -> Optional[int]:
        if quantity is None:
            return None
        try:
            q = int(quantity)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Quantity {quantity!r} is not a whole number.") from e
        if q <= 0:
            raise ValidationError("Quantity must be greater than zero.")
        return q

    @staticmethod
    def _due_date(due_date: Optional[str | _date]) -> Optional[str]:
        if due_date is None or due_date == "":
            return None
        if isinstance(due_date, _date):
            return due_date.isoformat()[:10]
        text = str(due_date).strip()[:10]
        try:
            return _date.fromisoformat(text).isoformat()
        except ValueError as e:
            raise ValidationError(f"Due date {due_date!r} is not a valid date.") from e

    @staticmethod
    def _text(s: Optional[str]) -> Optional[str]:
        if s is None:
            return None
        return s.strip() or None

    def _customer_exists(self, customer_id: int) -> bool:
        r = self.conn.execute(
            "SELECT 1 FROM customers WHERE customer_id = ?", (customer_id,)
        ).fetchone()
        return r is not None

    def _has_allocations(self, credit_transaction_id: int) -> bool:
        r = self.conn.execute(
            "SELECT 1 FROM payment_allocations WHERE credit_transaction_id = ? LIMIT 1",
            (credit_transaction_id,),
        ).fetchone()
        return r is not None

    # ---- Queries ----------------------------------------------------------

    def get(self, credit_transaction_id: int) -> CreditTransaction | None:
        r = self.conn.execute(
            _SELECT + " WHERE ct.credit_transaction_id = ?",
            (credit_transaction_id,),
        ).fetchone()
        return _from_row(r) if r else None

    def require(self, credit_transaction_id: int) -> CreditTransaction:
        ct = self.get(credit_transaction_id)
        if ct is None:
            raise NotFoundError(f"Credit #{credit_transaction_id} does not exist.")
        return ct

    def list_by_customer(self, customer_id: int, *, newest_first: bool = True) -> list[CreditTransaction]:
        order = "DESC" if newest_first else "ASC"
        rows = self.conn.execute(
            _SELECT
            + f" WHERE ct.customer_id = ? ORDER BY ct.date {order}, ct.credit_transaction_id {order}",
            (customer_id,),
        ).fetchall()
        return [_from_row(r) for r in rows]

    def list_open_by_customer(self, customer_id: int) -> list[CreditTransaction]:
        """Not-fully-paid credits, oldest first (FIFO order)."""
        rows = self.conn.execute(
            _SELECT
            + """
             WHERE ct.customer_id = ?
               AND v.amount_paid_cents < ct.amount_cents
             ORDER BY ct.date ASC, ct.credit_transaction_id ASC
            """,
            (customer_id,),
        ).fetchall()
        return [_from_row(r) for r in rows]

    def list_all(self) -> list[CreditTransaction]:
        rows = self.conn.execute(
            _SELECT + " ORDER BY ct.customer_id ASC, ct.date ASC, ct.credit_transaction_id ASC"
        ).fetchall()
        return [_from_row(r) for r in rows]

    # ---- Mutations --------------------------------------------------------

    def create_credit(
        self,
        *,
        customer_id: int,
        amount: MoneyLike,
        product_name: Optional[str] = None,
        product_id: Optional[int] = None,
        quantity: Optional[int] = None,
        due_date: Optional[str | _date] = None,
        notes: Optional[str] = None,
        date: Optional[str] = None,           # defaults to now (local time)
    ) -> int:
        """
        Record goods/money extended on credit. Starts unpaid.
        Returns the new credit_transaction_id.
        """
        cents = self._positive_cents(amount)
        qty = self._quantity(quantity)
        due = self._due_date(due_date)
        try:
            when = normalize_timestamp(date)
        except ValueError as e:
            raise ValidationError(f"Date {date!r} is not a valid date.") from e

        with transaction(self.conn):
            if not self._customer_exists(customer_id):
                raise ValidationError(f"Customer #{customer_id} does not exist.")
            cur = self.conn.execute(
                """
                INSERT INTO credit_transactions
                    (customer_id, product_id, product_name, quantity, amount_cents, date, due_date, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (customer_id, product_id, self._text(product_name), qty, cents, when, due, self._text(notes)),
            )
        credit_id = int(cur.lastrowid)
        _log.info("credit #%s for customer #%s: %s centavos", credit_id, customer_id, cents)
        return credit_id

    def update_credit(
        self,
        credit_transaction_id: int,
        *,
        product_name: Optional[str] = None,
        product_id: Optional[int] = None,
        quantity: Optional[int] = None,
        due_date: Optional[str | _date] = None,
        notes: Optional[str] = None,
        amount: Optional[MoneyLike] = None,   # None keeps the current amount
    ) -> None:
        """
        Replace the descriptive fields of a credit. The amount may only change
        while nothing has been paid against it.
        """
        qty = self._quantity(quantity)
        due = self._due_date(due_date)
        new_cents = None if amount is None else self._positive_cents(amount)

        with transaction(self.conn):
            current = self.require(credit_transaction_id)
            cents = to_cents(current.amount)
            if new_cents is not None and new_cents != cents:
                if self._has_allocations(credit_transaction_id):
                    raise ValidationError(
                        "Amount cannot change after payments were applied to this credit."
                    )
                cents = new_cents
            self.conn.execute(
                """
                UPDATE credit_transactions
                   SET product_id = ?, product_name = ?, quantity = ?, amount_cents = ?,
                       due_date = ?, notes = ?, updated_at = datetime('now','localtime')
                 WHERE credit_transaction_id = ?
                """,
                (product_id, self._text(product_name), qty, cents, due, self._text(notes),
                 credit_transaction_id),
            )

    def delete_credit(self, credit_transaction_id: int) -> None:
        """
        Remove a credit. Refused while payments are applied to it, since
        dropping their allocations would leave those payments unaccounted for;
        delete the payments first.
        """
        with transaction(self.conn):
            self.require(credit_transaction_id)
            if self._has_allocations(credit_transaction_id):
                _log.warning("refused delete of credit #%s: payments applied", credit_transaction_id)
                raise IntegrityError(
                    f"Credit #{credit_transaction_id} has payments applied; delete those payments first."
                )
            self.conn.execute(
                "DELETE FROM credit_transactions WHERE credit_transaction_id = ?",
                (credit_transaction_id,),
            )
        _log.info("credit #%s deleted", credit_transaction_id)

    def mark_all_as_paid(
        self,
        customer_id: int,
        *,
        payment_method: str = DEFAULT_PAYMENT_METHOD,
        notes: Optional[str] = "Marked all as paid",
        date: Optional[str] = None,
    ) -> Optional[int]:
        """
        Settle every open credit of the customer in one transaction.

        Records a single settlement payment for the total remaining and
        allocates it across all open credits, so the balance identity
        (credits − payments == Σ remaining) still holds afterwards.
        Returns the payment id, or None when nothing was open.
        """
        # deferred: payments_repo imports this module
        from .payments_repo import PaymentsRepo

        payments = PaymentsRepo(self.conn)
        with transaction(self.conn):
            if not self._customer_exists(customer_id):
                raise NotFoundError(f"Customer #{customer_id} does not exist.")
            open_credits = self.list_open_by_customer(customer_id)
            if not open_credits:
                return None
            total = sum(c.remaining_cents for c in open_credits)
            payment_id = payments.record_payment(
                customer_id=customer_id,
                amount=from_cents(total),
                payment_method=payment_method,
                notes=notes,
                date=date,
            )
        _log.info("customer #%s settled in full by payment #%s", customer_id, payment_id)
        return payment_id
