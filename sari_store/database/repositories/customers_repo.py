from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
import logging
import sqlite3

from .. import transaction
from ...utils.money import MoneyLike, from_cents, to_cents
from .errors import NotFoundError, ValidationError

_log = logging.getLogger(__name__)


@dataclass
class Customer:
    customer_id: int | None
    name: str
    phone: str | None = None
    address: str | None = None
    notes: str | None = None
    credit_limit: Decimal | None = None
    created_at: str | None = None
    updated_at: str | None = None


_COLUMNS = (
    "customer_id, name, phone, address, notes, credit_limit_cents, created_at, updated_at"
)


def _from_row(r: sqlite3.Row) -> Customer:
    limit = r["credit_limit_cents"]
    return Customer(
        customer_id=int(r["customer_id"]),
        name=r["name"],
        phone=r["phone"],
        address=r["address"],
        notes=r["notes"],
        credit_limit=None if limit is None else from_cents(limit),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
    )


class CustomersRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _normalize_text(s: str | None) -> str | None:
        if s is None:
            return None
        # Blank optional fields are stored as NULL
        return s.strip() or None

    @staticmethod
    def _ensure_non_empty(value: str | None, field_label: str) -> None:
        if value is None or value.strip() == "":
            raise ValidationError(f"{field_label} cannot be empty.")

    @staticmethod
    def _limit_cents(credit_limit: MoneyLike | None) -> int | None:
        if credit_limit is None or credit_limit == "":
            return None
        try:
            cents = to_cents(credit_limit)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if cents < 0:
            raise ValidationError("Credit limit cannot be negative.")
        return cents

    # ---- Queries ----------------------------------------------------------

    def list_customers(self) -> list[Customer]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM customers ORDER BY customer_id ASC"
        ).fetchall()
        return [_from_row(r) for r in rows]

    def get(self, customer_id: int) -> Customer | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM customers WHERE customer_id=?",
            (customer_id,),
        ).fetchone()
        return _from_row(r) if r else None

    def exists(self, customer_id: int) -> bool:
        r = self.conn.execute(
            "SELECT 1 FROM customers WHERE customer_id=?", (customer_id,)
        ).fetchone()
        return r is not None

    def require(self, customer_id: int) -> Customer:
        cust = self.get(customer_id)
        if cust is None:
            raise NotFoundError(f"Customer #{customer_id} does not exist.")
        return cust

    # ---- Mutations --------------------------------------------------------

    def create(
        self,
        name: str,
        phone: str | None = None,
        address: str | None = None,
        notes: str | None = None,
        credit_limit: MoneyLike | None = None,
    ) -> int:
        self._ensure_non_empty(name, "Name")
        limit = self._limit_cents(credit_limit)

        with transaction(self.conn):
            cur = self.conn.execute(
                "INSERT INTO customers(name, phone, address, notes, credit_limit_cents) "
                "VALUES (?,?,?,?,?)",
                (
                    name.strip(),
                    self._normalize_text(phone),
                    self._normalize_text(address),
                    self._normalize_text(notes),
                    limit,
                ),
            )
        customer_id = int(cur.lastrowid)
        _log.info("customer #%s created", customer_id)
        return customer_id

    def update(
        self,
        customer_id: int,
        name: str,
        phone: str | None = None,
        address: str | None = None,
        notes: str | None = None,
        credit_limit: MoneyLike | None = None,
    ) -> None:
        self._ensure_non_empty(name, "Name")
        limit = self._limit_cents(credit_limit)

        with transaction(self.conn):
            cur = self.conn.execute(
                "UPDATE customers "
                "SET name=?, phone=?, address=?, notes=?, credit_limit_cents=?, "
                "    updated_at=datetime('now','localtime') "
                "WHERE customer_id=?",
                (
                    name.strip(),
                    self._normalize_text(phone),
                    self._normalize_text(address),
                    self._normalize_text(notes),
                    limit,
                    customer_id,
                ),
            )
            if cur.rowcount == 0:
                raise NotFoundError(f"Customer #{customer_id} does not exist.")

    def delete(self, customer_id: int) -> None:
        """
        Hard delete. Credits, payments and allocations go with the customer
        (ON DELETE CASCADE), all inside one transaction.
        """
        with transaction(self.conn):
            cur = self.conn.execute("DELETE FROM customers WHERE customer_id=?", (customer_id,))
            if cur.rowcount == 0:
                raise NotFoundError(f"Customer #{customer_id} does not exist.")
        _log.info("customer #%s deleted with its ledger", customer_id)
