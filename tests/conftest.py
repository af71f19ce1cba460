# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures), offscreen
# - Every test gets its own file-backed DB under tmp_path
# - conn comes from sari_store.database.get_connection (schema applied,
#   foreign_keys=ON, row_factory = sqlite3.Row)
# - Provide handy seeding helpers for customers / credits / payments
# ---------------------------------------------------------------------

from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from datetime import date
import sqlite3

import pytest

from sari_store.database import get_connection
from sari_store.database.repositories import (
    CreditTransactionsRepo,
    CustomersRepo,
    PaymentsRepo,
)

# Fixed "today" so overdue / aging / tag assertions do not depend on the clock.
TODAY = date(2025, 3, 15)


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


# ---------- Per-test database ----------
@pytest.fixture()
def conn(tmp_path) -> sqlite3.Connection:
    con = get_connection(tmp_path / "test.db")
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def today() -> date:
    return TODAY


# ---------- Repos ----------
@pytest.fixture()
def customers(conn) -> CustomersRepo:
    return CustomersRepo(conn)


@pytest.fixture()
def credits(conn) -> CreditTransactionsRepo:
    return CreditTransactionsRepo(conn)


@pytest.fixture()
def payments(conn) -> PaymentsRepo:
    return PaymentsRepo(conn)


# ---------- Seeding helpers ----------
@pytest.fixture()
def nena(customers) -> int:
    """Aling Nena, a regular with a phone number."""
    return customers.create(name="Aling Nena", phone="0917-555-0101", address="Purok 3")


@pytest.fixture()
def make_customer(customers):
    def _make(name: str, **kw) -> int:
        return customers.create(name=name, **kw)
    return _make


@pytest.fixture()
def make_credit(credits):
    def _make(customer_id: int, amount, date: str, **kw) -> int:
        return credits.create_credit(customer_id=customer_id, amount=amount, date=date, **kw)
    return _make


@pytest.fixture()
def make_payment(payments):
    def _make(customer_id: int, amount, date: str, **kw) -> int:
        return payments.record_payment(customer_id=customer_id, amount=amount, date=date, **kw)
    return _make
