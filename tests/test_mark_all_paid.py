# tests/test_mark_all_paid.py
from decimal import Decimal

import pytest

from sari_store.database.repositories import LedgerRepo, NotFoundError, PaymentsRepo
from sari_store.modules.credits import status

D = Decimal


def test_settles_every_open_credit(conn, credits, payments, nena, make_credit, make_payment):
    a = make_credit(nena, "100", "2025-03-01")
    b = make_credit(nena, "200", "2025-03-02")
    c = make_credit(nena, "50", "2025-03-03")
    make_payment(nena, "30", "2025-03-04")

    pid = credits.mark_all_as_paid(nena, date="2025-03-05")

    assert pid is not None
    assert {credits.require(x).status for x in (a, b, c)} == {status.PAID}
    assert payments.require(pid).amount == D("320.00")
    assert payments.require(pid).notes == "Marked all as paid"
    s = LedgerRepo(conn).summary(nena)
    assert s.outstanding_balance == D("0.00")
    assert s.total_credits - s.total_payments == D("0.00")


def test_nothing_open_returns_none(credits, payments, nena, make_credit, make_payment):
    make_credit(nena, "10", "2025-03-01")
    make_payment(nena, "10", "2025-03-02")
    assert credits.mark_all_as_paid(nena) is None
    assert len(payments.list_by_customer(nena)) == 1


def test_unknown_customer(credits):
    with pytest.raises(NotFoundError):
        credits.mark_all_as_paid(4040)


def test_failure_rolls_everything_back(conn, credits, nena, make_credit, monkeypatch):
    a = make_credit(nena, "100", "2025-03-01")
    b = make_credit(nena, "200", "2025-03-02")

    real = PaymentsRepo.record_payment

    def record_then_fail(self, **kw):
        real(self, **kw)
        raise RuntimeError("power cut")

    monkeypatch.setattr(PaymentsRepo, "record_payment", record_then_fail)

    with pytest.raises(RuntimeError):
        credits.mark_all_as_paid(nena)

    assert not conn.in_transaction
    assert conn.execute("SELECT COUNT(*) FROM payments").fetchone()[0] == 0
    assert conn.execute("SELECT COUNT(*) FROM payment_allocations").fetchone()[0] == 0
    assert credits.require(a).status == status.UNPAID
    assert credits.require(b).status == status.UNPAID
