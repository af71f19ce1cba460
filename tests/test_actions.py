# tests/test_actions.py
from decimal import Decimal

from sari_store.database.repositories import LedgerRepo
from sari_store.modules.credits import actions
from sari_store.modules.credits.history import CREDIT, PAYMENT


def test_add_customer_success_and_failure(conn):
    ok = actions.add_customer(conn=conn, form={"name": "Aling Nena", "phone": "0917"})
    assert ok.success and ok.id is not None
    assert ok.message == "Customer added."

    bad = actions.add_customer(conn=conn, form={"name": "  "})
    assert not bad.success
    assert bad.error == "ValidationError"
    assert "Name" in bad.message
    assert bad.payload == {"name": "  "}


def test_add_credit_and_receive_payment(conn, nena):
    credit = actions.add_credit(conn=conn, customer_id=nena, form={"amount": "300", "product_name": "Gatas"})
    assert credit.success

    over = actions.receive_payment(
        conn=conn, customer_id=nena,
        form={"amount": "350", "credit_transaction_id": credit.id},
    )
    assert not over.success
    assert over.error == "ValidationError"

    paid = actions.receive_payment(conn=conn, customer_id=nena, form={"amount": "100"})
    assert paid.success and paid.message == "Payment recorded."
    assert LedgerRepo(conn).summary(nena).outstanding_balance == Decimal("200.00")


def test_missing_amount_is_reported(conn, nena):
    r = actions.add_credit(conn=conn, customer_id=nena, form={"product_name": "Load"})
    assert not r.success and "amount" in r.message
    r = actions.receive_payment(conn=conn, customer_id=nena, form={})
    assert not r.success and r.error == "ValidationError"


def test_remove_payment_and_customer(conn, nena, make_credit, make_payment):
    make_credit(nena, "80", "2025-03-01")
    pid = make_payment(nena, "80", "2025-03-02")

    assert actions.remove_payment(conn=conn, payment_id=pid).success
    missing = actions.remove_payment(conn=conn, payment_id=pid)
    assert not missing.success and missing.error == "NotFoundError"

    assert actions.remove_customer(conn=conn, customer_id=nena).success
    assert actions.remove_customer(conn=conn, customer_id=nena).error == "NotFoundError"


def test_settle_all(conn, nena, make_credit):
    assert actions.settle_all(conn=conn, customer_id=nena).message == "Nothing to settle."
    make_credit(nena, "80", "2025-03-01")
    make_credit(nena, "20", "2025-03-02")
    r = actions.settle_all(conn=conn, customer_id=nena)
    assert r.success and r.id is not None
    assert LedgerRepo(conn).summary(nena).outstanding_balance == Decimal("0.00")
    assert actions.settle_all(conn=conn, customer_id=999).error == "NotFoundError"


def test_open_credit_history_payload(conn, nena, make_credit, make_payment):
    make_credit(nena, "50", "2025-03-01")
    make_payment(nena, "20", "2025-03-02")
    r = actions.open_credit_history(conn=conn, customer_id=nena)
    assert r.success
    assert [e.type for e in r.payload["entries"]] == [CREDIT, PAYMENT]


def test_repo_factory_override(conn):
    calls = []

    class FakeRepo:
        def create(self, **kw):
            calls.append(kw)
            return 42

    r = actions.add_customer(conn=conn, form={"name": "X"}, repo_factory=lambda c: FakeRepo())
    assert r.id == 42
    assert calls[0]["name"] == "X"


def test_form_amounts_checked_before_repo(conn, nena):
    r = actions.add_credit(conn=conn, customer_id=nena, form={"amount": "0.004"})
    assert not r.success and r.message == "Amount must be greater than zero."
    r = actions.receive_payment(conn=conn, customer_id=nena, form={"amount": "abc"})
    assert not r.success and r.error == "ValidationError"
    r = actions.add_customer(conn=conn, form={"name": "Z", "credit_limit": "-10"})
    assert not r.success and "Credit limit" in r.message


def test_out_of_range_amounts_fail_cleanly(conn, nena, make_credit):
    make_credit(nena, "100", "2025-03-01")
    for amount in ("1e20", "1e30"):
        r = actions.add_credit(conn=conn, customer_id=nena, form={"amount": amount})
        assert not r.success and r.error == "ValidationError"
        r = actions.receive_payment(conn=conn, customer_id=nena, form={"amount": amount})
        assert not r.success and r.error == "ValidationError"
    r = actions.add_customer(conn=conn, form={"name": "Z", "credit_limit": "1e30"})
    assert not r.success and r.error == "ValidationError"
    assert LedgerRepo(conn).summary(nena).outstanding_balance == Decimal("100.00")
