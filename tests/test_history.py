# tests/test_history.py
from decimal import Decimal

from sari_store.database.repositories import LedgerRepo
from sari_store.modules.credits.history import (
    CREDIT,
    PAYMENT,
    CreditHistoryService,
    get_credit_history_service,
)

D = Decimal


def test_running_balance_in_chronological_order(conn, nena, make_credit, make_payment):
    make_credit(nena, "500", "2025-03-01", product_name="Bigas")
    make_credit(nena, "300", "2025-03-02", product_name="Mantika")
    make_payment(nena, "500", "2025-03-03", notes="Sahod")

    entries = get_credit_history_service(conn).entries(nena)
    assert [(e.type, e.amount, e.running_balance) for e in entries] == [
        (CREDIT, D("500.00"), D("500.00")),
        (CREDIT, D("300.00"), D("800.00")),
        (PAYMENT, D("500.00"), D("300.00")),
    ]
    assert [e.description for e in entries] == ["Bigas", "Mantika", "Sahod"]


def test_credit_before_payment_at_same_timestamp(conn, nena, make_credit, make_payment):
    make_credit(nena, "100", "2025-03-01 10:00:00")
    make_payment(nena, "100", "2025-03-01 10:00:00")
    entries = CreditHistoryService(conn).entries(nena)
    assert [e.type for e in entries] == [CREDIT, PAYMENT]
    assert entries[-1].running_balance == D("0.00")


def test_history_is_restartable_and_idempotent(conn, nena, make_credit, make_payment):
    make_credit(nena, "250", "2025-03-01")
    make_payment(nena, "100", "2025-03-02")
    history = CreditHistoryService(conn).credit_history(nena)
    assert list(history) == list(history)


def test_history_sees_later_writes(conn, nena, make_credit):
    history = CreditHistoryService(conn).credit_history(nena)
    assert list(history) == []
    make_credit(nena, "40", "2025-03-01")
    assert len(list(history)) == 1


def test_final_balance_matches_ledger_summary(conn, nena, make_credit, make_payment):
    make_credit(nena, "75.25", "2025-03-01")
    make_credit(nena, "120", "2025-03-05")
    make_payment(nena, "50", "2025-03-06")
    make_credit(nena, "10", "2025-03-07")
    make_payment(nena, "20.25", "2025-03-08", payment_method="other")

    service = CreditHistoryService(conn)
    assert service.final_balance(nena) == LedgerRepo(conn).summary(nena).outstanding_balance == D("135.00")


def test_newest_first_reverses(conn, nena, make_credit, make_payment):
    make_credit(nena, "10", "2025-03-01")
    make_payment(nena, "5", "2025-03-02")
    entries = CreditHistoryService(conn).entries(nena, newest_first=True)
    assert [e.type for e in entries] == [PAYMENT, CREDIT]


def test_unknown_customer_has_empty_history(conn):
    assert CreditHistoryService(conn).entries(999) == []
    assert CreditHistoryService(conn).final_balance(999) == D("0.00")
