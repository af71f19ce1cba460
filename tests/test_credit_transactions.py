# tests/test_credit_transactions.py
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from sari_store.database.repositories import (
    IntegrityError,
    NotFoundError,
    ValidationError,
)
from sari_store.modules.credits import status


def test_new_credit_starts_unpaid(credits, nena):
    cid = credits.create_credit(
        customer_id=nena, amount="125.50", product_name="Bigas 2kg", quantity=2,
        due_date="2025-03-20", date="2025-03-01",
    )
    c = credits.require(cid)
    assert c.amount == Decimal("125.50")
    assert c.amount_paid == Decimal("0.00")
    assert c.status == status.UNPAID
    assert c.date == "2025-03-01 00:00:00"
    assert c.due_date == "2025-03-20"
    assert c.description == "Bigas 2kg"


@pytest.mark.parametrize("stamp", ["2025-03-14T20:30:00Z", "2025-03-15T04:30:00+08:00"])
def test_offset_timestamps_stored_as_local_time(credits, nena, stamp):
    local = datetime(2025, 3, 14, 20, 30, tzinfo=timezone.utc).astimezone()
    cid = credits.create_credit(customer_id=nena, amount="10", date=stamp)
    assert credits.require(cid).date == local.strftime("%Y-%m-%d %H:%M:%S")


def test_naive_timestamp_kept_as_given(credits, nena):
    cid = credits.create_credit(customer_id=nena, amount="10", date="2025-03-14T20:30:00")
    assert credits.require(cid).date == "2025-03-14 20:30:00"


@pytest.mark.parametrize("amount", ["0", "-5", "abc", "1e20", "1e30", 1e300])
def test_non_positive_or_bad_amount_rejected(credits, nena, amount):
    with pytest.raises(ValidationError):
        credits.create_credit(customer_id=nena, amount=amount)


def test_unknown_customer_rejected(credits):
    with pytest.raises(ValidationError):
        credits.create_credit(customer_id=404, amount="10")


def test_bad_quantity_and_due_date_rejected(credits, nena):
    with pytest.raises(ValidationError):
        credits.create_credit(customer_id=nena, amount="10", quantity=0)
    with pytest.raises(ValidationError):
        credits.create_credit(customer_id=nena, amount="10", due_date="someday")


def test_list_by_customer_newest_first(credits, nena, make_credit):
    a = make_credit(nena, "10", "2025-03-01")
    b = make_credit(nena, "20", "2025-03-02")
    assert [c.credit_transaction_id for c in credits.list_by_customer(nena)] == [b, a]
    assert [c.credit_transaction_id for c in credits.list_by_customer(nena, newest_first=False)] == [a, b]


def test_update_descriptive_fields(credits, nena, make_credit):
    cid = make_credit(nena, "60", "2025-03-01", product_name="Sardinas")
    credits.update_credit(cid, product_name="Sardinas (3)", quantity=3, amount="66")
    c = credits.require(cid)
    assert c.product_name == "Sardinas (3)"
    assert c.quantity == 3
    assert c.amount == Decimal("66.00")


def test_amount_locked_once_paid(credits, nena, make_credit, make_payment):
    cid = make_credit(nena, "100", "2025-03-01")
    make_payment(nena, "40", "2025-03-02")
    with pytest.raises(ValidationError):
        credits.update_credit(cid, amount="90")
    # unchanged amount is fine
    credits.update_credit(cid, product_name="Load", amount="100")
    assert credits.require(cid).amount_paid == Decimal("40.00")


def test_delete_unpaid_credit(credits, nena, make_credit):
    cid = make_credit(nena, "10", "2025-03-01")
    credits.delete_credit(cid)
    assert credits.get(cid) is None
    with pytest.raises(NotFoundError):
        credits.delete_credit(cid)


def test_delete_refused_while_payments_applied(credits, nena, make_credit, make_payment):
    cid = make_credit(nena, "100", "2025-03-01")
    make_payment(nena, "100", "2025-03-02")
    with pytest.raises(IntegrityError):
        credits.delete_credit(cid)
    assert credits.get(cid) is not None
