# tests/test_customers_repo.py
from decimal import Decimal

import pytest

from sari_store.database.repositories import NotFoundError, ValidationError


def test_create_and_get(customers):
    cid = customers.create(name="  Mang Tonyo ", phone="0918 111 2222", credit_limit="1500")
    c = customers.get(cid)
    assert c is not None
    assert c.name == "Mang Tonyo"
    assert c.phone == "0918 111 2222"
    assert c.credit_limit == Decimal("1500.00")
    assert c.created_at


def test_blank_name_rejected(customers):
    with pytest.raises(ValidationError):
        customers.create(name="   ")


def test_negative_credit_limit_rejected(customers):
    with pytest.raises(ValidationError):
        customers.create(name="Aling Rosa", credit_limit="-1")


def test_update_replaces_fields(customers, nena):
    customers.update(nena, name="Aling Nena S.", phone=None, address="Purok 4")
    c = customers.require(nena)
    assert c.name == "Aling Nena S."
    assert c.phone is None
    assert c.address == "Purok 4"


def test_update_and_delete_unknown_raise_not_found(customers):
    with pytest.raises(NotFoundError):
        customers.update(999, name="Ghost")
    with pytest.raises(NotFoundError):
        customers.delete(999)
    assert customers.get(999) is None
    assert not customers.exists(999)


def test_list_in_id_order(customers, make_customer):
    a = make_customer("Zeny")
    b = make_customer("Ador")
    assert [c.customer_id for c in customers.list_customers()] == [a, b]


@pytest.mark.parametrize("limit", ["1e20", "1e30", 1e300])
def test_out_of_range_credit_limit_rejected(customers, limit):
    with pytest.raises(ValidationError):
        customers.create(name="Aling Rosa", credit_limit=limit)
    assert customers.list_customers() == []
