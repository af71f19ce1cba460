# tests/test_reporting_aging.py
from decimal import Decimal

import pytest

from sari_store.database.repositories import CreditsOverview, ReportingRepo

D = Decimal


@pytest.fixture()
def seeded(conn, nena, make_customer, make_credit, make_payment):
    tonyo = make_customer("Mang Tonyo")
    make_credit(nena, "100", "2025-03-14")       # 1 day old
    make_credit(nena, "200", "2025-03-05")       # 10 days
    make_credit(tonyo, "300", "2025-02-20")      # 23 days
    make_credit(tonyo, "400", "2025-01-01")      # 73 days
    make_payment(tonyo, "450", "2025-03-10")     # FIFO: clears the 400, 50 on the 300
    return {"nena": nena, "tonyo": tonyo}


def test_aging_buckets_across_customers(conn, seeded, today):
    out = {b.label: (b.amount, b.count) for b in ReportingRepo(conn).aging_buckets(today)}
    assert out == {
        "0-7 days": (D("100.00"), 1),
        "8-15 days": (D("200.00"), 1),
        "16-30 days": (D("250.00"), 1),
        "Over 30 days": (D("0.00"), 0),
    }


def test_customer_aging(conn, seeded, today):
    out = {b.label: b.amount for b in ReportingRepo(conn).customer_aging(seeded["tonyo"], today)}
    assert out["16-30 days"] == D("250.00")
    assert sum(out.values()) == D("250.00")


def test_credits_overview_range_is_inclusive(conn, seeded):
    ov = ReportingRepo(conn).credits_overview("2025-03-05", "2025-03-10")
    assert ov == CreditsOverview(
        issued=D("200.00"),
        collected=D("450.00"),
        outstanding=D("550.00"),
        active_accounts=2,
    )


def test_credits_overview_swaps_reversed_range(conn, seeded):
    repo = ReportingRepo(conn)
    assert repo.credits_overview("2025-03-14", "2025-03-01") == repo.credits_overview("2025-03-01", "2025-03-14")


def test_credits_overview_requires_both_dates(conn):
    with pytest.raises(ValueError):
        ReportingRepo(conn).credits_overview(None, "2025-03-01")
