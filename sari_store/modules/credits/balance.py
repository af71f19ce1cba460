"""
credits/balance.py

Pure helpers that derive every balance-like number from raw ledger rows.
Mirrors the rules the repositories rely on:
- outstanding = Σ credit amounts − Σ payment amounts
- status from amount vs amount_paid (see status.from_amounts)
- overdue / tag / aging from due dates and credit dates

Do not import repos or open DB connections here. Inputs are any objects with
the attributes used below (CreditTransaction / Payment dataclasses, or
stand-ins in tests). Only compute numbers; formatting belongs in the UI.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from ...constants import (
    AGING_BUCKETS,
    FREQUENT_BORROWER_LOOKBACK_DAYS,
    FREQUENT_BORROWER_THRESHOLD,
)
from ...utils.helpers import parse_day
from ...utils.money import ZERO
from . import status as credit_status

TAG_OVERDUE = "overdue"
TAG_GOOD_PAYER = "good_payer"
TAG_FREQUENT_BORROWER = "frequent_borrower"

__all__ = [
    "TAG_OVERDUE",
    "TAG_GOOD_PAYER",
    "TAG_FREQUENT_BORROWER",
    "AgingBucket",
    "CustomerSummary",
    "clamp_non_negative",
    "remaining",
    "transaction_status",
    "total_credits",
    "total_payments",
    "outstanding_balance",
    "open_balance",
    "is_overdue",
    "days_overdue",
    "last_transaction_date",
    "customer_tag",
    "aging_buckets",
    "summarize",
]


# -----------------------------
# Core utilities
# -----------------------------

def clamp_non_negative(x: Decimal) -> Decimal:
    return x if x > 0 else ZERO


def remaining(amount: Decimal, amount_paid: Decimal) -> Decimal:
    """amount − amount_paid, clamped at >= 0."""
    return clamp_non_negative(amount - amount_paid)


def transaction_status(amount: Decimal, amount_paid: Decimal) -> str:
    return credit_status.from_amounts(amount, amount_paid)


# -----------------------------
# Balances
# -----------------------------

def total_credits(credits: Iterable[Any]) -> Decimal:
    return sum((c.amount for c in credits), ZERO)


def total_payments(payments: Iterable[Any]) -> Decimal:
    return sum((p.amount for p in payments), ZERO)


def outstanding_balance(credits: Sequence[Any], payments: Sequence[Any]) -> Decimal:
    """
    What the customer owes: Σ credits − Σ payments.

    Equals open_balance(credits) as long as every payment is fully
    allocated, which the payments repo guarantees.
    """
    return total_credits(credits) - total_payments(payments)


def open_balance(credits: Iterable[Any]) -> Decimal:
    """Σ (amount − amount_paid) over the customer's credits."""
    return sum((remaining(c.amount, c.amount_paid) for c in credits), ZERO)


# -----------------------------
# Overdue & tags
# -----------------------------

def is_overdue(credit: Any, today: date) -> bool:
    if credit.amount_paid >= credit.amount:
        return False
    due = parse_day(credit.due_date)
    return due is not None and due < today


def days_overdue(credits: Iterable[Any], today: date) -> Optional[int]:
    """
    Days past the earliest due date among credits that are not fully paid
    and already past due. None when nothing is overdue.
    """
    dues = [parse_day(c.due_date) for c in credits if is_overdue(c, today)]
    if not dues:
        return None
    return (today - min(dues)).days


def last_transaction_date(credits: Iterable[Any], payments: Iterable[Any]) -> Optional[str]:
    dates = [c.date for c in credits if c.date] + [p.date for p in payments if p.date]
    return max(dates) if dates else None


def customer_tag(
    credits: Sequence[Any],
    payments: Sequence[Any],
    today: date,
    *,
    threshold: int = FREQUENT_BORROWER_THRESHOLD,
    lookback_days: int = FREQUENT_BORROWER_LOOKBACK_DAYS,
) -> Optional[str]:
    """
    Precedence: overdue > good_payer > frequent_borrower > None.

      - overdue:           any not-fully-paid credit is past its due date
      - good_payer:        owes nothing and has some history
      - frequent_borrower: >= threshold credits dated within the lookback window
    """
    if any(is_overdue(c, today) for c in credits):
        return TAG_OVERDUE

    if (credits or payments) and outstanding_balance(credits, payments) == 0:
        return TAG_GOOD_PAYER

    since = today - timedelta(days=lookback_days)
    recent = 0
    for c in credits:
        d = parse_day(c.date)
        if d is not None and since <= d <= today:
            recent += 1
    if recent >= threshold:
        return TAG_FREQUENT_BORROWER

    return None


# -----------------------------
# Aging
# -----------------------------

@dataclass
class AgingBucket:
    label: str
    lo: int
    hi: Optional[int]
    amount: Decimal = ZERO
    count: int = 0

    def holds(self, age_days: int) -> bool:
        return age_days >= self.lo and (self.hi is None or age_days <= self.hi)


def aging_buckets(
    credits: Iterable[Any],
    today: date,
    buckets: Tuple[Tuple[str, int, Optional[int]], ...] = AGING_BUCKETS,
) -> List[AgingBucket]:
    """
    Remaining amount and count of open credits grouped by age of their credit
    date. Fully paid credits are skipped; future-dated ones count as age 0.
    """
    out = [AgingBucket(label, lo, hi) for (label, lo, hi) in buckets]
    for c in credits:
        rem = remaining(c.amount, c.amount_paid)
        if rem <= 0:
            continue
        d = parse_day(c.date)
        age = max(0, (today - d).days) if d is not None else 0
        for b in out:
            if b.holds(age):
                b.amount += rem
                b.count += 1
                break
    return out


# -----------------------------
# Customer view-model
# -----------------------------

@dataclass
class CustomerSummary:
    """Customer row plus everything derived from its ledger (nothing here is stored)."""
    customer_id: int
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    credit_limit: Optional[Decimal] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    total_credits: Decimal = ZERO
    total_payments: Decimal = ZERO
    outstanding_balance: Decimal = ZERO
    last_transaction_date: Optional[str] = None
    tag: Optional[str] = None
    days_overdue: Optional[int] = None
    credit_count: int = 0
    open_credit_count: int = 0
    credits: list = field(default_factory=list, repr=False)
    payments: list = field(default_factory=list, repr=False)

    @property
    def available_credit(self) -> Optional[Decimal]:
        if self.credit_limit is None:
            return None
        return self.credit_limit - self.outstanding_balance

    @property
    def is_overdue(self) -> bool:
        return self.tag == TAG_OVERDUE


def summarize(
    customer: Any,
    credits: Sequence[Any],
    payments: Sequence[Any],
    today: date,
    *,
    keep_rows: bool = False,
) -> CustomerSummary:
    return CustomerSummary(
        customer_id=customer.customer_id,
        name=customer.name,
        phone=customer.phone,
        address=customer.address,
        notes=customer.notes,
        credit_limit=customer.credit_limit,
        created_at=customer.created_at,
        updated_at=customer.updated_at,
        total_credits=total_credits(credits),
        total_payments=total_payments(payments),
        outstanding_balance=outstanding_balance(credits, payments),
        last_transaction_date=last_transaction_date(credits, payments),
        tag=customer_tag(credits, payments, today),
        days_overdue=days_overdue(credits, today),
        credit_count=len(credits),
        open_credit_count=sum(1 for c in credits if c.amount_paid < c.amount),
        credits=list(credits) if keep_rows else [],
        payments=list(payments) if keep_rows else [],
    )
