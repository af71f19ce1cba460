# sari_store/modules/credits/actions.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date as _date
import logging
from typing import Any, Callable, Dict, Optional

import sqlite3

from ...database.repositories.errors import DomainError
from ...utils.validators import is_non_negative_amount, is_strictly_positive_amount, non_empty

_log = logging.getLogger(__name__)


@dataclass
class ActionResult:
    success: bool
    id: Optional[int] = None        # created customer/credit/payment id (if any)
    message: Optional[str] = None   # user-facing message
    payload: Optional[dict] = None  # any extra data (echoed form, history, etc.)
    error: Optional[str] = None     # DomainError subclass name on failure


def _failed(e: DomainError, payload: Optional[dict] = None) -> ActionResult:
    _log.warning("%s: %s", type(e).__name__, e)
    return ActionResult(success=False, message=str(e), payload=payload, error=type(e).__name__)


# ------- dependency factories (DI-friendly) ---------------------------------

def _get_customers_repo(conn: sqlite3.Connection):
    # Lazy import to keep UI startup fast
    from ...database.repositories.customers_repo import CustomersRepo
    return CustomersRepo(conn)


def _get_credit_transactions_repo(conn: sqlite3.Connection):
    from ...database.repositories.credit_transactions_repo import CreditTransactionsRepo
    return CreditTransactionsRepo(conn)


def _get_payments_repo(conn: sqlite3.Connection):
    from ...database.repositories.payments_repo import PaymentsRepo
    return PaymentsRepo(conn)


def _get_credit_history_service(conn: sqlite3.Connection):
    from .history import CreditHistoryService
    return CreditHistoryService(conn)


# ======================= Actions: Customers ==================================

def add_customer(
    *,
    conn: sqlite3.Connection,
    form: Dict[str, Any],
    repo_factory: Callable[[sqlite3.Connection], Any] = _get_customers_repo,
) -> ActionResult:
    """
    Create a customer from a form payload
    ({name, phone?, address?, notes?, credit_limit?}).
    """
    if not non_empty(form.get("name")):
        return ActionResult(success=False, message="Name cannot be empty.", payload=form,
                            error="ValidationError")
    limit = form.get("credit_limit")
    if limit not in (None, "") and not is_non_negative_amount(limit):
        return ActionResult(success=False, message="Credit limit must be a non-negative amount.",
                            payload=form, error="ValidationError")
    repo = repo_factory(conn)
    try:
        customer_id = repo.create(
            name=form.get("name") or "",
            phone=form.get("phone"),
            address=form.get("address"),
            notes=form.get("notes"),
            credit_limit=form.get("credit_limit"),
        )
        return ActionResult(success=True, id=customer_id, message="Customer added.", payload=form)
    except DomainError as e:
        return _failed(e, form)


def remove_customer(
    *,
    conn: sqlite3.Connection,
    customer_id: int,
    repo_factory: Callable[[sqlite3.Connection], Any] = _get_customers_repo,
) -> ActionResult:
    """Delete a customer together with all of their credits and payments."""
    repo = repo_factory(conn)
    try:
        repo.delete(customer_id)
        return ActionResult(success=True, id=customer_id, message="Customer deleted.")
    except DomainError as e:
        return _failed(e)


# ======================= Actions: Credits ====================================

def add_credit(
    *,
    conn: sqlite3.Connection,
    customer_id: int,
    form: Dict[str, Any],
    repo_factory: Callable[[sqlite3.Connection], Any] = _get_credit_transactions_repo,
) -> ActionResult:
    """
    Record goods/money taken on credit.

    Required: amount (> 0). Optional: product_name, product_id, quantity,
    due_date, notes, date.
    """
    if form.get("amount") in (None, ""):
        return ActionResult(success=False, message="Missing required fields: amount", payload=form,
                            error="ValidationError")
    if not is_strictly_positive_amount(form["amount"]):
        return ActionResult(success=False, message="Amount must be greater than zero.", payload=form,
                            error="ValidationError")
    repo = repo_factory(conn)
    try:
        credit_id = repo.create_credit(
            customer_id=customer_id,
            amount=form["amount"],
            product_name=form.get("product_name"),
            product_id=form.get("product_id"),
            quantity=form.get("quantity"),
            due_date=form.get("due_date"),
            notes=form.get("notes"),
            date=form.get("date"),
        )
        return ActionResult(success=True, id=credit_id, message="Credit recorded.", payload=form)
    except DomainError as e:
        return _failed(e, form)


def settle_all(
    *,
    conn: sqlite3.Connection,
    customer_id: int,
    date: Optional[str | _date] = None,
    repo_factory: Callable[[sqlite3.Connection], Any] = _get_credit_transactions_repo,
) -> ActionResult:
    """Mark every open credit of the customer as paid (one settlement payment)."""
    repo = repo_factory(conn)
    try:
        payment_id = repo.mark_all_as_paid(customer_id, date=date)
    except DomainError as e:
        return _failed(e)
    if payment_id is None:
        return ActionResult(success=True, message="Nothing to settle.")
    return ActionResult(success=True, id=payment_id, message="All credits marked as paid.")


# ======================= Actions: Payments ===================================

def receive_payment(
    *,
    conn: sqlite3.Connection,
    customer_id: int,
    form: Dict[str, Any],
    repo_factory: Callable[[sqlite3.Connection], Any] = _get_payments_repo,
) -> ActionResult:
    """
    Receive a customer payment.

    With `credit_transaction_id` in the form the whole amount goes to that
    credit; without it the amount is spread over open credits, oldest first.
    """
    required = ("amount",)
    missing = [k for k in required if form.get(k) in (None, "")]
    if missing:
        return ActionResult(success=False, message=f"Missing required fields: {', '.join(missing)}",
                            payload=form, error="ValidationError")
    if not is_strictly_positive_amount(form["amount"]):
        return ActionResult(success=False, message="Amount must be greater than zero.", payload=form,
                            error="ValidationError")

    repo = repo_factory(conn)
    try:
        payment_id = repo.record_payment(
            customer_id=customer_id,
            amount=form["amount"],
            credit_transaction_id=form.get("credit_transaction_id"),
            payment_method=form.get("payment_method") or "cash",
            notes=form.get("notes"),
            date=form.get("date"),
        )
        return ActionResult(success=True, id=payment_id, message="Payment recorded.", payload=form)
    except DomainError as e:
        return _failed(e, form)


def remove_payment(
    *,
    conn: sqlite3.Connection,
    payment_id: int,
    repo_factory: Callable[[sqlite3.Connection], Any] = _get_payments_repo,
) -> ActionResult:
    """Reverse a payment; its allocations are released back to the credits."""
    repo = repo_factory(conn)
    try:
        repo.delete_payment(payment_id)
        return ActionResult(success=True, id=payment_id, message="Payment removed.")
    except DomainError as e:
        return _failed(e)


# ======================= Actions: History (Presenter) ========================

def open_credit_history(
    *,
    conn: sqlite3.Connection,
    customer_id: int,
    newest_first: bool = False,
) -> ActionResult:
    """Builds the customer's credit/payment timeline for a history view."""
    service = _get_credit_history_service(conn)
    entries = service.entries(customer_id, newest_first=newest_first)
    return ActionResult(success=True, payload={"customer_id": customer_id, "entries": entries})
