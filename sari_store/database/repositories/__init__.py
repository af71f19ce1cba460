# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from sari_store.database.repositories import (
        # Errors
        DomainError, ValidationError, AllocationError, IntegrityError, NotFoundError,
        # Customers
        CustomersRepo, Customer,
        # Credits (utang)
        CreditTransactionsRepo, CreditTransaction,
        # Payments
        PaymentsRepo, Payment, PaymentAllocation, get_payments_repo,
        # Read side
        LedgerRepo, DashboardRepo, CreditKPIs, MostOwedCustomer,
        ReportingRepo, CreditsOverview,
    )
"""

# ----------------- Errors ------------------
from .errors import (
    DomainError,
    ValidationError,
    AllocationError,
    IntegrityError,
    NotFoundError,
)

# ---------------- Customers ----------------
from .customers_repo import CustomersRepo, Customer

# ------------- Credits (utang) -------------
from .credit_transactions_repo import CreditTransactionsRepo, CreditTransaction

# ---------------- Payments -----------------
from .payments_repo import PaymentsRepo, Payment, PaymentAllocation, get_payments_repo

# ---------------- Read side ----------------
from .ledger_repo import LedgerRepo
from .dashboard_repo import DashboardRepo, CreditKPIs, MostOwedCustomer
from .reporting_repo import ReportingRepo, CreditsOverview

__all__ = [
    # errors
    "DomainError",
    "ValidationError",
    "AllocationError",
    "IntegrityError",
    "NotFoundError",
    # customers_repo
    "CustomersRepo",
    "Customer",
    # credit_transactions_repo
    "CreditTransactionsRepo",
    "CreditTransaction",
    # payments_repo
    "PaymentsRepo",
    "Payment",
    "PaymentAllocation",
    "get_payments_repo",
    # read side
    "LedgerRepo",
    "DashboardRepo",
    "CreditKPIs",
    "MostOwedCustomer",
    "ReportingRepo",
    "CreditsOverview",
]
