# database/repositories/errors.py
"""
Domain-level errors the controller can surface directly (e.g., toast/snackbar).

Every ledger mutation either completes or raises one of these with nothing
written; the message is human-readable, the class tells the caller what kind
of failure it was.
"""
from __future__ import annotations


class DomainError(Exception):
    pass


class ValidationError(DomainError):
    """Bad input at the boundary (non-positive amount, blank name, over-payment...)."""


class AllocationError(DomainError):
    """A payment could not be fully placed on open credits."""


class IntegrityError(DomainError):
    """The mutation would leave the ledger in an impossible state."""


class NotFoundError(DomainError):
    """Referenced customer / credit / payment does not exist."""
