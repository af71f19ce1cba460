from __future__ import annotations
from decimal import Decimal
from typing import Optional

# ---------- Canonical set & order ----------
UNPAID = "unpaid"
PARTIAL = "partial"
PAID = "paid"

VALID_STATES: tuple[str, ...] = (UNPAID, PARTIAL, PAID)
STATE_ORDER: dict[str, int] = {s: i for i, s in enumerate(VALID_STATES)}  # unpaid=0, partial=1, paid=2

# ---------- Human labels ----------
LABELS = {
    UNPAID:  "Unpaid",
    PARTIAL: "Partial",
    PAID:    "Paid",
}

# ---------- Style tokens the UI can map to colors/badges ----------
STYLES = {
    UNPAID:  {"badge": "danger",  "fg": "#991B1B", "bg": "#FEE2E2"},
    PARTIAL: {"badge": "warning", "fg": "#92400E", "bg": "#FEF3C7"},
    PAID:    {"badge": "success", "fg": "#065F46", "bg": "#D1FAE5"},
}

# ---------- Derivation ----------

def from_amounts(amount: Decimal, amount_paid: Decimal) -> str:
    """
    Status is never stored; it is always this function of the two amounts:
      - 'paid'    if amount_paid >= amount
      - 'unpaid'  if amount_paid <= 0
      - 'partial' otherwise
    """
    if amount_paid >= amount:
        return PAID
    if amount_paid <= 0:
        return UNPAID
    return PARTIAL

# ---------- API ----------

def normalize(state: Optional[str]) -> Optional[str]:
    """Lowercase & strip; return None if empty."""
    if state is None:
        return None
    s = str(state).strip().lower()
    return s or None


def label(state: str) -> str:
    """Human label ('Partial'). Unknown states come back title-cased."""
    s = normalize(state)
    if s in LABELS:
        return LABELS[s]  # type: ignore[index]
    return (state or "").strip().title()


def style_tokens(state: str) -> dict:
    s = normalize(state)
    return STYLES.get(s, STYLES[UNPAID])


def sort_key(state: str) -> int:
    """Stable sort key; unknown states sort after known ones."""
    s = normalize(state)
    return STATE_ORDER.get(s, 999)
