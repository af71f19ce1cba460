"""
credits/allocation.py

Split a single payment amount across a customer's open credits.

- Default strategy is FIFO: oldest credit date first, ties by id.
- DUE_DATE strategy is offered for the "pay what's due first" flow; credits
  without a due date fall back to their credit date.

Pure functions; no DB. Works in whole centavos so no rounding residue can
appear. Persistence (one payment row + one allocation row per touched credit)
belongs to PaymentsRepo.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Sequence

STRATEGY_OLDEST_FIRST = "oldest_first"
STRATEGY_DUE_DATE = "due_date"

STRATEGIES: tuple[str, ...] = (STRATEGY_OLDEST_FIRST, STRATEGY_DUE_DATE)

__all__ = [
    "STRATEGY_OLDEST_FIRST",
    "STRATEGY_DUE_DATE",
    "STRATEGIES",
    "AllocationLine",
    "AllocationPlan",
    "sum_remaining_cents",
    "plan_allocation",
]


@dataclass(frozen=True)
class AllocationLine:
    credit_transaction_id: int
    amount_cents: int


@dataclass
class AllocationPlan:
    requested_cents: int
    lines: List[AllocationLine] = field(default_factory=list)

    @property
    def allocated_cents(self) -> int:
        return sum(line.amount_cents for line in self.lines)

    @property
    def unallocated_cents(self) -> int:
        return self.requested_cents - self.allocated_cents

    @property
    def is_complete(self) -> bool:
        return self.unallocated_cents == 0


def sum_remaining_cents(credits: Iterable[Any]) -> int:
    return sum(max(0, c.remaining_cents) for c in credits)


def _key_oldest(c: Any):
    return (c.date or "", c.credit_transaction_id)


def _key_due(c: Any):
    return (c.due_date or (c.date or "")[:10], c.date or "", c.credit_transaction_id)


def plan_allocation(
    amount_cents: int,
    credits: Sequence[Any],
    *,
    strategy: str = STRATEGY_OLDEST_FIRST,
) -> AllocationPlan:
    """
    Walk open credits in strategy order, giving each min(remaining, pool).

    Credits need `credit_transaction_id`, `date`, `due_date` and
    `remaining_cents`. Anything left in the pool when the credits run out is
    reported as `unallocated_cents`; deciding whether that is an error is the
    caller's job.
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown allocation strategy: {strategy!r}")

    plan = AllocationPlan(requested_cents=max(0, int(amount_cents)))
    pool = plan.requested_cents

    work = [c for c in credits if c.remaining_cents > 0]
    work.sort(key=_key_due if strategy == STRATEGY_DUE_DATE else _key_oldest)

    for c in work:
        if pool <= 0:
            break
        take = min(c.remaining_cents, pool)
        plan.lines.append(AllocationLine(int(c.credit_transaction_id), take))
        pool -= take

    return plan
