"""Overlap checks between a candidate budget and the budgets already stored.

Two budgets of the same owner and category may not have intersecting active
ranges. Weekly and monthly budgets are compared purely by their computed date
ranges, so a week that starts on the last day of a budgeted month conflicts
with that month.

The checks here are pure: callers fetch the existing budgets for the right
owner and category, ask :func:`check_conflict`, and only commit when no
conflict is reported. Nothing guards the window between that read and the
write, so two concurrent writers can still both pass.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from periods import ActiveRange, compute_active_range, ranges_overlap


@dataclass(frozen=True)
class ConflictResult:
    conflicts: tuple[Any, ...] = field(default_factory=tuple)

    @property
    def has_conflict(self) -> bool:
        return bool(self.conflicts)


def active_range_of(budget: Any) -> ActiveRange:
    return compute_active_range(budget.period_kind, budget.anchor_date)


def check_conflict(
    candidate: Any,
    existing: Sequence[Any],
    exclude_id: Optional[int] = None,
) -> ConflictResult:
    """Return every budget in ``existing`` whose active range meets the candidate's.

    ``candidate`` and the items of ``existing`` only need ``period_kind`` and
    ``anchor_date`` attributes (plus ``id`` on the existing ones), so ORM rows
    and input schemas can be mixed. ``existing`` must already be limited to the
    candidate's owner and category. ``exclude_id`` skips the record being
    edited. Conflicts keep the order of ``existing``.
    """
    candidate_range = active_range_of(candidate)
    conflicts = []
    for budget in existing:
        if exclude_id is not None and getattr(budget, "id", None) == exclude_id:
            continue
        if ranges_overlap(candidate_range, active_range_of(budget)):
            conflicts.append(budget)
    return ConflictResult(tuple(conflicts))
