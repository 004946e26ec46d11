from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from rapidfuzz.distance import Levenshtein
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from amounts import format_amount, from_cents, percent_used, to_cents
from budget_conflicts import ConflictResult, check_conflict
from config import Settings, get_settings
from models import Budget, PeriodKind
from periods import Period, compute_active_range, normalize_anchor, period_label
from schemas import (
    BudgetIn,
    BudgetOut,
    BudgetStatusOut,
    BudgetSummaryOut,
    CategorySummaryOut,
    ExpenseIn,
)

logger = logging.getLogger(__name__)


def get_current_user_id() -> int:
    return 1


class BudgetNotFoundError(ValueError):
    pass


class BudgetAlreadyExistsError(ValueError):
    pass


class UnknownCategoryError(ValueError):
    pass


class AmbiguousCategoryError(ValueError):
    pass


class BudgetConflictError(ValueError):
    def __init__(self, message: str, result: ConflictResult) -> None:
        super().__init__(message)
        self.result = result


def resolve_category(label: str, vocabulary: Sequence[str]) -> str:
    """Map a user-supplied label onto the configured category names.

    Matching is case-insensitive. Failing an exact match, a single category
    within one edit of the input is accepted.
    """
    raw = label.strip()
    input_lower = raw.lower()
    for name in vocabulary:
        if name.lower() == input_lower:
            return name

    best_distance: Optional[int] = None
    best: list[str] = []
    for name in vocabulary:
        dist = int(Levenshtein.distance(input_lower, name.lower()))
        if best_distance is None or dist < best_distance:
            best_distance = dist
            best = [name]
        elif dist == best_distance:
            best.append(name)

    if best_distance is not None and best_distance <= 1:
        if len(best) > 1:
            options = ", ".join(sorted(best))
            raise AmbiguousCategoryError(
                f"Category '{raw}' is ambiguous; matches: {options}"
            )
        return best[0]
    raise UnknownCategoryError(f"Unknown category '{raw}'")


@dataclass(frozen=True)
class BudgetStatus:
    percent_used: Decimal
    level: str  # "ok" | "warning" | "exceeded"
    remaining_cents: int
    over_cents: int


def budget_status(spent_cents: int, limit_cents: int, warning_pct: int) -> BudgetStatus:
    # Compare in whole cents so the 80% / 100% boundaries are exact.
    if spent_cents >= limit_cents and (limit_cents > 0 or spent_cents > 0):
        level = "exceeded"
    elif spent_cents * 100 >= limit_cents * warning_pct and limit_cents > 0:
        level = "warning"
    else:
        level = "ok"
    return BudgetStatus(
        percent_used=percent_used(spent_cents, limit_cents),
        level=level,
        remaining_cents=max(0, limit_cents - spent_cents),
        over_cents=max(0, spent_cents - limit_cents),
    )


@dataclass(frozen=True)
class _Candidate:
    category: str
    period_kind: PeriodKind
    anchor_date: date
    limit_cents: int


class BudgetService:
    def __init__(
        self,
        session: Session,
        user_id: Optional[int] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.session = session
        self.user_id = user_id if user_id is not None else get_current_user_id()
        self.settings = settings or get_settings()

    def list_all(self) -> list[Budget]:
        stmt = (
            select(Budget)
            .where(Budget.user_id == self.user_id)
            .order_by(Budget.anchor_date.desc(), Budget.category.asc(), Budget.id.desc())
        )
        return self.session.scalars(stmt).all()

    def get(self, budget_id: int) -> Budget:
        budget = self.session.get(Budget, budget_id)
        if not budget or budget.user_id != self.user_id:
            raise BudgetNotFoundError("Budget not found")
        return budget

    def existing_for(self, category: str) -> list[Budget]:
        stmt = (
            select(Budget)
            .where(Budget.user_id == self.user_id, Budget.category == category)
            .order_by(Budget.anchor_date.asc(), Budget.id.asc())
        )
        return self.session.scalars(stmt).all()

    def _candidate(self, data: BudgetIn) -> _Candidate:
        category = resolve_category(data.category, self.settings.categories)
        return _Candidate(
            category=category,
            period_kind=data.period_kind,
            anchor_date=normalize_anchor(data.period_kind, data.anchor_date),
            limit_cents=to_cents(data.limit_amount),
        )

    def _conflicts_for(
        self, candidate: _Candidate, exclude_id: Optional[int]
    ) -> ConflictResult:
        return check_conflict(
            candidate, self.existing_for(candidate.category), exclude_id=exclude_id
        )

    def check(self, data: BudgetIn, exclude_id: Optional[int] = None) -> ConflictResult:
        return self._conflicts_for(self._candidate(data), exclude_id)

    def conflict_message(self, category: str, result: ConflictResult) -> str:
        periods = "; ".join(
            f"{period_label(b.period_kind, b.anchor_date)} ({b.period_kind.value})"
            for b in result.conflicts
        )
        return f"A {category} budget already covers this period: {periods}"

    def _ensure_no_conflict(
        self, candidate: _Candidate, exclude_id: Optional[int]
    ) -> None:
        result = self._conflicts_for(candidate, exclude_id)
        if result.has_conflict:
            logger.info(
                f"budget_conflict: user={self.user_id} category={candidate.category} "
                f"anchor={candidate.anchor_date} conflicts={len(result.conflicts)}"
            )
            raise BudgetConflictError(
                self.conflict_message(candidate.category, result), result
            )

    def _commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise BudgetAlreadyExistsError(
                "Budget already exists for this category and period"
            ) from exc

    def create(self, data: BudgetIn) -> Budget:
        candidate = self._candidate(data)
        self._ensure_no_conflict(candidate, exclude_id=None)

        active = compute_active_range(candidate.period_kind, candidate.anchor_date)
        budget = Budget(
            user_id=self.user_id,
            category=candidate.category,
            period_kind=candidate.period_kind,
            anchor_date=active.start,
            ends_on=active.end,
            limit_cents=candidate.limit_cents,
            spent_cents=0,
        )
        self.session.add(budget)
        self._commit()
        self.session.refresh(budget)
        return budget

    def update(self, budget_id: int, data: BudgetIn) -> Budget:
        budget = self.get(budget_id)
        candidate = self._candidate(data)
        self._ensure_no_conflict(candidate, exclude_id=budget.id)

        active = compute_active_range(candidate.period_kind, candidate.anchor_date)
        budget.category = candidate.category
        budget.period_kind = candidate.period_kind
        budget.anchor_date = active.start
        budget.ends_on = active.end
        budget.limit_cents = candidate.limit_cents
        self._commit()
        self.session.refresh(budget)
        return budget

    def delete(self, budget_id: int) -> None:
        budget = self.get(budget_id)
        self.session.delete(budget)
        self.session.commit()

    def record_expense(self, data: ExpenseIn) -> list[Budget]:
        category = resolve_category(data.category, self.settings.categories)
        amount_cents = to_cents(data.amount)
        covering = (
            Budget.user_id == self.user_id,
            Budget.category == category,
            Budget.anchor_date <= data.spent_on,
            Budget.ends_on >= data.spent_on,
        )
        self.session.execute(
            update(Budget)
            .where(*covering)
            .values(spent_cents=Budget.spent_cents + amount_cents)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        touched = self.session.scalars(
            select(Budget).where(*covering).order_by(Budget.anchor_date.asc())
        ).all()
        for budget in touched:
            self.session.refresh(budget)
        return touched

    def status(self, budget: Budget) -> BudgetStatus:
        return budget_status(
            budget.spent_cents, budget.limit_cents, self.settings.warning_pct
        )

    def serialize(self, budget: Budget) -> BudgetOut:
        status = self.status(budget)
        return BudgetOut(
            id=budget.id,
            category=budget.category,
            period_kind=budget.period_kind,
            anchor_date=budget.anchor_date,
            ends_on=budget.ends_on,
            label=period_label(budget.period_kind, budget.anchor_date),
            limit_amount=from_cents(budget.limit_cents),
            spent_amount=from_cents(budget.spent_cents),
            status=BudgetStatusOut(
                percent_used=status.percent_used,
                level=status.level,
                remaining_amount=from_cents(status.remaining_cents),
                over_amount=from_cents(status.over_cents),
                alert=self.alert_text(budget),
            ),
        )

    def alert_text(self, budget: Budget) -> Optional[str]:
        status = self.status(budget)
        currency = self.settings.currency
        if status.level == "exceeded":
            return f"Budget exceeded by {format_amount(status.over_cents, currency)}"
        if status.level == "warning":
            return (
                "Approaching budget limit! "
                f"{format_amount(status.remaining_cents, currency)} remaining"
            )
        return None

    def in_period(self, period: Period) -> list[Budget]:
        stmt = (
            select(Budget)
            .where(
                Budget.user_id == self.user_id,
                Budget.anchor_date <= period.end,
                Budget.ends_on >= period.start,
            )
            .order_by(Budget.category.asc(), Budget.anchor_date.asc(), Budget.id.asc())
        )
        return self.session.scalars(stmt).all()

    def summary(self, period: Period) -> BudgetSummaryOut:
        budgets = self.in_period(period)
        per_category: dict[str, dict[str, int]] = {}
        for budget in budgets:
            bucket = per_category.setdefault(
                budget.category, {"limit": 0, "spent": 0, "count": 0}
            )
            bucket["limit"] += budget.limit_cents
            bucket["spent"] += budget.spent_cents
            bucket["count"] += 1

        alerts = [
            self.serialize(b) for b in budgets if self.status(b).level != "ok"
        ]
        return BudgetSummaryOut(
            period=period.slug,
            start=period.start,
            end=period.end,
            limit_amount=from_cents(sum(b.limit_cents for b in budgets)),
            spent_amount=from_cents(sum(b.spent_cents for b in budgets)),
            categories=[
                CategorySummaryOut(
                    category=name,
                    limit_amount=from_cents(bucket["limit"]),
                    spent_amount=from_cents(bucket["spent"]),
                    budgets=bucket["count"],
                )
                for name, bucket in per_category.items()
            ],
            alerts=alerts,
        )
