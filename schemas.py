from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from models import PeriodKind

AlertLevel = Literal["ok", "warning", "exceeded"]


class BudgetIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: str = Field(..., min_length=1, max_length=100)
    period_kind: PeriodKind = PeriodKind.monthly
    anchor_date: date
    limit_amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class ExpenseIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: str = Field(..., min_length=1, max_length=100)
    spent_on: date
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class BudgetStatusOut(BaseModel):
    percent_used: Decimal
    level: AlertLevel
    remaining_amount: Decimal
    over_amount: Decimal
    alert: Optional[str] = None


class BudgetOut(BaseModel):
    id: int
    category: str
    period_kind: PeriodKind
    anchor_date: date
    ends_on: date
    label: str
    limit_amount: Decimal
    spent_amount: Decimal
    status: BudgetStatusOut


class ConflictOut(BaseModel):
    has_conflict: bool
    conflicts: list[BudgetOut] = Field(default_factory=list)
    message: Optional[str] = None


class CategorySummaryOut(BaseModel):
    category: str
    limit_amount: Decimal
    spent_amount: Decimal
    budgets: int


class BudgetSummaryOut(BaseModel):
    period: str
    start: date
    end: date
    limit_amount: Decimal
    spent_amount: Decimal
    categories: list[CategorySummaryOut]
    alerts: list[BudgetOut]


class VocabularyOut(BaseModel):
    categories: list[str]
    period_kinds: list[PeriodKind]
    currency: str
