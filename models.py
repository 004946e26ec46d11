from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from database import Base


class PeriodKind(str, Enum):
    weekly = "weekly"
    monthly = "monthly"


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class Budget(Base, TimestampMixin):
    __tablename__ = "budgets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    period_kind: Mapped[PeriodKind] = mapped_column(
        SAEnum(PeriodKind), nullable=False
    )
    anchor_date: Mapped[date] = mapped_column(Date, nullable=False)
    ends_on: Mapped[date] = mapped_column(Date, nullable=False)
    limit_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    spent_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "category",
            "period_kind",
            "anchor_date",
            name="uq_budget_user_category_period",
        ),
        Index("ix_budget_user_category", "user_id", "category"),
        Index("ix_budget_user_range", "user_id", "anchor_date", "ends_on"),
        CheckConstraint("limit_cents >= 0", name="ck_budget_limit_positive"),
        CheckConstraint("spent_cents >= 0", name="ck_budget_spent_positive"),
        CheckConstraint("ends_on >= anchor_date", name="ck_budget_range_ordered"),
    )
