from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from models import PeriodKind

WEEK_LENGTH_DAYS = 7


@dataclass(frozen=True)
class ActiveRange:
    """Closed date interval ``[start, end]`` during which a budget applies."""

    start: date
    end: date


@dataclass(frozen=True)
class Period:
    slug: str
    start: date
    end: date


def local_today(timezone: str) -> date:
    return datetime.now(ZoneInfo(timezone)).date()


def month_start(day: date) -> date:
    return day.replace(day=1)


def month_end(day: date) -> date:
    first = day.replace(day=1)
    if first.month == 12:
        next_month = first.replace(year=first.year + 1, month=1)
    else:
        next_month = first.replace(month=first.month + 1)
    return next_month - date.resolution


def normalize_anchor(period_kind: PeriodKind, anchor_date: date) -> date:
    """Monthly anchors collapse to the first of their month; weekly ones stay put."""
    return compute_active_range(period_kind, anchor_date).start


def compute_active_range(period_kind: PeriodKind, anchor_date: date) -> ActiveRange:
    if period_kind == PeriodKind.monthly:
        return ActiveRange(month_start(anchor_date), month_end(anchor_date))
    if period_kind == PeriodKind.weekly:
        return ActiveRange(
            anchor_date, anchor_date + timedelta(days=WEEK_LENGTH_DAYS - 1)
        )
    raise ValueError(f"Unknown period kind: {period_kind!r}")


def ranges_overlap(a: ActiveRange, b: ActiveRange) -> bool:
    # Inclusive on both ends: a range ending the day another starts overlaps it.
    return a.start <= b.end and b.start <= a.end


def period_label(period_kind: PeriodKind, anchor_date: date) -> str:
    if period_kind == PeriodKind.weekly:
        return f"Week of {anchor_date.strftime('%b %d, %Y')}"
    return anchor_date.strftime("%B %Y")


def resolve_period(
    period: Optional[str],
    start: Optional[str],
    end: Optional[str],
    *,
    today: Optional[date] = None,
) -> Period:
    today = today or date.today()
    if not period or period == "all":
        # Budgets can be set up ahead of time, so "all" has no upper bound.
        return Period("all", date(1970, 1, 1), date.max)
    if period == "this_week":
        week_start = today - timedelta(days=today.weekday())
        return Period(
            "this_week",
            week_start,
            week_start + timedelta(days=WEEK_LENGTH_DAYS - 1),
        )
    if period == "last_month":
        last_month_end = month_start(today) - date.resolution
        return Period("last_month", month_start(last_month_end), last_month_end)
    if period == "custom":
        if not start or not end:
            raise ValueError("Custom period requires start and end dates")
        start_date = date.fromisoformat(start)
        end_date = date.fromisoformat(end)
        if start_date > end_date:
            raise ValueError("Start date must be before end date")
        return Period("custom", start_date, end_date)
    if period == "this_month":
        return Period("this_month", month_start(today), month_end(today))
    raise ValueError(f"Unknown period: {period}")
