from datetime import date

import pytest

from models import PeriodKind
from periods import (
    ActiveRange,
    compute_active_range,
    local_today,
    normalize_anchor,
    period_label,
    ranges_overlap,
    resolve_period,
)


def test_monthly_range_covers_calendar_month() -> None:
    assert compute_active_range(PeriodKind.monthly, date(2025, 2, 10)) == ActiveRange(
        date(2025, 2, 1), date(2025, 2, 28)
    )


def test_monthly_range_handles_leap_february() -> None:
    assert compute_active_range(PeriodKind.monthly, date(2024, 2, 10)) == ActiveRange(
        date(2024, 2, 1), date(2024, 2, 29)
    )


def test_monthly_range_rolls_over_december() -> None:
    active = compute_active_range(PeriodKind.monthly, date(2025, 12, 31))
    assert active == ActiveRange(date(2025, 12, 1), date(2025, 12, 31))


def test_weekly_range_spans_seven_days_from_anchor() -> None:
    assert compute_active_range(PeriodKind.weekly, date(2025, 3, 5)) == ActiveRange(
        date(2025, 3, 5), date(2025, 3, 11)
    )


def test_weekly_range_crosses_year_boundary() -> None:
    active = compute_active_range(PeriodKind.weekly, date(2024, 12, 29))
    assert active.end == date(2025, 1, 4)


def test_unknown_period_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        compute_active_range("fortnightly", date(2025, 1, 1))


def test_normalize_anchor_only_moves_monthly_anchors() -> None:
    assert normalize_anchor(PeriodKind.monthly, date(2025, 7, 19)) == date(2025, 7, 1)
    assert normalize_anchor(PeriodKind.weekly, date(2025, 7, 19)) == date(2025, 7, 19)


def test_touching_ranges_overlap() -> None:
    week = ActiveRange(date(2025, 1, 26), date(2025, 2, 1))
    february = ActiveRange(date(2025, 2, 1), date(2025, 2, 28))
    assert ranges_overlap(week, february)
    assert ranges_overlap(february, week)


def test_disjoint_ranges_do_not_overlap() -> None:
    january = ActiveRange(date(2025, 1, 1), date(2025, 1, 31))
    february = ActiveRange(date(2025, 2, 1), date(2025, 2, 28))
    assert not ranges_overlap(january, february)


def test_period_labels() -> None:
    assert period_label(PeriodKind.monthly, date(2025, 2, 1)) == "February 2025"
    assert period_label(PeriodKind.weekly, date(2025, 3, 5)) == "Week of Mar 05, 2025"


def test_resolve_period_uses_reference_date() -> None:
    today = date(2025, 3, 15)
    assert resolve_period("this_month", None, None, today=today).start == date(2025, 3, 1)
    last = resolve_period("last_month", None, None, today=today)
    assert (last.start, last.end) == (date(2025, 2, 1), date(2025, 2, 28))
    week = resolve_period("this_week", None, None, today=today)
    assert (week.start, week.end) == (date(2025, 3, 10), date(2025, 3, 16))
    assert resolve_period(None, None, None, today=today).slug == "all"


def test_resolve_period_boundaries_are_independent() -> None:
    today = date(2025, 1, 10)
    last = resolve_period("last_month", None, None, today=today)
    this = resolve_period("this_month", None, None, today=today)
    assert last.end == date(2024, 12, 31)
    assert this.start == date(2025, 1, 1)
    assert today == date(2025, 1, 10)


def test_resolve_custom_period_validation() -> None:
    custom = resolve_period("custom", "2025-01-01", "2025-01-31")
    assert (custom.start, custom.end) == (date(2025, 1, 1), date(2025, 1, 31))
    with pytest.raises(ValueError):
        resolve_period("custom", "2025-01-01", None)
    with pytest.raises(ValueError):
        resolve_period("custom", "2025-02-01", "2025-01-01")
    with pytest.raises(ValueError):
        resolve_period("fortnight", None, None)


def test_all_period_has_no_upper_bound() -> None:
    period = resolve_period("all", None, None, today=date(2025, 2, 15))
    assert period.start == date(1970, 1, 1)
    assert period.end == date.max


def test_local_today_follows_timezone() -> None:
    # UTC+14 is always at least one calendar day ahead of UTC-11.
    ahead = local_today("Pacific/Kiritimati")
    behind = local_today("Pacific/Pago_Pago")
    assert ahead > behind
