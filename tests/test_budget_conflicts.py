from datetime import date
from types import SimpleNamespace

import pytest

from budget_conflicts import check_conflict
from models import PeriodKind


def make_budget(
    budget_id, anchor: date, kind: PeriodKind = PeriodKind.monthly, category="Food"
):
    return SimpleNamespace(
        id=budget_id, category=category, period_kind=kind, anchor_date=anchor
    )


def test_budget_does_not_conflict_with_itself_when_excluded() -> None:
    existing = make_budget("A", date(2025, 2, 1))
    candidate = make_budget("A", date(2025, 2, 1))

    result = check_conflict(candidate, [existing], exclude_id="A")

    assert not result.has_conflict
    assert result.conflicts == ()


def test_budget_conflicts_with_itself_without_exclusion() -> None:
    existing = make_budget("A", date(2025, 2, 1))
    candidate = make_budget(None, date(2025, 2, 14))

    result = check_conflict(candidate, [existing])

    assert result.has_conflict
    assert result.conflicts == (existing,)


def test_weekly_candidate_conflicts_with_monthly_budget() -> None:
    february = make_budget(1, date(2025, 2, 1))
    candidate = make_budget(None, date(2025, 2, 25), PeriodKind.weekly)

    result = check_conflict(candidate, [february])

    assert result.has_conflict
    assert result.conflicts == (february,)


def test_week_starting_on_last_day_of_month_conflicts() -> None:
    february = make_budget(1, date(2025, 2, 1))
    candidate = make_budget(None, date(2025, 2, 28), PeriodKind.weekly)

    assert check_conflict(candidate, [february]).has_conflict


def test_week_ending_on_first_day_of_month_conflicts() -> None:
    march = make_budget(1, date(2025, 3, 1))
    candidate = make_budget(None, date(2025, 2, 23), PeriodKind.weekly)

    assert check_conflict(candidate, [march]).has_conflict


def test_adjacent_months_do_not_conflict() -> None:
    january = make_budget(1, date(2025, 1, 1))
    candidate = make_budget(None, date(2025, 2, 1))

    assert not check_conflict(candidate, [january]).has_conflict


def test_consecutive_weeks_do_not_conflict() -> None:
    first_week = make_budget(1, date(2025, 3, 5), PeriodKind.weekly)
    candidate = make_budget(None, date(2025, 3, 12), PeriodKind.weekly)

    assert not check_conflict(candidate, [first_week]).has_conflict


def test_prefiltered_other_category_yields_no_conflict() -> None:
    food = make_budget(1, date(2025, 2, 1), category="Food")
    candidate = make_budget(None, date(2025, 2, 1), category="Transport")
    transport_scope = [b for b in [food] if b.category == candidate.category]

    result = check_conflict(candidate, transport_scope)

    assert transport_scope == []
    assert not result.has_conflict


def test_conflicts_keep_input_order() -> None:
    week_two = make_budget(2, date(2025, 2, 10), PeriodKind.weekly)
    week_one = make_budget(1, date(2025, 2, 3), PeriodKind.weekly)
    april = make_budget(3, date(2025, 4, 1))
    candidate = make_budget(None, date(2025, 2, 20))

    result = check_conflict(candidate, [week_two, april, week_one])

    assert [b.id for b in result.conflicts] == [2, 1]


def test_exclusion_only_skips_matching_id() -> None:
    week_one = make_budget(1, date(2025, 2, 3), PeriodKind.weekly)
    week_two = make_budget(2, date(2025, 2, 10), PeriodKind.weekly)
    candidate = make_budget(1, date(2025, 2, 1))

    result = check_conflict(candidate, [week_one, week_two], exclude_id=1)

    assert result.conflicts == (week_two,)


def test_check_conflict_is_repeatable() -> None:
    existing = [
        make_budget(1, date(2025, 2, 1)),
        make_budget(2, date(2025, 3, 3), PeriodKind.weekly),
    ]
    candidate = make_budget(None, date(2025, 2, 25), PeriodKind.weekly)

    first = check_conflict(candidate, existing)
    second = check_conflict(candidate, existing)

    assert first == second
    assert len(existing) == 2


def test_invalid_period_kind_is_a_programming_error() -> None:
    candidate = SimpleNamespace(id=None, period_kind="yearly", anchor_date=date(2025, 1, 1))
    with pytest.raises(ValueError):
        check_conflict(candidate, [make_budget(1, date(2025, 1, 1))])
