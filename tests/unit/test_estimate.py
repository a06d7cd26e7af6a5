"""Unit tests for today's estimated balance and rebased projections"""

import pytest
from datetime import date, datetime, timezone

from cashflow_gateway.domain.estimate import (
    MISSING_TIMESTAMPS,
    NO_CHECKING_ACCOUNTS,
    checking_balance_update_base,
    estimate_today_balance,
    rebase_projection,
)
from cashflow_gateway.domain.exceptions import CashflowErrorCode, CashflowValidationError
from cashflow_gateway.domain.models import (
    Account,
    FixedExpense,
    ProjectionInput,
    SingleShotExpense,
    SingleShotIncome,
)

JAN_15_2025 = date(2025, 1, 15)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def stale_household() -> ProjectionInput:
    """Checking balance last updated on Jan 10; a bill and an uncertain payment fell due since"""
    return ProjectionInput(
        accounts=[
            Account("chk", "Checking", "checking", 100000, balance_updated_at=utc(2025, 1, 10, 12, 0)),
            Account("sav", "Savings", "savings", 900000),
        ],
        single_shot_income=[SingleShotIncome("gig", "Gig", 5000, date(2025, 1, 14), "uncertain")],
        fixed_expenses=[FixedExpense("net", "Internet", 30000, 12)],
        single_shot_expenses=[SingleShotExpense("vet", "Vet", 10000, date(2025, 1, 17))],
    )


def test_update_base_without_checking_accounts():
    result = checking_balance_update_base([Account("s", "Savings", "savings", 100)], "UTC")

    assert result.base is None
    assert result.failure_reason == NO_CHECKING_ACCOUNTS


def test_update_base_with_missing_timestamp():
    accounts = [
        Account("a", "Checking", "checking", 100, balance_updated_at=utc(2025, 1, 3)),
        Account("b", "Checking 2", "checking", 100),
    ]

    result = checking_balance_update_base(accounts, "UTC")

    assert result.failure_reason == MISSING_TIMESTAMPS


def test_update_base_spans_earliest_to_latest():
    accounts = [
        Account("a", "Checking", "checking", 100, balance_updated_at=utc(2025, 1, 8, 9)),
        Account("b", "Checking 2", "checking", 100, balance_updated_at=utc(2025, 1, 3, 9)),
        Account("c", "Savings", "savings", 100),
    ]

    base = checking_balance_update_base(accounts, "UTC").base

    assert (base.earliest, base.latest) == (date(2025, 1, 3), date(2025, 1, 8))
    assert base.is_range


def test_update_base_uses_local_calendar_date():
    accounts = [Account("a", "Checking", "checking", 100, balance_updated_at=utc(2025, 1, 10, 23, 30))]

    assert checking_balance_update_base(accounts, "UTC").base.earliest == date(2025, 1, 10)
    assert checking_balance_update_base(accounts, "Asia/Tokyo").base.earliest == date(2025, 1, 11)


def test_estimate_replays_events_since_last_update(stale_household):
    estimate = estimate_today_balance(stale_household, "UTC", today=JAN_15_2025)

    assert estimate.has_base
    assert estimate.optimistic_cents == 100000 - 30000 + 5000
    assert estimate.pessimistic_cents == 100000 - 30000
    assert estimate.optimistic_estimated
    assert estimate.pessimistic_estimated
    assert estimate.any_estimated


def test_estimate_without_events_is_not_flagged():
    data = ProjectionInput(
        accounts=[Account("chk", "Checking", "checking", 42000, balance_updated_at=utc(2025, 1, 10, 8))],
    )

    estimate = estimate_today_balance(data, "UTC", today=JAN_15_2025)

    assert estimate.optimistic_cents == 42000
    assert not estimate.any_estimated


def test_estimate_when_updated_today_applies_nothing(stale_household):
    stale_household.accounts[0].balance_updated_at = utc(2025, 1, 15, 7)

    estimate = estimate_today_balance(stale_household, "UTC", today=JAN_15_2025)

    assert estimate.has_base
    assert estimate.optimistic_cents == estimate.pessimistic_cents == 100000
    assert not estimate.any_estimated


def test_estimate_without_base_falls_back_to_recorded_balance(stale_household):
    stale_household.accounts[0].balance_updated_at = None

    estimate = estimate_today_balance(stale_household, "UTC", today=JAN_15_2025)

    assert not estimate.has_base
    assert estimate.failure_reason == MISSING_TIMESTAMPS
    assert estimate.pessimistic_cents == 100000


def test_estimate_rejects_unknown_timezone(stale_household):
    with pytest.raises(CashflowValidationError) as exc_info:
        estimate_today_balance(stale_household, "Mars/Olympus_Mons", today=JAN_15_2025)

    assert exc_info.value.code == CashflowErrorCode.INVALID_INPUT
    assert exc_info.value.field == "timezone"


def test_rebased_projection_starts_at_estimate(stale_household):
    estimate = estimate_today_balance(stale_household, "UTC", today=JAN_15_2025)

    projection = rebase_projection(stale_household, estimate, projection_days=5)

    assert projection.start_date == JAN_15_2025
    assert projection.end_date == date(2025, 1, 19)
    assert projection.starting_balance_cents == 70000
    assert [d.day_offset for d in projection.days] == [0, 1, 2, 3, 4]

    today = projection.days[0]
    assert (today.optimistic_balance_cents, today.pessimistic_balance_cents) == (75000, 70000)
    assert today.income_events == () and today.expense_events == ()

    # vet bill on Jan 17 comes off both estimated balances
    vet_day = projection.days[2]
    assert vet_day.date == date(2025, 1, 17)
    assert (vet_day.optimistic_balance_cents, vet_day.pessimistic_balance_cents) == (65000, 60000)
    assert projection.optimistic.end_balance_cents == 65000
    assert projection.pessimistic.total_expenses_cents == 10000


def test_rebased_single_day_projection(stale_household):
    estimate = estimate_today_balance(stale_household, "UTC", today=JAN_15_2025)

    projection = rebase_projection(stale_household, estimate, projection_days=1)

    assert len(projection.days) == 1
    assert projection.end_date == JAN_15_2025


def test_rebased_projection_flags_danger(stale_household):
    stale_household.single_shot_expenses[0].amount_cents = 80000
    estimate = estimate_today_balance(stale_household, "UTC", today=JAN_15_2025)

    projection = rebase_projection(stale_household, estimate, projection_days=5)

    assert projection.pessimistic.danger_day_count == 3
    assert projection.optimistic.danger_day_count == 3
    assert projection.days[2].pessimistic_balance_cents == -10000


def test_rebase_rejects_invalid_projection_days(stale_household):
    estimate = estimate_today_balance(stale_household, "UTC", today=JAN_15_2025)

    with pytest.raises(CashflowValidationError) as exc_info:
        rebase_projection(stale_household, estimate, projection_days=0)

    assert exc_info.value.code == CashflowErrorCode.INVALID_PROJECTION_DAYS
