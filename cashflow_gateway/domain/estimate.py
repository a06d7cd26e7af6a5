"""Today's estimated balance and projections rebased onto it

Checking balances are typed in by hand and go stale. When the last update
was a few days ago, the income and expenses that fell due since then are
replayed to estimate today's balance, and the forward projection is shifted
so those movements are not counted twice.
"""

from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import List, Optional

from cashflow_gateway.config import Settings, settings
from cashflow_gateway.domain.exceptions import CashflowErrorCode, CashflowValidationError
from cashflow_gateway.domain.models import (
    CashflowProjection,
    DailySnapshot,
    ProjectionInput,
    ProjectionOptions,
)
from cashflow_gateway.domain.projection import (
    OPTIMISTIC,
    PESSIMISTIC,
    calculate_cashflow,
    calculate_starting_balance,
    summarize_scenario,
)
from cashflow_gateway.domain.validation import validate_input
from cashflow_gateway.utils.date_utils import is_known_timezone, to_local_date, today_in

NO_CHECKING_ACCOUNTS = "no_checking_accounts"
MISSING_TIMESTAMPS = "missing_timestamps"


@dataclass(frozen=True)
class BalanceUpdateBase:
    """Calendar dates of the oldest and newest checking balance update"""

    earliest: date
    latest: date

    @property
    def is_range(self) -> bool:
        return self.earliest != self.latest


@dataclass(frozen=True)
class BalanceUpdateBaseResult:
    base: Optional[BalanceUpdateBase] = None
    failure_reason: Optional[str] = None  # "no_checking_accounts" | "missing_timestamps"


@dataclass(frozen=True)
class EstimatedTodayBalance:
    today: date
    optimistic_cents: int
    pessimistic_cents: int
    base: Optional[BalanceUpdateBase] = None
    failure_reason: Optional[str] = None
    optimistic_estimated: bool = False
    pessimistic_estimated: bool = False

    @property
    def has_base(self) -> bool:
        return self.base is not None

    @property
    def any_estimated(self) -> bool:
        return self.optimistic_estimated or self.pessimistic_estimated


def checking_balance_update_base(accounts, timezone: str) -> BalanceUpdateBaseResult:
    """
    Find when checking balances were last brought up to date.

    The base used for estimating is the earliest update: anything that fell
    due after it may be missing from at least one balance.
    """
    checking = [a for a in accounts if a.account_type == "checking"]
    if not checking:
        return BalanceUpdateBaseResult(failure_reason=NO_CHECKING_ACCOUNTS)

    if any(a.balance_updated_at is None for a in checking):
        return BalanceUpdateBaseResult(failure_reason=MISSING_TIMESTAMPS)

    updated = sorted(to_local_date(a.balance_updated_at, timezone) for a in checking)
    return BalanceUpdateBaseResult(base=BalanceUpdateBase(earliest=updated[0], latest=updated[-1]))


def estimate_today_balance(
    data: ProjectionInput,
    timezone: Optional[str] = None,
    config: Optional[Settings] = None,
    today: Optional[date] = None,
) -> EstimatedTodayBalance:
    """
    Estimate both scenarios' balance for today.

    Replays every event from the day after the balance update base through
    today. A scenario is flagged as estimated when at least one event visible
    to it fell inside that interval.

    Raises:
        CashflowValidationError: If any entity is invalid
    """
    config = config or settings
    timezone = timezone or config.timezone
    if not is_known_timezone(timezone):
        raise CashflowValidationError(CashflowErrorCode.INVALID_INPUT, "timezone", f"unknown timezone {timezone!r}")
    today = today or today_in(timezone)

    validate_input(replace(data, options=ProjectionOptions(start_date=today, projection_days=1)), config)

    starting_balance = calculate_starting_balance(data.accounts)
    result = checking_balance_update_base(data.accounts, timezone)
    if result.base is None:
        return EstimatedTodayBalance(
            today=today,
            optimistic_cents=starting_balance,
            pessimistic_cents=starting_balance,
            failure_reason=result.failure_reason,
        )

    interval_start = result.base.earliest + timedelta(days=1)
    if interval_start > today:
        return EstimatedTodayBalance(
            today=today,
            optimistic_cents=starting_balance,
            pessimistic_cents=starting_balance,
            base=result.base,
        )

    interval_days = (today - interval_start).days + 1
    interval_config = config.model_copy(
        update={"max_projection_days": max(config.max_projection_days, interval_days)}
    )
    interval = calculate_cashflow(
        replace(data, options=ProjectionOptions(start_date=interval_start, projection_days=interval_days)),
        interval_config,
    )

    any_expense = any(d.expense_events for d in interval.days)
    any_income = any(d.income_events for d in interval.days)
    any_guaranteed = any(
        e.certainty == "guaranteed" for d in interval.days for e in d.income_events
    )
    last = interval.days[-1]

    return EstimatedTodayBalance(
        today=today,
        optimistic_cents=last.optimistic_balance_cents,
        pessimistic_cents=last.pessimistic_balance_cents,
        base=result.base,
        optimistic_estimated=any_expense or any_income,
        pessimistic_estimated=any_expense or any_guaranteed,
    )


def rebase_projection(
    data: ProjectionInput,
    estimate: EstimatedTodayBalance,
    projection_days: int,
    config: Optional[Settings] = None,
) -> CashflowProjection:
    """
    Build a projection whose day 0 is today at the estimated balances.

    Days 1..n come from a projection starting tomorrow, shifted by the
    difference between the estimated and the recorded starting balance.
    Today's own events are already inside the estimate and are not repeated.

    Raises:
        CashflowValidationError: If any entity or projection_days is invalid
    """
    today = estimate.today
    validate_input(
        replace(data, options=ProjectionOptions(start_date=today, projection_days=projection_days)),
        config,
    )

    recorded_balance = calculate_starting_balance(data.accounts)
    pessimistic_shift = estimate.pessimistic_cents - recorded_balance
    optimistic_shift = estimate.optimistic_cents - recorded_balance

    days: List[DailySnapshot] = [
        DailySnapshot(
            date=today,
            day_offset=0,
            optimistic_balance_cents=estimate.optimistic_cents,
            pessimistic_balance_cents=estimate.pessimistic_cents,
            income_events=(),
            expense_events=(),
            is_optimistic_danger=estimate.optimistic_cents < 0,
            is_pessimistic_danger=estimate.pessimistic_cents < 0,
        )
    ]

    if projection_days > 1:
        forward = calculate_cashflow(
            replace(
                data,
                options=ProjectionOptions(start_date=today + timedelta(days=1), projection_days=projection_days - 1),
            ),
            config,
        )
        for day in forward.days:
            optimistic = day.optimistic_balance_cents + optimistic_shift
            pessimistic = day.pessimistic_balance_cents + pessimistic_shift
            days.append(
                replace(
                    day,
                    day_offset=len(days),
                    optimistic_balance_cents=optimistic,
                    pessimistic_balance_cents=pessimistic,
                    is_optimistic_danger=optimistic < 0,
                    is_pessimistic_danger=pessimistic < 0,
                )
            )

    return CashflowProjection(
        start_date=today,
        end_date=days[-1].date,
        starting_balance_cents=estimate.pessimistic_cents,
        days=tuple(days),
        optimistic=summarize_scenario(days, OPTIMISTIC),
        pessimistic=summarize_scenario(days, PESSIMISTIC),
    )
