"""Domain models - pure Python dataclasses representing household finances and projections"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

CERTAINTIES = ("guaranteed", "probable", "uncertain")
ACCOUNT_TYPES = ("checking", "savings", "investment")
FREQUENCIES = ("weekly", "biweekly", "twice-monthly", "monthly")


# --- Schedules ---------------------------------------------------------------


@dataclass(frozen=True)
class DayOfWeek:
    """Weekly or biweekly recurrence on an ISO weekday (Monday = 1)"""

    weekday: int
    anchor_date: Optional[date] = None  # biweekly parity reference


@dataclass(frozen=True)
class DayOfMonth:
    """Monthly recurrence, clamped to the last day of short months"""

    day: int


@dataclass(frozen=True)
class TwiceMonthly:
    """Two pay dates per month with optional per-slot amounts"""

    first_day: int
    second_day: int
    first_amount_cents: Optional[int] = None
    second_amount_cents: Optional[int] = None


Schedule = Union[DayOfWeek, DayOfMonth, TwiceMonthly]


# --- Inputs ------------------------------------------------------------------


@dataclass
class Account:
    """Bank account; only checking balances seed the projection"""

    id: str
    name: str
    account_type: str  # "checking" | "savings" | "investment"
    balance_cents: int
    balance_updated_at: Optional[datetime] = None


@dataclass
class RecurringIncome:
    """Recurring income source (a "project")"""

    id: str
    name: str
    amount_cents: int
    certainty: str  # "guaranteed" | "probable" | "uncertain"
    is_active: bool
    frequency: str  # "weekly" | "biweekly" | "twice-monthly" | "monthly"
    schedule: Schedule


@dataclass
class SingleShotIncome:
    """One-off income on a single calendar date"""

    id: str
    name: str
    amount_cents: int
    date: date
    certainty: str = "guaranteed"


@dataclass
class SingleShotExpense:
    """One-off expense on a single calendar date"""

    id: str
    name: str
    amount_cents: int
    date: date


@dataclass
class FixedExpense:
    """Monthly expense due on a day of the month"""

    id: str
    name: str
    amount_cents: int
    due_day: int
    is_active: bool = True


@dataclass
class CreditCard:
    """Credit card whose statement is paid monthly on its due day"""

    id: str
    name: str
    statement_balance_cents: int
    due_day: int


@dataclass
class FutureStatement:
    """Known statement amount for one card in one future month"""

    card_id: str
    target_year: int
    target_month: int
    amount_cents: int


@dataclass
class ProjectionOptions:
    start_date: Optional[date] = None
    projection_days: Optional[int] = None


@dataclass
class ProjectionInput:
    """Everything the engine needs for one projection"""

    accounts: List[Account] = field(default_factory=list)
    recurring_income: List[RecurringIncome] = field(default_factory=list)
    single_shot_income: List[SingleShotIncome] = field(default_factory=list)
    fixed_expenses: List[FixedExpense] = field(default_factory=list)
    single_shot_expenses: List[SingleShotExpense] = field(default_factory=list)
    credit_cards: List[CreditCard] = field(default_factory=list)
    future_statements: List[FutureStatement] = field(default_factory=list)
    options: ProjectionOptions = field(default_factory=ProjectionOptions)


# --- Outputs -----------------------------------------------------------------


@dataclass(frozen=True)
class IncomeEvent:
    project_id: str
    project_name: str
    amount_cents: int
    certainty: str


@dataclass(frozen=True)
class ExpenseEvent:
    source_id: str
    source_name: str
    source_type: str  # "expense" | "credit_card"
    amount_cents: int


@dataclass(frozen=True)
class DailySnapshot:
    """Balances for both scenarios at the end of one projected day"""

    date: date
    day_offset: int
    optimistic_balance_cents: int
    pessimistic_balance_cents: int
    income_events: Tuple[IncomeEvent, ...]
    expense_events: Tuple[ExpenseEvent, ...]
    is_optimistic_danger: bool
    is_pessimistic_danger: bool


@dataclass(frozen=True)
class DangerDay:
    date: date
    day_offset: int
    balance_cents: int


@dataclass(frozen=True)
class ScenarioSummary:
    total_income_cents: int
    total_expenses_cents: int
    end_balance_cents: int
    danger_days: Tuple[DangerDay, ...]
    danger_day_count: int


@dataclass(frozen=True)
class CashflowProjection:
    """Complete day-by-day forecast under both certainty scenarios"""

    start_date: date
    end_date: date
    starting_balance_cents: int
    days: Tuple[DailySnapshot, ...]
    optimistic: ScenarioSummary
    pessimistic: ScenarioSummary
