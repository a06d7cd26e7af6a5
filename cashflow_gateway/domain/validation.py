"""Up-front validation of projection input

The constraints live in pydantic models that read the domain dataclasses
through from_attributes. Every check runs before the projection starts, so a
bad entity never leaves a half-computed projection behind. The first
violation found is raised as a CashflowValidationError carrying the error
code and the offending field path.
"""

from dataclasses import dataclass
from datetime import date
from typing import Annotated, Any, Dict, List, Literal, Optional, Sequence, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    InstanceOf,
    StrictBool,
    StrictInt,
    StrictStr,
    Tag,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from cashflow_gateway.config import Settings, TwiceMonthlyFallback, settings
from cashflow_gateway.domain.events import StatementKey, index_future_statements
from cashflow_gateway.domain.exceptions import CashflowErrorCode, CashflowValidationError
from cashflow_gateway.domain.models import (
    ACCOUNT_TYPES,
    CERTAINTIES,
    FREQUENCIES,
    Account,
    CreditCard,
    DayOfMonth,
    DayOfWeek,
    FixedExpense,
    ProjectionInput,
    RecurringIncome,
    SingleShotExpense,
    SingleShotIncome,
    TwiceMonthly,
)
from cashflow_gateway.utils.date_utils import to_calendar_date, today_in


def _sign_allowed(value: int, info: ValidationInfo) -> int:
    if value < 0 and not (info.context or {}).get("allow_negative_amounts", True):
        raise ValueError("must not be negative")
    return value


def _within_projection_limit(value: int, info: ValidationInfo) -> int:
    limit = (info.context or {}).get("max_projection_days")
    if limit is not None and value > limit:
        raise ValueError(f"must not exceed {limit}")
    return value


Cents = Annotated[StrictInt, AfterValidator(_sign_allowed)]
DayNumber = Annotated[StrictInt, Field(ge=1, le=31)]
WeekdayNumber = Annotated[StrictInt, Field(ge=1, le=7)]
MonthNumber = Annotated[StrictInt, Field(ge=1, le=12)]
ProjectionDays = Annotated[StrictInt, Field(ge=1), AfterValidator(_within_projection_limit)]
Identifier = Annotated[StrictStr, Field(min_length=1)]
CalendarDate = InstanceOf[date]  # datetimes pass and are reduced to their date later
Certainty = Literal[CERTAINTIES]
AccountType = Literal[ACCOUNT_TYPES]
Frequency = Literal[FREQUENCIES]

DAY_FIELDS = {"day", "due_day", "weekday", "first_day", "second_day"}


class InputModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class DayOfWeekModel(InputModel):
    weekday: WeekdayNumber
    anchor_date: Optional[CalendarDate] = None


class DayOfMonthModel(InputModel):
    day: DayNumber


class TwiceMonthlyModel(InputModel):
    first_day: DayNumber
    second_day: DayNumber
    first_amount_cents: Optional[Cents] = None
    second_amount_cents: Optional[Cents] = None

    @field_validator("second_day")
    @classmethod
    def days_differ(cls, value: int, info: ValidationInfo) -> int:
        if value == info.data.get("first_day"):
            raise ValueError("must differ from first_day")
        return value


SCHEDULE_TAGS = {DayOfWeek: "day_of_week", DayOfMonth: "day_of_month", TwiceMonthly: "twice_monthly"}

SCHEDULE_FOR_FREQUENCY = {
    "weekly": DayOfWeekModel,
    "biweekly": DayOfWeekModel,
    "monthly": DayOfMonthModel,
    "twice-monthly": TwiceMonthlyModel,
}


def schedule_tag(value: Any) -> Optional[str]:
    """Pick the schedule model from the domain schedule's class"""
    return SCHEDULE_TAGS.get(type(value))


ScheduleRule = Annotated[
    Union[
        Annotated[DayOfWeekModel, Tag("day_of_week")],
        Annotated[DayOfMonthModel, Tag("day_of_month")],
        Annotated[TwiceMonthlyModel, Tag("twice_monthly")],
    ],
    Discriminator(
        schedule_tag,
        custom_error_type="invalid_schedule",
        custom_error_message="must be a DayOfWeek, DayOfMonth or TwiceMonthly schedule",
    ),
]


class EntityModel(InputModel):
    id: Identifier
    name: StrictStr


class AccountModel(EntityModel):
    account_type: AccountType
    balance_cents: Cents
    balance_updated_at: Optional[CalendarDate] = None


class RecurringIncomeModel(EntityModel):
    amount_cents: Cents
    certainty: Certainty
    is_active: StrictBool
    frequency: Frequency
    schedule: ScheduleRule

    @field_validator("schedule")
    @classmethod
    def schedule_fits_frequency(cls, value: InputModel, info: ValidationInfo) -> InputModel:
        frequency = info.data.get("frequency")
        if frequency is not None and not isinstance(value, SCHEDULE_FOR_FREQUENCY[frequency]):
            raise ValueError(f"does not fit {frequency} income")
        return value


class SingleShotIncomeModel(EntityModel):
    amount_cents: Cents
    date: CalendarDate
    certainty: Certainty


class FixedExpenseModel(EntityModel):
    amount_cents: Cents
    due_day: DayNumber
    is_active: StrictBool


class SingleShotExpenseModel(EntityModel):
    amount_cents: Cents
    date: CalendarDate


class CreditCardModel(EntityModel):
    statement_balance_cents: Cents
    due_day: DayNumber


class FutureStatementModel(InputModel):
    card_id: Identifier
    target_year: StrictInt
    target_month: MonthNumber
    amount_cents: Cents


class OptionsModel(InputModel):
    start_date: Optional[CalendarDate] = None
    projection_days: Optional[ProjectionDays] = None


class ProjectionInputModel(InputModel):
    """Whole engine input; inactive items are validated like active ones"""

    options: OptionsModel
    accounts: List[AccountModel]
    recurring_income: List[RecurringIncomeModel]
    single_shot_income: List[SingleShotIncomeModel]
    fixed_expenses: List[FixedExpenseModel]
    single_shot_expenses: List[SingleShotExpenseModel]
    credit_cards: List[CreditCardModel]
    future_statements: List[FutureStatementModel]


def error_field_path(loc: Sequence[Any]) -> str:
    """("credit_cards", 0, "due_day") -> "credit_cards[0].due_day" """
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif part in SCHEDULE_TAGS.values():
            continue
        else:
            path += f".{part}" if path else str(part)
    return path or "input"


def error_code_for(field: str) -> CashflowErrorCode:
    """Pick the domain error code for an invalid field"""
    name = field.rsplit(".", 1)[-1].split("[", 1)[0]
    if name.endswith("_cents"):
        return CashflowErrorCode.INVALID_AMOUNT
    if name in DAY_FIELDS:
        return CashflowErrorCode.INVALID_DAY
    if name == "certainty":
        return CashflowErrorCode.INVALID_CERTAINTY
    if name in ("frequency", "schedule"):
        return CashflowErrorCode.INVALID_FREQUENCY
    if name == "projection_days":
        return CashflowErrorCode.INVALID_PROJECTION_DAYS
    return CashflowErrorCode.INVALID_INPUT


def error_from_validation(exc: ValidationError) -> CashflowValidationError:
    """Convert the first pydantic error into a CashflowValidationError"""
    error = exc.errors(include_url=False)[0]
    field = error_field_path(error["loc"])
    return CashflowValidationError(error_code_for(field), field, error["msg"])


@dataclass(frozen=True)
class ValidatedInput:
    """Projection input after validation, with inactive items filtered out"""

    accounts: List[Account]
    recurring_income: List[RecurringIncome]
    single_shot_income: List[SingleShotIncome]
    fixed_expenses: List[FixedExpense]
    single_shot_expenses: List[SingleShotExpense]
    credit_cards: List[CreditCard]
    statements: Dict[StatementKey, int]
    start_date: date
    projection_days: int
    twice_monthly_fallback: TwiceMonthlyFallback


def validate_input(
    data: ProjectionInput,
    config: Optional[Settings] = None,
    today: Optional[date] = None,
) -> ValidatedInput:
    """
    Validate projection input and filter it down to what the engine projects.

    Args:
        data: Entities and options supplied by the caller
        config: Policy settings (negative amounts, projection limits, twice-monthly fallback)
        today: Start date used when options.start_date is absent (default: today in config.timezone)

    Raises:
        CashflowValidationError: On the first constraint violation found
    """
    config = config or settings

    if not isinstance(data, ProjectionInput):
        raise CashflowValidationError(CashflowErrorCode.INVALID_INPUT, "input", "expected ProjectionInput")

    try:
        ProjectionInputModel.model_validate(
            data,
            from_attributes=True,
            context={
                "allow_negative_amounts": config.allow_negative_amounts,
                "max_projection_days": config.max_projection_days,
            },
        )
    except ValidationError as e:
        raise error_from_validation(e) from e

    options = data.options
    projection_days = options.projection_days
    if projection_days is None:
        projection_days = config.default_projection_days
    if options.start_date is None:
        start_date = today or today_in(config.timezone)
    else:
        start_date = to_calendar_date(options.start_date)

    return ValidatedInput(
        accounts=list(data.accounts),
        recurring_income=[i for i in data.recurring_income if i.is_active],
        single_shot_income=list(data.single_shot_income),
        fixed_expenses=[e for e in data.fixed_expenses if e.is_active],
        single_shot_expenses=list(data.single_shot_expenses),
        credit_cards=list(data.credit_cards),
        statements=index_future_statements(data.future_statements),
        start_date=start_date,
        projection_days=projection_days,
        twice_monthly_fallback=config.twice_monthly_fallback,
    )
