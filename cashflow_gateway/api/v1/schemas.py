"""Pydantic schemas for API request/response validation

Request schemas reuse the domain's strict field types, so JSON `true` or
"150000" never reach the engine as amounts. Policy checks that depend on
settings (amount sign, projection length limit) run in domain validation.
"""

from datetime import date, datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr

from cashflow_gateway.domain import models
from cashflow_gateway.domain.exceptions import CashflowErrorCode, CashflowValidationError
from cashflow_gateway.domain.validation import (
    AccountType,
    Cents,
    Certainty,
    DayNumber,
    Frequency,
    Identifier,
    MonthNumber,
    WeekdayNumber,
)


class ScheduleSchema(BaseModel):
    """Recurrence rule; `type` selects which of the other fields apply"""

    type: str = Field(..., description="day_of_week | day_of_month | twice_monthly")
    weekday: Optional[WeekdayNumber] = None
    anchor_date: Optional[date] = None
    day: Optional[DayNumber] = None
    first_day: Optional[DayNumber] = None
    second_day: Optional[DayNumber] = None
    first_amount_cents: Optional[Cents] = None
    second_amount_cents: Optional[Cents] = None

    def to_domain(self, field: str) -> models.Schedule:
        if self.type == "day_of_week":
            return models.DayOfWeek(weekday=self.weekday, anchor_date=self.anchor_date)
        if self.type == "day_of_month":
            return models.DayOfMonth(day=self.day)
        if self.type == "twice_monthly":
            return models.TwiceMonthly(
                first_day=self.first_day,
                second_day=self.second_day,
                first_amount_cents=self.first_amount_cents,
                second_amount_cents=self.second_amount_cents,
            )
        raise CashflowValidationError(
            CashflowErrorCode.INVALID_FREQUENCY,
            f"{field}.type",
            "must be one of day_of_week, day_of_month, twice_monthly",
        )


class AccountSchema(BaseModel):
    id: Identifier
    name: StrictStr = ""
    account_type: AccountType
    balance_cents: Cents
    balance_updated_at: Optional[datetime] = None


class RecurringIncomeSchema(BaseModel):
    id: Identifier
    name: StrictStr = ""
    amount_cents: Cents
    certainty: Certainty
    is_active: StrictBool = True
    frequency: Frequency
    schedule: ScheduleSchema


class SingleShotIncomeSchema(BaseModel):
    id: Identifier
    name: StrictStr = ""
    amount_cents: Cents
    date: date
    certainty: Certainty = "guaranteed"


class SingleShotExpenseSchema(BaseModel):
    id: Identifier
    name: StrictStr = ""
    amount_cents: Cents
    date: date


class FixedExpenseSchema(BaseModel):
    id: Identifier
    name: StrictStr = ""
    amount_cents: Cents
    due_day: DayNumber
    is_active: StrictBool = True


class CreditCardSchema(BaseModel):
    id: Identifier
    name: StrictStr = ""
    statement_balance_cents: Cents
    due_day: DayNumber


class FutureStatementSchema(BaseModel):
    card_id: Identifier
    target_year: StrictInt
    target_month: MonthNumber
    amount_cents: Cents


class ProjectionRequest(BaseModel):
    """Request body for POST /v1/projection"""

    accounts: List[AccountSchema] = Field(default_factory=list)
    recurring_income: List[RecurringIncomeSchema] = Field(default_factory=list)
    single_shot_income: List[SingleShotIncomeSchema] = Field(default_factory=list)
    fixed_expenses: List[FixedExpenseSchema] = Field(default_factory=list)
    single_shot_expenses: List[SingleShotExpenseSchema] = Field(default_factory=list)
    credit_cards: List[CreditCardSchema] = Field(default_factory=list)
    future_statements: List[FutureStatementSchema] = Field(default_factory=list)
    start_date: Optional[date] = None
    projection_days: Optional[Annotated[StrictInt, Field(ge=1)]] = None

    def to_domain(self) -> models.ProjectionInput:
        return models.ProjectionInput(
            accounts=[models.Account(**a.model_dump()) for a in self.accounts],
            recurring_income=[
                models.RecurringIncome(
                    id=i.id,
                    name=i.name,
                    amount_cents=i.amount_cents,
                    certainty=i.certainty,
                    is_active=i.is_active,
                    frequency=i.frequency,
                    schedule=i.schedule.to_domain(f"recurring_income[{n}].schedule"),
                )
                for n, i in enumerate(self.recurring_income)
            ],
            single_shot_income=[models.SingleShotIncome(**i.model_dump()) for i in self.single_shot_income],
            fixed_expenses=[models.FixedExpense(**e.model_dump()) for e in self.fixed_expenses],
            single_shot_expenses=[models.SingleShotExpense(**e.model_dump()) for e in self.single_shot_expenses],
            credit_cards=[models.CreditCard(**c.model_dump()) for c in self.credit_cards],
            future_statements=[models.FutureStatement(**s.model_dump()) for s in self.future_statements],
            options=models.ProjectionOptions(start_date=self.start_date, projection_days=self.projection_days),
        )


class EstimatedProjectionRequest(ProjectionRequest):
    """Request body for POST /v1/projection/estimated"""

    timezone: Optional[str] = Field(None, description="IANA timezone used to resolve today")


class ErrorResponse(BaseModel):
    code: str
    field: str
    message: str


class ResponseModel(BaseModel):
    """Response schemas are read straight from the domain dataclasses"""

    model_config = ConfigDict(from_attributes=True)


class IncomeEventSchema(ResponseModel):
    project_id: str
    project_name: str
    amount_cents: int
    certainty: str


class ExpenseEventSchema(ResponseModel):
    source_id: str
    source_name: str
    source_type: str
    amount_cents: int


class DailySnapshotSchema(ResponseModel):
    date: date
    day_offset: int
    optimistic_balance_cents: int
    pessimistic_balance_cents: int
    income_events: List[IncomeEventSchema]
    expense_events: List[ExpenseEventSchema]
    is_optimistic_danger: bool
    is_pessimistic_danger: bool


class DangerDaySchema(ResponseModel):
    date: date
    day_offset: int
    balance_cents: int


class ScenarioSummarySchema(ResponseModel):
    total_income_cents: int
    total_expenses_cents: int
    end_balance_cents: int
    danger_days: List[DangerDaySchema]
    danger_day_count: int


class ProjectionResponse(ResponseModel):
    """Response for POST /v1/projection"""

    start_date: date
    end_date: date
    starting_balance_cents: int
    days: List[DailySnapshotSchema]
    optimistic: ScenarioSummarySchema
    pessimistic: ScenarioSummarySchema


class BalanceUpdateBaseSchema(ResponseModel):
    earliest: date
    latest: date
    is_range: bool


class EstimatedTodaySchema(ResponseModel):
    today: date
    has_base: bool
    base: Optional[BalanceUpdateBaseSchema] = None
    failure_reason: Optional[str] = None
    optimistic_cents: int
    pessimistic_cents: int
    optimistic_estimated: bool
    pessimistic_estimated: bool
    any_estimated: bool


class EstimatedProjectionResponse(ResponseModel):
    """Response for POST /v1/projection/estimated"""

    estimate: EstimatedTodaySchema
    projection: ProjectionResponse
