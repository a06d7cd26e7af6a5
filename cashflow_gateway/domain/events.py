"""Per-day event materialization for the cashflow projection"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Mapping, Sequence, Tuple

from cashflow_gateway.config import TwiceMonthlyFallback
from cashflow_gateway.domain.models import (
    CreditCard,
    ExpenseEvent,
    FixedExpense,
    FutureStatement,
    IncomeEvent,
    RecurringIncome,
    SingleShotExpense,
    SingleShotIncome,
)
from cashflow_gateway.domain.schedules import is_monthly_due, resolve_scheduled_amount
from cashflow_gateway.utils.date_utils import to_calendar_date

StatementKey = Tuple[str, int, int]  # (card_id, year, month)


@dataclass(frozen=True)
class DayEvents:
    """Events visible to each scenario on one day"""

    optimistic_income: Tuple[IncomeEvent, ...]
    pessimistic_income: Tuple[IncomeEvent, ...]
    expenses: Tuple[ExpenseEvent, ...]


def index_future_statements(statements: Sequence[FutureStatement]) -> Dict[StatementKey, int]:
    """Build the (card_id, year, month) -> amount lookup; later entries win on duplicates"""
    return {(s.card_id, s.target_year, s.target_month): s.amount_cents for s in statements}


def credit_card_amount(card: CreditCard, on: date, statements: Mapping[StatementKey, int]) -> int:
    """Statement due on `on`: the future statement for that month if known, else the standing balance"""
    return statements.get((card.id, on.year, on.month), card.statement_balance_cents)


def recurring_income_events(
    on: date,
    incomes: Sequence[RecurringIncome],
    window_start: date,
    fallback: TwiceMonthlyFallback,
) -> List[IncomeEvent]:
    events = []
    for income in incomes:
        amount = resolve_scheduled_amount(
            income.schedule,
            income.frequency,
            income.amount_cents,
            on,
            window_start,
            fallback,
        )
        if amount is not None:
            events.append(
                IncomeEvent(
                    project_id=income.id,
                    project_name=income.name,
                    amount_cents=amount,
                    certainty=income.certainty,
                )
            )
    return events


def single_shot_income_events(on: date, incomes: Sequence[SingleShotIncome]) -> List[IncomeEvent]:
    return [
        IncomeEvent(
            project_id=income.id,
            project_name=income.name,
            amount_cents=income.amount_cents,
            certainty=income.certainty,
        )
        for income in incomes
        if to_calendar_date(income.date) == on
    ]


def expense_events(
    on: date,
    fixed_expenses: Sequence[FixedExpense],
    single_shot_expenses: Sequence[SingleShotExpense],
    credit_cards: Sequence[CreditCard],
    statements: Mapping[StatementKey, int],
) -> List[ExpenseEvent]:
    """Fixed expenses, then single-shot expenses, then credit cards due on `on`"""
    events = [
        ExpenseEvent(
            source_id=expense.id,
            source_name=expense.name,
            source_type="expense",
            amount_cents=expense.amount_cents,
        )
        for expense in fixed_expenses
        if is_monthly_due(expense.due_day, on)
    ]

    events.extend(
        ExpenseEvent(
            source_id=expense.id,
            source_name=expense.name,
            source_type="expense",
            amount_cents=expense.amount_cents,
        )
        for expense in single_shot_expenses
        if to_calendar_date(expense.date) == on
    )

    events.extend(
        ExpenseEvent(
            source_id=card.id,
            source_name=card.name,
            source_type="credit_card",
            amount_cents=credit_card_amount(card, on, statements),
        )
        for card in credit_cards
        if is_monthly_due(card.due_day, on)
    )

    return events


def materialize_day(
    on: date,
    *,
    recurring_income: Sequence[RecurringIncome],
    single_shot_income: Sequence[SingleShotIncome],
    fixed_expenses: Sequence[FixedExpense],
    single_shot_expenses: Sequence[SingleShotExpense],
    credit_cards: Sequence[CreditCard],
    statements: Mapping[StatementKey, int],
    window_start: date,
    fallback: TwiceMonthlyFallback = TwiceMonthlyFallback.REPEAT,
) -> DayEvents:
    """
    Produce the income and expense events for one calendar day.

    Only active recurring income and fixed expenses should be passed in.
    Optimistic income is every event; pessimistic income keeps only
    guaranteed events. Expenses have no certainty and apply to both.
    """
    income = recurring_income_events(on, recurring_income, window_start, fallback)
    income.extend(single_shot_income_events(on, single_shot_income))

    return DayEvents(
        optimistic_income=tuple(income),
        pessimistic_income=tuple(e for e in income if e.certainty == "guaranteed"),
        expenses=tuple(
            expense_events(on, fixed_expenses, single_shot_expenses, credit_cards, statements)
        ),
    )
