"""Cashflow projection engine - day-by-day balances under optimistic and pessimistic scenarios"""

import logging
from datetime import date, timedelta
from typing import List, Optional, Sequence

from cashflow_gateway.config import Settings
from cashflow_gateway.domain.events import materialize_day
from cashflow_gateway.domain.models import (
    Account,
    CashflowProjection,
    DailySnapshot,
    DangerDay,
    ProjectionInput,
    ScenarioSummary,
)
from cashflow_gateway.domain.validation import ValidatedInput, validate_input
from cashflow_gateway.utils.date_utils import generate_date_range

OPTIMISTIC = "optimistic"
PESSIMISTIC = "pessimistic"


def calculate_starting_balance(accounts: Sequence[Account]) -> int:
    """Sum of checking balances; savings and investment accounts are not spendable cash"""
    return sum(a.balance_cents for a in accounts if a.account_type == "checking")


def summarize_scenario(days: Sequence[DailySnapshot], scenario: str) -> ScenarioSummary:
    """
    Aggregate one scenario's totals and danger days from the daily snapshots.

    Optimistic income counts every event; pessimistic income counts only
    guaranteed events. Expenses are shared by both scenarios.
    """
    optimistic = scenario == OPTIMISTIC

    total_income = 0
    total_expenses = 0
    danger_days: List[DangerDay] = []

    for day in days:
        total_income += sum(
            e.amount_cents for e in day.income_events if optimistic or e.certainty == "guaranteed"
        )
        total_expenses += sum(e.amount_cents for e in day.expense_events)

        balance = day.optimistic_balance_cents if optimistic else day.pessimistic_balance_cents
        if balance < 0:
            danger_days.append(DangerDay(date=day.date, day_offset=day.day_offset, balance_cents=balance))

    if days:
        last = days[-1]
        end_balance = last.optimistic_balance_cents if optimistic else last.pessimistic_balance_cents
    else:
        end_balance = 0

    return ScenarioSummary(
        total_income_cents=total_income,
        total_expenses_cents=total_expenses,
        end_balance_cents=end_balance,
        danger_days=tuple(danger_days),
        danger_day_count=len(danger_days),
    )


def project_validated(validated: ValidatedInput) -> CashflowProjection:
    """Fold the validated input into daily snapshots and scenario summaries"""
    starting_balance = calculate_starting_balance(validated.accounts)
    start_date = validated.start_date

    optimistic_balance = starting_balance
    pessimistic_balance = starting_balance
    days: List[DailySnapshot] = []

    for offset, on in enumerate(generate_date_range(start_date, validated.projection_days)):
        events = materialize_day(
            on,
            recurring_income=validated.recurring_income,
            single_shot_income=validated.single_shot_income,
            fixed_expenses=validated.fixed_expenses,
            single_shot_expenses=validated.single_shot_expenses,
            credit_cards=validated.credit_cards,
            statements=validated.statements,
            window_start=start_date,
            fallback=validated.twice_monthly_fallback,
        )

        spent = sum(e.amount_cents for e in events.expenses)
        optimistic_balance += sum(e.amount_cents for e in events.optimistic_income) - spent
        pessimistic_balance += sum(e.amount_cents for e in events.pessimistic_income) - spent

        days.append(
            DailySnapshot(
                date=on,
                day_offset=offset,
                optimistic_balance_cents=optimistic_balance,
                pessimistic_balance_cents=pessimistic_balance,
                # pessimistic income is a subset of optimistic, so this is their union
                income_events=events.optimistic_income,
                expense_events=events.expenses,
                is_optimistic_danger=optimistic_balance < 0,
                is_pessimistic_danger=pessimistic_balance < 0,
            )
        )

    return CashflowProjection(
        start_date=start_date,
        end_date=start_date + timedelta(days=validated.projection_days - 1),
        starting_balance_cents=starting_balance,
        days=tuple(days),
        optimistic=summarize_scenario(days, OPTIMISTIC),
        pessimistic=summarize_scenario(days, PESSIMISTIC),
    )


def calculate_cashflow(
    data: ProjectionInput,
    config: Optional[Settings] = None,
    today: Optional[date] = None,
) -> CashflowProjection:
    """
    Main entry point: validate the household's entities and project cashflow.

    The start date defaults to today in the configured timezone and the
    window to the configured default length (30 days).

    Raises:
        CashflowValidationError: If any input violates a constraint; nothing is computed
    """
    validated = validate_input(data, config, today)

    logging.debug(
        "Projecting cashflow",
        extra={
            "start_date": validated.start_date.isoformat(),
            "projection_days": validated.projection_days,
            "recurring_income_count": len(validated.recurring_income),
            "expense_count": len(validated.fixed_expenses) + len(validated.single_shot_expenses),
            "credit_card_count": len(validated.credit_cards),
        },
    )

    return project_validated(validated)
