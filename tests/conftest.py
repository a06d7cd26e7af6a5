"""Pytest fixtures for testing"""

import pytest
from datetime import date
from fastapi.testclient import TestClient

from cashflow_gateway.api.dependencies import get_settings
from cashflow_gateway.api.main import create_app
from cashflow_gateway.config import Settings
from cashflow_gateway.domain.models import (
    Account,
    DayOfMonth,
    FixedExpense,
    ProjectionInput,
    ProjectionOptions,
    RecurringIncome,
)

JAN_1_2025 = date(2025, 1, 1)  # a Wednesday


@pytest.fixture
def test_settings() -> Settings:
    """Settings pinned to defaults so the environment cannot change policies"""
    return Settings(
        timezone="UTC",
        default_projection_days=30,
        max_projection_days=366,
        allow_negative_amounts=True,
        twice_monthly_fallback="repeat",
    )


@pytest.fixture
def client(test_settings: Settings) -> TestClient:
    """Create FastAPI test client with pinned settings"""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: test_settings
    return TestClient(app)


@pytest.fixture
def checking_account() -> Account:
    return Account(id="acc_checking", name="Joint checking", account_type="checking", balance_cents=500000)


@pytest.fixture
def salary() -> RecurringIncome:
    """Guaranteed monthly salary on the 15th"""
    return RecurringIncome(
        id="inc_salary",
        name="Salary",
        amount_cents=300000,
        certainty="guaranteed",
        is_active=True,
        frequency="monthly",
        schedule=DayOfMonth(day=15),
    )


@pytest.fixture
def rent() -> FixedExpense:
    return FixedExpense(id="exp_rent", name="Rent", amount_cents=150000, due_day=1, is_active=True)


@pytest.fixture
def household(checking_account, salary, rent) -> ProjectionInput:
    """One checking account, salary on the 15th, rent on the 1st, 30 days from Jan 1 2025"""
    return ProjectionInput(
        accounts=[checking_account],
        recurring_income=[salary],
        fixed_expenses=[rent],
        options=ProjectionOptions(start_date=JAN_1_2025, projection_days=30),
    )
