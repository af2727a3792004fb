"""Shared builders for budget tests."""

from datetime import date
from decimal import Decimal

import pytest

from budget_tracker.models import (
    ExpenseCategory,
    ExpenseItem,
    ExpenseTransaction,
    Income,
    MonthlyBudget,
)
from budget_tracker.services.storage import InMemoryBudgetStorage


def make_item(sub_category, projected="0", actual="0", transactions=()):
    return ExpenseItem(
        sub_category=sub_category,
        projected_cost=Decimal(projected),
        actual_cost=Decimal(actual),
        transactions=[
            ExpenseTransaction(description=f"spend {i}", amount=Decimal(amount), date=date(2024, 1, 1 + i))
            for i, amount in enumerate(transactions)
        ],
    )


def make_budget(
    year=2024,
    month=1,
    actual_regular="0",
    actual_extra="0",
    projected_regular="0",
    projected_extra="0",
    projected_expenses=(),
    actual_expenses=(),
):
    return MonthlyBudget(
        year=year,
        month=month,
        projected_income=Income(regular=Decimal(projected_regular), extra=Decimal(projected_extra)),
        actual_income=Income(regular=Decimal(actual_regular), extra=Decimal(actual_extra)),
        projected_expenses=list(projected_expenses),
        actual_expenses=list(actual_expenses),
    )


@pytest.fixture
def housing_budget():
    """January 2024: one 'Housing' category, Rent planned 1000, paid 1000."""
    return make_budget(
        actual_regular="3000",
        projected_regular="3000",
        projected_expenses=[
            ExpenseCategory(name="Housing", items=[make_item("Rent", projected="1000")]),
        ],
        actual_expenses=[
            ExpenseCategory(name="Housing", items=[make_item("Rent", projected="1000", actual="1000")]),
        ],
    )


@pytest.fixture
def storage():
    return InMemoryBudgetStorage()
