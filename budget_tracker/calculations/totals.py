"""
Monthly Budget Totals

calculate_totals() recomputes every derived field of a budget,
bottom-up, from its inputs:

1. Income totals (regular + extra) on both sides
2. Projected tree subtotals (manual actual_cost only)
3. Actual tree subtotals (effective actual cost, transactions included)
4. Total projected/actual cost and their difference
5. Projected/actual balances and their difference

It is pure and idempotent: the input is never mutated and running it
twice gives the same result.
"""

from decimal import Decimal
from typing import Callable

from budget_tracker.calculations.reconciler import effective_actual_cost
from budget_tracker.models.budget import (
    ZERO,
    ExpenseCategory,
    ExpenseItem,
    Income,
    MonthlyBudget,
)


def calculate_totals(budget: MonthlyBudget) -> MonthlyBudget:
    """Return a copy of budget with all derived fields recomputed."""
    result = budget.model_copy(deep=True)
    
    _total_income(result.projected_income)
    _total_income(result.actual_income)
    
    for category in result.projected_expenses:
        _subtotal(category, actual_cost=lambda item: item.actual_cost)
    for category in result.actual_expenses:
        _subtotal(category, actual_cost=effective_actual_cost)
    
    result.total_projected_cost = sum(
        (c.subtotal.projected for c in result.projected_expenses), ZERO
    )
    result.total_actual_cost = sum(
        (c.subtotal.actual for c in result.actual_expenses), ZERO
    )
    result.total_difference = result.total_actual_cost - result.total_projected_cost
    
    result.projected_balance = result.projected_income.total - result.total_projected_cost
    result.actual_balance = result.actual_income.total - result.total_actual_cost
    result.difference = result.actual_balance - result.projected_balance
    
    return result


def _total_income(income: Income) -> None:
    income.total = income.regular + income.extra


def _subtotal(
    category: ExpenseCategory,
    actual_cost: Callable[[ExpenseItem], Decimal],
) -> None:
    projected = ZERO
    actual = ZERO
    for item in category.items:
        item_actual = actual_cost(item)
        item.difference = item_actual - item.projected_cost
        projected += item.projected_cost
        actual += item_actual
    
    category.subtotal.projected = projected
    category.subtotal.actual = actual
    category.subtotal.difference = actual - projected
