"""
Yearly Aggregation

Folds up to twelve calculated monthly budgets and the user's accounts
into a YearlySummary.

GUARANTEES:
- Months without a budget stay at zero in every per-month array
- Averages divide by 12 regardless of how many months have data
- Net worth for month i = savings from January through i plus every
  account's values from January through i
- Nothing in the result needs data beyond the budgets and accounts given
"""

from decimal import Decimal
from typing import Iterable

import structlog

from budget_tracker.models.account import AccountValue
from budget_tracker.models.budget import ZERO, Month, MonthlyBudget, zero_months
from budget_tracker.models.summary import NetWorthSummary, YearlySummary


logger = structlog.get_logger()

MONTHS_IN_YEAR = Decimal(12)


def aggregate_year(
    year: int,
    monthly_budgets: Iterable[MonthlyBudget],
    accounts: Iterable[AccountValue],
) -> YearlySummary:
    """
    Build the yearly summary for one year.
    
    Args:
        year: Calendar year being summarised
        monthly_budgets: Budgets with derived fields already calculated;
                         entries for other years are skipped
        accounts: The user's accounts; those pinned to another year are skipped
    """
    income = zero_months()
    expenses = zero_months()
    savings = zero_months()
    projected_income = zero_months()
    projected_expenses = zero_months()
    
    months_with_data = 0
    for budget in monthly_budgets:
        if budget.year != year:
            logger.warning(
                "budget_outside_year_skipped",
                year=year,
                budget_year=budget.year,
                month=budget.month,
            )
            continue
        
        i = budget.calendar_month.index
        income[i] = budget.actual_income.total
        expenses[i] = budget.total_actual_cost
        savings[i] = income[i] - expenses[i]
        projected_income[i] = budget.projected_income.total
        projected_expenses[i] = budget.total_projected_cost
        months_with_data += 1
    
    year_accounts = [a for a in accounts if a.applies_to_year(year)]
    net_worth = _cumulative_net_worth(savings, year_accounts)
    
    income_total = sum(income, ZERO)
    expenses_total = sum(expenses, ZERO)
    savings_total = sum(savings, ZERO)
    
    summary = YearlySummary(
        year=year,
        monthly_income=income,
        monthly_expenses=expenses,
        monthly_savings=savings,
        monthly_projected_income=projected_income,
        monthly_projected_expenses=projected_expenses,
        yearly_income_total=income_total,
        yearly_average_income=income_total / MONTHS_IN_YEAR,
        yearly_expenses_total=expenses_total,
        yearly_average_expense=expenses_total / MONTHS_IN_YEAR,
        yearly_savings_total=savings_total,
        yearly_average_savings=savings_total / MONTHS_IN_YEAR,
        yearly_projected_income_total=sum(projected_income, ZERO),
        yearly_projected_expenses_total=sum(projected_expenses, ZERO),
        net_worth_summary=NetWorthSummary(
            monthly_net_worth=net_worth,
            yearly_high=max(net_worth),
            yearly_total=savings_total,
        ),
        account_values=[a.model_copy(deep=True) for a in year_accounts],
    )
    
    logger.info(
        "yearly_summary_computed",
        year=year,
        months_with_data=months_with_data,
        accounts=len(year_accounts),
        savings_total=str(savings_total),
    )
    return summary


def _cumulative_net_worth(
    savings: list[Decimal],
    accounts: list[AccountValue],
) -> list[Decimal]:
    """Running savings plus running account contributions, month by month."""
    net_worth = zero_months()
    cumulative_savings = ZERO
    for month in Month:
        cumulative_savings += savings[month.index]
        accounts_to_date = sum((a.cumulative_through(month) for a in accounts), ZERO)
        net_worth[month.index] = cumulative_savings + accounts_to_date
    return net_worth
