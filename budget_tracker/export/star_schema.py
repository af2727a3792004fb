"""
Star-Schema Export

Turns one year of monthly budgets and accounts into dimension and fact
tables for external analysis tools (Power BI and friends).

Dimensions:
- DimDates            one row per month, key "YY-Mon"
- DimIncomeTypes      fixed: 1 Actual Income, 2 Projected Income
- DimParentSections   expense categories
- DimSubSections      (category, subcategory) pairs

Facts:
- FctMonthlyIncomes       regular/extra income per side, only when > 0
- FctBudgetTransactions   one row per expense line per month
- FctAccountTotals        one row per account per month

CRITICAL: Surrogate ids are handed out in first-seen order while
scanning each budget's actual tree and then its projected tree, budgets
in the order given. Changing that order changes every id in the output.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

import structlog

from budget_tracker.calculations.reconciler import effective_actual_cost
from budget_tracker.export.csv_format import to_csv
from budget_tracker.models.account import AccountValue
from budget_tracker.models.budget import (
    ZERO,
    ExpenseCategory,
    Month,
    MonthlyBudget,
    find_category,
)


logger = structlog.get_logger()

ACTUAL_INCOME_TYPE_ID = 1
PROJECTED_INCOME_TYPE_ID = 2

INCOME_TYPES = [
    (ACTUAL_INCOME_TYPE_ID, "Actual Income"),
    (PROJECTED_INCOME_TYPE_ID, "Projected Income"),
]

# File name -> column order. Downstream tools parse by these headers.
EXPORT_FILES: dict[str, list[str]] = {
    "DimDates.csv": ["MonthYearKey"],
    "DimParentSections.csv": ["ID", "Name"],
    "DimSubSections.csv": ["ID", "Name", "ParentSectionID"],
    "DimIncomeTypes.csv": ["ID", "Name"],
    "FctAccountTotals.csv": ["ID", "Name", "MonthYear", "ActualValue"],
    "FctMonthlyIncomes.csv": ["ID", "Name", "Value", "MonthYear", "IncomeTypeID"],
    "FctBudgetTransactions.csv": [
        "ID",
        "MonthYear",
        "ParentSectionID",
        "SubSectionID",
        "ProjectedCost",
        "ActualCost",
    ],
}


def month_year_key(year: int, month: Month) -> str:
    """Date dimension key, e.g. (2024, MAR) -> '24-Mar'."""
    return f"{year % 100:02d}-{month.abbreviation}"


@dataclass
class StarSchemaExport:
    """All seven tables, as lists of rows keyed by column name."""
    
    year: int
    dim_dates: list[dict] = field(default_factory=list)
    dim_parent_sections: list[dict] = field(default_factory=list)
    dim_sub_sections: list[dict] = field(default_factory=list)
    dim_income_types: list[dict] = field(default_factory=list)
    fct_account_totals: list[dict] = field(default_factory=list)
    fct_monthly_incomes: list[dict] = field(default_factory=list)
    fct_budget_transactions: list[dict] = field(default_factory=list)
    
    def tables(self) -> dict[str, list[dict]]:
        return {
            "DimDates.csv": self.dim_dates,
            "DimParentSections.csv": self.dim_parent_sections,
            "DimSubSections.csv": self.dim_sub_sections,
            "DimIncomeTypes.csv": self.dim_income_types,
            "FctAccountTotals.csv": self.fct_account_totals,
            "FctMonthlyIncomes.csv": self.fct_monthly_incomes,
            "FctBudgetTransactions.csv": self.fct_budget_transactions,
        }
    
    def to_csv_files(self) -> dict[str, str]:
        return {
            filename: to_csv(rows, EXPORT_FILES[filename])
            for filename, rows in self.tables().items()
        }


class _KeyRegistry:
    """Hands out 1-based surrogate ids in first-seen order."""
    
    def __init__(self):
        self._ids: dict = {}
    
    def register(self, key) -> int:
        if key not in self._ids:
            self._ids[key] = len(self._ids) + 1
        return self._ids[key]
    
    def get(self, key) -> int:
        return self._ids[key]
    
    def items(self):
        return self._ids.items()


def build_star_schema(
    year: int,
    monthly_budgets: Iterable[MonthlyBudget],
    accounts: Iterable[AccountValue],
) -> StarSchemaExport:
    """Build every dimension and fact table for one year."""
    budgets = []
    for budget in monthly_budgets:
        if budget.year != year:
            logger.warning(
                "budget_outside_year_skipped",
                year=year,
                budget_year=budget.year,
                month=budget.month,
            )
            continue
        budgets.append(budget)
    year_accounts = [a for a in accounts if a.applies_to_year(year)]
    
    export = StarSchemaExport(year=year)
    
    export.dim_dates = [{"MonthYearKey": month_year_key(year, m)} for m in Month]
    export.dim_income_types = [{"ID": i, "Name": name} for i, name in INCOME_TYPES]
    
    parent_sections = _KeyRegistry()
    for budget in budgets:
        for category in budget.actual_expenses:
            parent_sections.register(category.name)
        for category in budget.projected_expenses:
            parent_sections.register(category.name)
    
    sub_sections = _KeyRegistry()
    for budget in budgets:
        for tree in (budget.actual_expenses, budget.projected_expenses):
            for category in tree:
                for item in category.items:
                    sub_sections.register((category.name, item.sub_category))
    
    export.dim_parent_sections = [
        {"ID": section_id, "Name": name} for name, section_id in parent_sections.items()
    ]
    export.dim_sub_sections = [
        {
            "ID": section_id,
            "Name": sub_category,
            "ParentSectionID": parent_sections.get(category_name),
        }
        for (category_name, sub_category), section_id in sub_sections.items()
    ]
    
    for budget in budgets:
        key = month_year_key(year, budget.calendar_month)
        _append_incomes(export.fct_monthly_incomes, budget, key)
        _append_budget_lines(export.fct_budget_transactions, budget, key, parent_sections, sub_sections)
    
    for account in year_accounts:
        for month in Month:
            export.fct_account_totals.append({
                "ID": len(export.fct_account_totals) + 1,
                "Name": account.name,
                "MonthYear": month_year_key(year, month),
                "ActualValue": account.value_for(month),
            })
    
    logger.info(
        "star_schema_built",
        year=year,
        budgets=len(budgets),
        accounts=len(year_accounts),
        parent_sections=len(export.dim_parent_sections),
        sub_sections=len(export.dim_sub_sections),
        budget_lines=len(export.fct_budget_transactions),
    )
    return export


def export_year(
    year: int,
    monthly_budgets: Iterable[MonthlyBudget],
    accounts: Iterable[AccountValue],
) -> dict[str, str]:
    """Filename -> CSV text for the seven export tables."""
    return build_star_schema(year, monthly_budgets, accounts).to_csv_files()


def _append_incomes(rows: list[dict], budget: MonthlyBudget, key: str) -> None:
    entries = [
        ("Actual Regular Income", budget.actual_income.regular, ACTUAL_INCOME_TYPE_ID),
        ("Actual Extra Income", budget.actual_income.extra, ACTUAL_INCOME_TYPE_ID),
        ("Projected Regular Income", budget.projected_income.regular, PROJECTED_INCOME_TYPE_ID),
        ("Projected Extra Income", budget.projected_income.extra, PROJECTED_INCOME_TYPE_ID),
    ]
    for name, value, income_type in entries:
        if value > 0:
            rows.append({
                "ID": len(rows) + 1,
                "Name": name,
                "Value": value,
                "MonthYear": key,
                "IncomeTypeID": income_type,
            })


def _append_budget_lines(
    rows: list[dict],
    budget: MonthlyBudget,
    key: str,
    parent_sections: _KeyRegistry,
    sub_sections: _KeyRegistry,
) -> None:
    """
    Actual-tree items first, each matched by name to its projected twin;
    then projected-only items with a zero actual cost.
    """
    for category in budget.actual_expenses:
        projected_category = find_category(budget.projected_expenses, category.name)
        for item in category.items:
            rows.append({
                "ID": len(rows) + 1,
                "MonthYear": key,
                "ParentSectionID": parent_sections.get(category.name),
                "SubSectionID": sub_sections.get((category.name, item.sub_category)),
                "ProjectedCost": _projected_cost(projected_category, item.sub_category),
                "ActualCost": effective_actual_cost(item),
            })
    
    for category in budget.projected_expenses:
        actual_category = find_category(budget.actual_expenses, category.name)
        for item in category.items:
            if actual_category is not None and actual_category.find_item(item.sub_category) is not None:
                continue
            rows.append({
                "ID": len(rows) + 1,
                "MonthYear": key,
                "ParentSectionID": parent_sections.get(category.name),
                "SubSectionID": sub_sections.get((category.name, item.sub_category)),
                "ProjectedCost": item.projected_cost,
                "ActualCost": ZERO,
            })


def _projected_cost(category: ExpenseCategory | None, sub_category: str) -> Decimal:
    if category is None:
        return ZERO
    item = category.find_item(sub_category)
    return item.projected_cost if item is not None else ZERO
