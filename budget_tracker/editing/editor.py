"""
Budget Editing

Every edit a user makes to a month, a template or an account goes
through these helpers. They all follow the same contract:

1. The input model is never mutated; a new model is returned
2. Structural edits (categories, subcategories) hit both expense trees
   by name, so the projected and actual trees stay in lockstep
3. Names are unique case-insensitively within their scope
4. Every budget edit returns a recalculated budget

DESIGN DECISION: Projected cost lives on the projected tree and is
mirrored onto the matching actual item, so each tree's item difference
reads against the same plan. The manual actual cost and transactions
live on the actual tree only.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

import structlog

from budget_tracker.calculations.reconciler import add_transaction, delete_transaction
from budget_tracker.calculations.totals import calculate_totals
from budget_tracker.config import get_settings
from budget_tracker.models.account import AccountValue
from budget_tracker.models.budget import (
    ZERO,
    BudgetTemplate,
    ExpenseCategory,
    ExpenseItem,
    Income,
    Month,
    MonthlyBudget,
    find_category,
)
from budget_tracker.validation.validator import TransactionValidator


logger = structlog.get_logger()

INCOME_SIDES = ("projected", "actual")


class BudgetEditError(Exception):
    """An edit that would break naming rules or targets something absent."""
    pass


# =============================================================================
# MONTHS
# =============================================================================

def new_monthly_budget(
    year: int,
    month: int,
    category_name: Optional[str] = None,
    subcategory_names: Optional[list[str]] = None,
) -> MonthlyBudget:
    """
    A fresh month with the default skeleton in both trees.
    
    The skeleton comes from settings unless given explicitly:
    one "Category" holding "Subcategory1" through "Subcategory5".
    """
    app_settings = get_settings().app
    if category_name is None:
        category_name = app_settings.default_category_name
    if subcategory_names is None:
        subcategory_names = app_settings.default_subcategory_names
    
    skeleton = ExpenseCategory(
        name=category_name,
        items=[ExpenseItem(sub_category=name) for name in subcategory_names],
    )
    budget = MonthlyBudget(
        year=year,
        month=int(Month(month)),
        projected_expenses=[skeleton.model_copy(deep=True)],
        actual_expenses=[skeleton.model_copy(deep=True)],
    )
    return calculate_totals(budget)


def set_income(
    budget: MonthlyBudget,
    side: str,
    regular: Any = None,
    extra: Any = None,
) -> MonthlyBudget:
    """
    Set regular and/or extra income on one side.
    
    Args:
        side: "projected" or "actual"
        regular, extra: New amounts; None leaves the current value
    """
    if side not in INCOME_SIDES:
        raise BudgetEditError(f"Unknown income side: {side!r}")
    
    updated = budget.model_copy(deep=True)
    income: Income = getattr(updated, f"{side}_income")
    if regular is not None:
        income.regular = _to_amount(regular, "regular income")
    if extra is not None:
        income.extra = _to_amount(extra, "extra income")
    return calculate_totals(updated)


def set_item_cost(
    budget: MonthlyBudget,
    category: str,
    sub_category: str,
    projected_cost: Any = None,
    actual_cost: Any = None,
) -> MonthlyBudget:
    """
    Set the planned cost and/or the manual actual cost of one item.
    
    Raises:
        BudgetEditError: If the item is in neither tree, or a cost is
            negative or not a number.
    """
    updated = budget.model_copy(deep=True)
    projected_item = _find_item(updated.projected_expenses, category, sub_category)
    actual_item = _find_item(updated.actual_expenses, category, sub_category)
    if projected_item is None and actual_item is None:
        raise BudgetEditError(f'Subcategory "{sub_category}" not found in {category}')
    
    if projected_cost is not None:
        amount = _to_amount(projected_cost, "projected cost")
        for item in (projected_item, actual_item):
            if item is not None:
                item.projected_cost = amount
    
    if actual_cost is not None:
        if actual_item is None:
            raise BudgetEditError(
                f'Subcategory "{sub_category}" has no actual line in {category}'
            )
        actual_item.actual_cost = _to_amount(actual_cost, "actual cost")
    
    return calculate_totals(updated)


def add_category(budget: MonthlyBudget, name: str) -> MonthlyBudget:
    """Append an empty category to both trees."""
    name = (name or "").strip()
    if not name:
        raise BudgetEditError("Category name cannot be empty")
    if (
        find_category(budget.projected_expenses, name, ignore_case=True) is not None
        or find_category(budget.actual_expenses, name, ignore_case=True) is not None
    ):
        raise BudgetEditError(f'Category "{name}" already exists')
    
    updated = budget.model_copy(deep=True)
    updated.projected_expenses.append(ExpenseCategory(name=name))
    updated.actual_expenses.append(ExpenseCategory(name=name))
    
    logger.info("category_added", year=budget.year, month=budget.month, category=name)
    return calculate_totals(updated)


def remove_category(budget: MonthlyBudget, name: str) -> MonthlyBudget:
    """Remove a category, with its items and transactions, from both trees."""
    if (
        find_category(budget.projected_expenses, name) is None
        and find_category(budget.actual_expenses, name) is None
    ):
        raise BudgetEditError(f'Category "{name}" not found')
    
    updated = budget.model_copy(deep=True)
    updated.projected_expenses = [c for c in updated.projected_expenses if c.name != name]
    updated.actual_expenses = [c for c in updated.actual_expenses if c.name != name]
    
    logger.info("category_removed", year=budget.year, month=budget.month, category=name)
    return calculate_totals(updated)


def add_subcategory(budget: MonthlyBudget, category: str, name: str) -> MonthlyBudget:
    """Append an empty item to the category in both trees."""
    name = (name or "").strip()
    if not name:
        raise BudgetEditError("Subcategory name cannot be empty")
    
    updated = budget.model_copy(deep=True)
    targets = [
        c for c in (
            find_category(updated.projected_expenses, category),
            find_category(updated.actual_expenses, category),
        )
        if c is not None
    ]
    if not targets:
        raise BudgetEditError(f'Category "{category}" not found')
    if any(c.find_item(name, ignore_case=True) is not None for c in targets):
        raise BudgetEditError(f'Subcategory "{name}" already exists in {category}')
    
    for target in targets:
        target.items.append(ExpenseItem(sub_category=name))
    
    logger.info(
        "subcategory_added",
        year=budget.year,
        month=budget.month,
        category=category,
        sub_category=name,
    )
    return calculate_totals(updated)


def remove_subcategory(budget: MonthlyBudget, category: str, name: str) -> MonthlyBudget:
    """Remove an item, with its transactions, from both trees."""
    updated = budget.model_copy(deep=True)
    removed = False
    for tree in (updated.projected_expenses, updated.actual_expenses):
        target = find_category(tree, category)
        if target is None:
            continue
        remaining = [item for item in target.items if item.sub_category != name]
        removed = removed or len(remaining) != len(target.items)
        target.items = remaining
    
    if not removed:
        raise BudgetEditError(f'Subcategory "{name}" not found in {category}')
    
    logger.info(
        "subcategory_removed",
        year=budget.year,
        month=budget.month,
        category=category,
        sub_category=name,
    )
    return calculate_totals(updated)


def add_item_transaction(
    budget: MonthlyBudget,
    category: str,
    sub_category: str,
    description: Any,
    amount: Any,
    txn_date: Any,
    validator: Optional[TransactionValidator] = None,
) -> MonthlyBudget:
    """
    Record a transaction against an actual-tree item.
    
    Raises:
        TransactionValidationError: Invalid input; nothing changes.
        BudgetEditError: The item does not exist on the actual side.
    """
    updated = budget.model_copy(deep=True)
    target = find_category(updated.actual_expenses, category)
    position = _item_position(target, sub_category)
    if position is None:
        raise BudgetEditError(f'Subcategory "{sub_category}" not found in {category}')
    
    target.items[position] = add_transaction(
        target.items[position], description, amount, txn_date, validator=validator
    )
    return calculate_totals(updated)


def remove_item_transaction(
    budget: MonthlyBudget,
    category: str,
    sub_category: str,
    transaction_id: str,
) -> MonthlyBudget:
    """Delete a transaction by id. An unknown id leaves the budget as it was."""
    updated = budget.model_copy(deep=True)
    target = find_category(updated.actual_expenses, category)
    position = _item_position(target, sub_category)
    if position is None:
        raise BudgetEditError(f'Subcategory "{sub_category}" not found in {category}')
    
    target.items[position] = delete_transaction(target.items[position], transaction_id)
    return calculate_totals(updated)


# =============================================================================
# TEMPLATES
# =============================================================================

def template_from_budget(
    budget: MonthlyBudget,
    name: str,
    description: Optional[str] = None,
    existing: Iterable[BudgetTemplate] = (),
) -> BudgetTemplate:
    """
    Capture a month's plan as a template.
    
    Only the projected side is kept: projected income and the projected
    tree with actual costs, differences and transactions cleared.
    """
    name = (name or "").strip()
    if not name:
        raise BudgetEditError("Template name cannot be empty")
    if any(t.name.casefold() == name.casefold() for t in existing):
        raise BudgetEditError(f'Template "{name}" already exists')
    
    categories = [
        ExpenseCategory(
            name=category.name,
            items=[
                ExpenseItem(sub_category=item.sub_category, projected_cost=item.projected_cost)
                for item in category.items
            ],
        )
        for category in budget.projected_expenses
    ]
    income = budget.projected_income
    return BudgetTemplate(
        name=name,
        description=description,
        projected_income=Income(regular=income.regular, extra=income.extra),
        expense_categories=categories,
    )


def apply_template(budget: MonthlyBudget, template: BudgetTemplate) -> MonthlyBudget:
    """
    Overwrite a month's projected income and both expense trees.
    
    WARNING: Actual-side items, manual costs and transactions of the
    month are replaced. Actual income is kept.
    """
    updated = budget.model_copy(deep=True)
    updated.projected_income = template.projected_income.model_copy(deep=True)
    updated.projected_expenses = [c.model_copy(deep=True) for c in template.expense_categories]
    updated.actual_expenses = [c.model_copy(deep=True) for c in template.expense_categories]
    
    logger.info(
        "template_applied",
        year=budget.year,
        month=budget.month,
        template=template.name,
    )
    return calculate_totals(updated)


# =============================================================================
# ACCOUNTS
# =============================================================================

def new_account(
    name: str,
    existing: Iterable[AccountValue] = (),
    year: Optional[int] = None,
) -> AccountValue:
    """A zeroed account; the name must be unique among existing ones."""
    name = (name or "").strip()
    if not name:
        raise BudgetEditError("Account name cannot be empty")
    if any(a.name.casefold() == name.casefold() for a in existing):
        raise BudgetEditError(f'Account "{name}" already exists')
    return AccountValue(name=name, year=year)


def set_account_month_value(account: AccountValue, month: int, value: Any) -> AccountValue:
    """Set one month's contribution; current_value is re-derived."""
    try:
        target = Month(month)
    except ValueError:
        raise BudgetEditError(f"Invalid month: {month!r}")
    values = list(account.monthly_values)
    values[target.index] = _to_amount(value, "account value", allow_negative=True)
    data = account.model_dump()
    data.update(monthly_values=values, updated_at=datetime.utcnow())
    return AccountValue.model_validate(data)


# =============================================================================
# HELPERS
# =============================================================================

def _to_amount(value: Any, label: str, allow_negative: bool = False) -> Decimal:
    if isinstance(value, bool):
        raise BudgetEditError(f"Invalid {label}: {value!r}")
    if isinstance(value, str):
        value = value.strip() or "0"
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise BudgetEditError(f"Invalid {label}: {value!r}")
    if not amount.is_finite():
        raise BudgetEditError(f"Invalid {label}: {value!r}")
    if amount < ZERO and not allow_negative:
        raise BudgetEditError(f"{label.capitalize()} cannot be negative")
    return amount


def _find_item(
    categories: list[ExpenseCategory],
    category: str,
    sub_category: str,
) -> Optional[ExpenseItem]:
    target = find_category(categories, category)
    return target.find_item(sub_category) if target is not None else None


def _item_position(category: Optional[ExpenseCategory], sub_category: str) -> Optional[int]:
    if category is None:
        return None
    for position, item in enumerate(category.items):
        if item.sub_category == sub_category:
            return position
    return None
