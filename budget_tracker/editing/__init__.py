"""Budget, template and account editing helpers."""

from budget_tracker.editing.editor import (
    BudgetEditError,
    add_category,
    add_item_transaction,
    add_subcategory,
    apply_template,
    new_account,
    new_monthly_budget,
    remove_category,
    remove_item_transaction,
    remove_subcategory,
    set_account_month_value,
    set_income,
    set_item_cost,
    template_from_budget,
)

__all__ = [
    "BudgetEditError",
    "add_category",
    "add_item_transaction",
    "add_subcategory",
    "apply_template",
    "new_account",
    "new_monthly_budget",
    "remove_category",
    "remove_item_transaction",
    "remove_subcategory",
    "set_account_month_value",
    "set_income",
    "set_item_cost",
    "template_from_budget",
]
