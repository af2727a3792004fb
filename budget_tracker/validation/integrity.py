"""
Projected/Actual Tree Alignment Check

A budget keeps its expenses in two trees that should hold the same
categories and items in the same order. Nothing in storage enforces
this, so check_tree_alignment() reports where they drift apart.
"""

import structlog

from budget_tracker.models.budget import ExpenseCategory, MonthlyBudget, find_category
from budget_tracker.models.validation import IntegrityWarning


logger = structlog.get_logger()


def check_tree_alignment(budget: MonthlyBudget) -> list[IntegrityWarning]:
    """
    Compare the projected and actual trees by name and position.
    
    Returns an empty list for an aligned budget. Every warning found
    is also logged once at warning level.
    """
    warnings: list[IntegrityWarning] = []
    
    warnings.extend(_missing_categories(budget.projected_expenses, budget.actual_expenses, "actual"))
    warnings.extend(_missing_categories(budget.actual_expenses, budget.projected_expenses, "projected"))
    
    projected_names = [c.name for c in budget.projected_expenses]
    actual_names = [c.name for c in budget.actual_expenses]
    shared = [name for name in projected_names if name in actual_names]
    if shared != [name for name in actual_names if name in projected_names]:
        warnings.append(IntegrityWarning(
            issue_type="category_order",
            category=", ".join(shared),
            message="Categories appear in a different order in the projected and actual trees",
        ))
    
    for projected in budget.projected_expenses:
        actual = find_category(budget.actual_expenses, projected.name)
        if actual is None:
            continue
        warnings.extend(_compare_items(projected, actual))
    
    for warning in warnings:
        logger.warning(
            "tree_divergence_detected",
            year=budget.year,
            month=budget.month,
            issue_type=warning.issue_type,
            category=warning.category,
            sub_category=warning.sub_category,
        )
    
    return warnings


def _missing_categories(
    source: list[ExpenseCategory],
    other: list[ExpenseCategory],
    other_side: str,
) -> list[IntegrityWarning]:
    return [
        IntegrityWarning(
            issue_type="missing_category",
            category=category.name,
            missing_from=other_side,
            message=f"Category '{category.name}' is missing from the {other_side} tree",
        )
        for category in source
        if find_category(other, category.name) is None
    ]


def _compare_items(projected: ExpenseCategory, actual: ExpenseCategory) -> list[IntegrityWarning]:
    warnings = []
    
    for source, other, other_side in (
        (projected, actual, "actual"),
        (actual, projected, "projected"),
    ):
        for item in source.items:
            if other.find_item(item.sub_category) is None:
                warnings.append(IntegrityWarning(
                    issue_type="missing_item",
                    category=projected.name,
                    sub_category=item.sub_category,
                    missing_from=other_side,
                    message=(
                        f"Subcategory '{item.sub_category}' of '{projected.name}' "
                        f"is missing from the {other_side} tree"
                    ),
                ))
    
    projected_names = [i.sub_category for i in projected.items]
    actual_names = [i.sub_category for i in actual.items]
    shared = [name for name in projected_names if name in actual_names]
    if shared != [name for name in actual_names if name in projected_names]:
        warnings.append(IntegrityWarning(
            issue_type="item_order",
            category=projected.name,
            message=f"Subcategories of '{projected.name}' are ordered differently in the two trees",
        ))
    
    return warnings
