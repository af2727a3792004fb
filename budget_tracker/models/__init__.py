"""
Data Models Package

This package contains all Pydantic models used in Budget Tracker.
All data flowing through the system must conform to these schemas.
"""

from budget_tracker.models.budget import (
    CURRENT_SCHEMA_VERSION,
    ZERO,
    BudgetTemplate,
    DocumentModel,
    ExpenseCategory,
    ExpenseItem,
    ExpenseTransaction,
    Income,
    Month,
    MonthlyBudget,
    Subtotal,
    find_category,
    zero_months,
)
from budget_tracker.models.account import AccountValue
from budget_tracker.models.summary import NetWorthSummary, YearlySummary
from budget_tracker.models.migrations import DocumentCollection, migrate_document
from budget_tracker.models.validation import (
    IntegrityWarning,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Budget models
    "BudgetTemplate",
    "DocumentModel",
    "ExpenseCategory",
    "ExpenseItem",
    "ExpenseTransaction",
    "Income",
    "Month",
    "MonthlyBudget",
    "Subtotal",
    "find_category",
    "zero_months",
    "CURRENT_SCHEMA_VERSION",
    "ZERO",
    # Accounts and summaries
    "AccountValue",
    "NetWorthSummary",
    "YearlySummary",
    # Documents
    "DocumentCollection",
    "migrate_document",
    # Validation
    "IntegrityWarning",
    "ValidationIssue",
    "ValidationResult",
]
