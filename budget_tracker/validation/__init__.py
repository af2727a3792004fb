"""Validation package."""

from budget_tracker.validation.integrity import check_tree_alignment
from budget_tracker.validation.validator import (
    TransactionValidationError,
    TransactionValidator,
)

__all__ = [
    "TransactionValidationError",
    "TransactionValidator",
    "check_tree_alignment",
]
