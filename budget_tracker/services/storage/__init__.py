"""
Storage Services Package

Provides the abstract storage interface and its implementations:
an in-memory store and a Google Sheets document store.
"""

from budget_tracker.services.storage.interface import (
    BudgetStorageInterface,
    ConnectionError,
    NotFoundError,
    StorageError,
    budget_document_id,
    summary_document_id,
)
from budget_tracker.services.storage.memory import InMemoryBudgetStorage
from budget_tracker.services.storage.google_sheets import (
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
)

__all__ = [
    # Interface
    "BudgetStorageInterface",
    "budget_document_id",
    "summary_document_id",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "GoogleSheetsBudgetStorage",
    "GoogleSheetsClient",
    "InMemoryBudgetStorage",
]
