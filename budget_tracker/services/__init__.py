"""Services package."""

from budget_tracker.services.storage import (
    BudgetStorageInterface,
    ConnectionError,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    InMemoryBudgetStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    "BudgetStorageInterface",
    "ConnectionError",
    "GoogleSheetsBudgetStorage",
    "GoogleSheetsClient",
    "InMemoryBudgetStorage",
    "NotFoundError",
    "StorageError",
]
