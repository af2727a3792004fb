"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep Google Sheets, an in-memory store, or a real database behind
   the same calls
2. Run every flow in tests and guest sessions without credentials
3. Keep business logic decoupled from storage implementation

Data is a set of documents per user, in four collections (see
DocumentCollection). Budgets are addressed by (year, month), summaries
by year, templates and accounts by id.

Upserts assign an id when absent and stamp created_at/updated_at.
Last write wins; there is no locking.
"""

from abc import ABC, abstractmethod
from typing import Optional

from budget_tracker.models.account import AccountValue
from budget_tracker.models.budget import BudgetTemplate, MonthlyBudget
from budget_tracker.models.summary import YearlySummary


class BudgetStorageInterface(ABC):
    """
    Abstract interface for budget document storage.
    
    Any storage implementation (Google Sheets, in-memory, etc.)
    must implement these methods.
    """
    
    # ---- Monthly budgets ----------------------------------------------------
    
    @abstractmethod
    async def fetch_monthly_budgets(
        self,
        user_id: str,
        year: Optional[int] = None,
    ) -> list[MonthlyBudget]:
        """
        List a user's monthly budgets.
        
        Args:
            user_id: Owner of the documents
            year: Only budgets of this year, ordered by month
            
        Returns:
            Matching budgets (possibly empty)
        """
        pass
    
    @abstractmethod
    async def get_monthly_budget(
        self,
        user_id: str,
        year: int,
        month: int,
    ) -> MonthlyBudget:
        """
        Get the budget for one month.
        
        Raises:
            NotFoundError: If no budget exists for (year, month)
        """
        pass
    
    @abstractmethod
    async def upsert_monthly_budget(
        self,
        user_id: str,
        budget: MonthlyBudget,
    ) -> MonthlyBudget:
        """
        Create or replace the budget for budget.year/budget.month.
        
        Returns:
            The stored budget, with id and timestamps set
        """
        pass
    
    # ---- Yearly summaries ---------------------------------------------------
    
    @abstractmethod
    async def get_yearly_summary(self, user_id: str, year: int) -> YearlySummary:
        """
        Raises:
            NotFoundError: If no summary has been stored for the year
        """
        pass
    
    @abstractmethod
    async def upsert_yearly_summary(
        self,
        user_id: str,
        summary: YearlySummary,
    ) -> YearlySummary:
        pass
    
    # ---- Accounts -----------------------------------------------------------
    
    @abstractmethod
    async def fetch_accounts(self, user_id: str) -> list[AccountValue]:
        pass
    
    @abstractmethod
    async def get_account(self, user_id: str, account_id: str) -> AccountValue:
        """
        Raises:
            NotFoundError: If the account doesn't exist
        """
        pass
    
    @abstractmethod
    async def upsert_account(self, user_id: str, account: AccountValue) -> AccountValue:
        pass
    
    @abstractmethod
    async def delete_account(self, user_id: str, account_id: str) -> bool:
        """
        Returns:
            True if an account was deleted, False if there was none
        """
        pass
    
    # ---- Templates ----------------------------------------------------------
    
    @abstractmethod
    async def fetch_templates(self, user_id: str) -> list[BudgetTemplate]:
        pass
    
    @abstractmethod
    async def get_template(self, user_id: str, template_id: str) -> BudgetTemplate:
        """
        Raises:
            NotFoundError: If the template doesn't exist
        """
        pass
    
    @abstractmethod
    async def upsert_template(self, user_id: str, template: BudgetTemplate) -> BudgetTemplate:
        pass
    
    @abstractmethod
    async def delete_template(self, user_id: str, template_id: str) -> bool:
        pass


def budget_document_id(year: int, month: int) -> str:
    """Document id of a monthly budget, e.g. '2024-03'."""
    return f"{year}-{month:02d}"


def summary_document_id(year: int) -> str:
    return str(year)


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
