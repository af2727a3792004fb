"""
Main Orchestrator for Budget Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Monthly budgets (load → edit → recalculate → save)
2. Accounts (create → update month values → delete)
3. Yearly figures (aggregate → store → export)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is saved without being recalculated first
- Structural edits always go through the editing helpers
- Storage failures are logged here and re-raised to the caller

The pure calculation modules never touch storage; only these flows do.
"""

from typing import Any, Optional

import structlog

from budget_tracker.aggregation import aggregate_year
from budget_tracker.calculations import calculate_totals
from budget_tracker.config import get_settings
from budget_tracker.editing import (
    add_item_transaction,
    apply_template,
    new_account,
    new_monthly_budget,
    remove_item_transaction,
    set_account_month_value,
    template_from_budget,
)
from budget_tracker.export import build_export_archive, export_year
from budget_tracker.log import configure_logging, is_configured
from budget_tracker.models.account import AccountValue
from budget_tracker.models.budget import BudgetTemplate, MonthlyBudget
from budget_tracker.models.summary import YearlySummary
from budget_tracker.services.storage import (
    BudgetStorageInterface,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    InMemoryBudgetStorage,
    NotFoundError,
    StorageError,
)
from budget_tracker.validation import TransactionValidator, check_tree_alignment


logger = structlog.get_logger()


class BudgetFlow:
    """
    Orchestrates monthly budget work.
    
    Flow:
    1. Load → stored month, or NotFoundError
    2. Edit → editing helpers (pure, recalculated)
    3. Save → recalculate, check tree alignment, persist
    """
    
    def __init__(
        self,
        storage: BudgetStorageInterface,
        validator: Optional[TransactionValidator] = None,
    ):
        self._storage = storage
        self._validator = validator or TransactionValidator(
            future_date_tolerance_days=get_settings().app.future_date_tolerance_days
        )
    
    async def load_month(self, user_id: str, year: int, month: int) -> MonthlyBudget:
        """
        Raises:
            NotFoundError: If the month has never been saved
        """
        return await self._storage.get_monthly_budget(user_id, year, month)
    
    async def load_or_create_month(self, user_id: str, year: int, month: int) -> MonthlyBudget:
        """Stored month, or a fresh unsaved skeleton."""
        try:
            return await self._storage.get_monthly_budget(user_id, year, month)
        except NotFoundError:
            logger.info("month_created_from_skeleton", user_id=user_id, year=year, month=month)
            return new_monthly_budget(year, month)
    
    async def save_month(self, user_id: str, budget: MonthlyBudget) -> MonthlyBudget:
        """Recalculate and persist."""
        calculated = calculate_totals(budget)
        check_tree_alignment(calculated)
        try:
            saved = await self._storage.upsert_monthly_budget(user_id, calculated)
        except StorageError as e:
            logger.error(
                "month_save_failed",
                user_id=user_id,
                year=budget.year,
                month=budget.month,
                error=str(e),
            )
            raise
        
        logger.info(
            "month_saved",
            user_id=user_id,
            year=saved.year,
            month=saved.month,
            actual_balance=str(saved.actual_balance),
        )
        return saved
    
    async def add_transaction(
        self,
        user_id: str,
        year: int,
        month: int,
        category: str,
        sub_category: str,
        description: Any,
        amount: Any,
        txn_date: Any,
    ) -> MonthlyBudget:
        """
        Record a transaction and save the month.
        
        Raises:
            TransactionValidationError: Invalid input; nothing is saved
        """
        budget = await self.load_or_create_month(user_id, year, month)
        updated = add_item_transaction(
            budget,
            category,
            sub_category,
            description,
            amount,
            txn_date,
            validator=self._validator,
        )
        return await self.save_month(user_id, updated)
    
    async def remove_transaction(
        self,
        user_id: str,
        year: int,
        month: int,
        category: str,
        sub_category: str,
        transaction_id: str,
    ) -> MonthlyBudget:
        budget = await self.load_month(user_id, year, month)
        updated = remove_item_transaction(budget, category, sub_category, transaction_id)
        return await self.save_month(user_id, updated)
    
    # Templates
    
    async def list_templates(self, user_id: str) -> list[BudgetTemplate]:
        return await self._storage.fetch_templates(user_id)
    
    async def save_template(
        self,
        user_id: str,
        budget: MonthlyBudget,
        name: str,
        description: Optional[str] = None,
    ) -> BudgetTemplate:
        """Store the month's plan as a new, uniquely named template."""
        existing = await self._storage.fetch_templates(user_id)
        template = template_from_budget(budget, name, description, existing=existing)
        saved = await self._storage.upsert_template(user_id, template)
        logger.info("template_saved", user_id=user_id, template_id=saved.id, name=saved.name)
        return saved
    
    async def apply_template(
        self,
        user_id: str,
        year: int,
        month: int,
        template_id: str,
    ) -> MonthlyBudget:
        template = await self._storage.get_template(user_id, template_id)
        budget = await self.load_or_create_month(user_id, year, month)
        return await self.save_month(user_id, apply_template(budget, template))
    
    async def delete_template(self, user_id: str, template_id: str) -> bool:
        deleted = await self._storage.delete_template(user_id, template_id)
        logger.info("template_deleted", user_id=user_id, template_id=template_id, deleted=deleted)
        return deleted


class AccountFlow:
    """Creates, edits and deletes a user's accounts."""
    
    def __init__(self, storage: BudgetStorageInterface):
        self._storage = storage
    
    async def list_accounts(self, user_id: str, year: Optional[int] = None) -> list[AccountValue]:
        """All accounts, or only those taking part in the given year."""
        accounts = await self._storage.fetch_accounts(user_id)
        if year is not None:
            accounts = [a for a in accounts if a.applies_to_year(year)]
        return accounts
    
    async def create_account(
        self,
        user_id: str,
        name: str,
        year: Optional[int] = None,
    ) -> AccountValue:
        """
        Raises:
            BudgetEditError: Blank or duplicate name
        """
        existing = await self._storage.fetch_accounts(user_id)
        account = await self._storage.upsert_account(
            user_id, new_account(name, existing=existing, year=year)
        )
        logger.info("account_created", user_id=user_id, account_id=account.id, name=account.name)
        return account
    
    async def update_month_value(
        self,
        user_id: str,
        account_id: str,
        month: int,
        value: Any,
    ) -> AccountValue:
        account = await self._storage.get_account(user_id, account_id)
        updated = set_account_month_value(account, month, value)
        return await self._storage.upsert_account(user_id, updated)
    
    async def delete_account(self, user_id: str, account_id: str) -> bool:
        deleted = await self._storage.delete_account(user_id, account_id)
        logger.info("account_deleted", user_id=user_id, account_id=account_id, deleted=deleted)
        return deleted


class YearlyFlow:
    """
    Orchestrates yearly figures.
    
    The stored summary is a snapshot: it only changes when
    refresh_yearly_summary() runs.
    """
    
    def __init__(self, storage: BudgetStorageInterface):
        self._storage = storage
    
    async def refresh_yearly_summary(self, user_id: str, year: int) -> YearlySummary:
        """Aggregate the year's months and accounts, store and return the summary."""
        budgets = await self._storage.fetch_monthly_budgets(user_id, year)
        accounts = await self._storage.fetch_accounts(user_id)
        summary = aggregate_year(year, [calculate_totals(b) for b in budgets], accounts)
        return await self._storage.upsert_yearly_summary(user_id, summary)
    
    async def get_yearly_summary(self, user_id: str, year: int) -> YearlySummary:
        """
        Raises:
            NotFoundError: If the year has never been refreshed
        """
        return await self._storage.get_yearly_summary(user_id, year)
    
    async def export_year_archive(self, user_id: str, year: int) -> tuple[str, bytes]:
        """
        Build the star-schema export for a year.
        
        Returns:
            (archive_filename, zip_bytes)
        """
        budgets = await self._storage.fetch_monthly_budgets(user_id, year)
        accounts = await self._storage.fetch_accounts(user_id)
        files = export_year(year, budgets, accounts)
        filename, data = build_export_archive(year, files)
        logger.info("year_exported", user_id=user_id, year=year, filename=filename, size_bytes=len(data))
        return filename, data


def create_app_components(
    use_storage: bool = True,
) -> tuple[BudgetFlow, AccountFlow, YearlyFlow, BudgetStorageInterface]:
    """
    Factory function to create all application components.
    
    Args:
        use_storage: Whether to use the configured storage backend.
                    Set to False for tests and guest sessions; an
                    in-memory store is used instead.
                    
    Returns:
        (budget_flow, account_flow, yearly_flow, storage)
    """
    app_settings = get_settings().app
    if not is_configured():
        configure_logging(app_settings.log_level, json_output=not app_settings.debug_mode)
    
    storage: BudgetStorageInterface = InMemoryBudgetStorage()
    
    if use_storage and app_settings.storage_backend == "google_sheets":
        try:
            storage = GoogleSheetsBudgetStorage(GoogleSheetsClient())
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", backend="google_sheets", error=str(e))
            storage = InMemoryBudgetStorage()
    
    return (
        BudgetFlow(storage),
        AccountFlow(storage),
        YearlyFlow(storage),
        storage,
    )
