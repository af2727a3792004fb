"""
In-Memory Storage Implementation

Backs tests and guest sessions. Holds the same camelCase documents the
Google Sheets backend writes, so both go through the same codec and
migrations.
"""

from typing import Optional

import structlog

from budget_tracker.models.account import AccountValue
from budget_tracker.models.budget import BudgetTemplate, MonthlyBudget
from budget_tracker.models.migrations import DocumentCollection
from budget_tracker.models.summary import YearlySummary
from budget_tracker.services.storage.documents import from_document, stamp, to_document
from budget_tracker.services.storage.interface import (
    BudgetStorageInterface,
    NotFoundError,
    budget_document_id,
    summary_document_id,
)


logger = structlog.get_logger()


class InMemoryBudgetStorage(BudgetStorageInterface):
    """
    Dict-backed document store.
    
    Layout: {user_id: {collection: {doc_id: document}}}
    """
    
    def __init__(self):
        self._documents: dict[str, dict[DocumentCollection, dict[str, dict]]] = {}
    
    def _collection(self, user_id: str, collection: DocumentCollection) -> dict[str, dict]:
        return self._documents.setdefault(user_id, {}).setdefault(collection, {})
    
    def _put(self, user_id: str, collection: DocumentCollection, model, doc_id: Optional[str] = None):
        stored = stamp(model, doc_id)
        self._collection(user_id, collection)[stored.id] = to_document(stored)
        logger.debug(
            "document_stored",
            user_id=user_id,
            collection=collection.value,
            doc_id=stored.id,
        )
        return stored
    
    def _get(self, user_id: str, collection: DocumentCollection, doc_id: str):
        document = self._collection(user_id, collection).get(doc_id)
        if document is None:
            raise NotFoundError(f"{collection.value}/{doc_id} not found for user {user_id}")
        return from_document(collection, doc_id, document)
    
    def _all(self, user_id: str, collection: DocumentCollection) -> list:
        return [
            from_document(collection, doc_id, document)
            for doc_id, document in self._collection(user_id, collection).items()
        ]
    
    def _delete(self, user_id: str, collection: DocumentCollection, doc_id: str) -> bool:
        return self._collection(user_id, collection).pop(doc_id, None) is not None
    
    # Monthly budgets
    
    async def fetch_monthly_budgets(
        self,
        user_id: str,
        year: Optional[int] = None,
    ) -> list[MonthlyBudget]:
        budgets = self._all(user_id, DocumentCollection.MONTHLY_BUDGETS)
        if year is not None:
            budgets = [b for b in budgets if b.year == year]
        return sorted(budgets, key=lambda b: (b.year, b.month))
    
    async def get_monthly_budget(self, user_id: str, year: int, month: int) -> MonthlyBudget:
        return self._get(user_id, DocumentCollection.MONTHLY_BUDGETS, budget_document_id(year, month))
    
    async def upsert_monthly_budget(self, user_id: str, budget: MonthlyBudget) -> MonthlyBudget:
        return self._put(
            user_id,
            DocumentCollection.MONTHLY_BUDGETS,
            budget,
            budget_document_id(budget.year, budget.month),
        )
    
    # Yearly summaries
    
    async def get_yearly_summary(self, user_id: str, year: int) -> YearlySummary:
        return self._get(user_id, DocumentCollection.YEARLY_SUMMARIES, summary_document_id(year))
    
    async def upsert_yearly_summary(self, user_id: str, summary: YearlySummary) -> YearlySummary:
        return self._put(
            user_id,
            DocumentCollection.YEARLY_SUMMARIES,
            summary,
            summary_document_id(summary.year),
        )
    
    # Accounts
    
    async def fetch_accounts(self, user_id: str) -> list[AccountValue]:
        return self._all(user_id, DocumentCollection.ACCOUNTS)
    
    async def get_account(self, user_id: str, account_id: str) -> AccountValue:
        return self._get(user_id, DocumentCollection.ACCOUNTS, account_id)
    
    async def upsert_account(self, user_id: str, account: AccountValue) -> AccountValue:
        return self._put(user_id, DocumentCollection.ACCOUNTS, account)
    
    async def delete_account(self, user_id: str, account_id: str) -> bool:
        return self._delete(user_id, DocumentCollection.ACCOUNTS, account_id)
    
    # Templates
    
    async def fetch_templates(self, user_id: str) -> list[BudgetTemplate]:
        return self._all(user_id, DocumentCollection.TEMPLATES)
    
    async def get_template(self, user_id: str, template_id: str) -> BudgetTemplate:
        return self._get(user_id, DocumentCollection.TEMPLATES, template_id)
    
    async def upsert_template(self, user_id: str, template: BudgetTemplate) -> BudgetTemplate:
        return self._put(user_id, DocumentCollection.TEMPLATES, template)
    
    async def delete_template(self, user_id: str, template_id: str) -> bool:
        return self._delete(user_id, DocumentCollection.TEMPLATES, template_id)
    
    def load_document(
        self,
        user_id: str,
        collection: DocumentCollection,
        doc_id: str,
        document: dict,
    ) -> None:
        """Seed a raw stored document, e.g. one written by an older version."""
        self._collection(user_id, collection)[doc_id] = dict(document)
