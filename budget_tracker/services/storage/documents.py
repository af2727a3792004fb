"""
Document Codec

Shared by every backend: turns models into stored documents and back.

Stored documents are camelCase JSON objects without their own id (the
id is the document key). Loading always runs migrate_document() first,
so records written by older versions load unchanged.
"""

from datetime import datetime
from typing import Optional, TypeVar
from uuid import uuid4

from budget_tracker.models.account import AccountValue
from budget_tracker.models.budget import BudgetTemplate, DocumentModel, MonthlyBudget
from budget_tracker.models.migrations import DocumentCollection, migrate_document
from budget_tracker.models.summary import YearlySummary


ModelT = TypeVar("ModelT", bound=DocumentModel)

COLLECTION_MODELS: dict[DocumentCollection, type[DocumentModel]] = {
    DocumentCollection.MONTHLY_BUDGETS: MonthlyBudget,
    DocumentCollection.YEARLY_SUMMARIES: YearlySummary,
    DocumentCollection.ACCOUNTS: AccountValue,
    DocumentCollection.TEMPLATES: BudgetTemplate,
}


def stamp(model: ModelT, doc_id: Optional[str] = None) -> ModelT:
    """Copy of model with an id and fresh timestamps."""
    now = datetime.utcnow()
    return model.model_copy(update={
        "id": doc_id or model.id or uuid4().hex,
        "created_at": model.created_at or now,
        "updated_at": now,
    })


def to_document(model: DocumentModel) -> dict:
    document = model.to_document()
    document.pop("id", None)
    return document


def from_document(collection: DocumentCollection, doc_id: str, document: dict) -> DocumentModel:
    data = migrate_document(collection, document)
    data["id"] = doc_id
    return COLLECTION_MODELS[collection].model_validate(data)
