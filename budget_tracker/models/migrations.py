"""
Document Migrations

Stored documents are loosely shaped: older records miss fields that
were added later (transactions on items, the monthlyValues array on
accounts, subtotals on categories). migrate_document() brings any
stored document up to CURRENT_SCHEMA_VERSION by filling defaults.

IMPORTANT: Migration only ever adds defaults. It never drops or
rewrites user data, and it never fails on a missing field.
"""

from enum import Enum

from budget_tracker.models.budget import CURRENT_SCHEMA_VERSION


class DocumentCollection(str, Enum):
    """Collections under each user in the document store."""
    MONTHLY_BUDGETS = "monthlyBudgets"
    YEARLY_SUMMARIES = "yearlySummaries"
    ACCOUNTS = "accounts"
    TEMPLATES = "templates"


_EMPTY_INCOME = {"regular": 0, "extra": 0, "total": 0}
_EMPTY_SUBTOTAL = {"projected": 0, "actual": 0, "difference": 0}


def migrate_document(collection: DocumentCollection, document: dict) -> dict:
    """
    Return a copy of document upgraded to the current schema.
    
    Documents already at the current version are returned as a copy
    without changes.
    """
    doc = dict(document)
    version = doc.get("schemaVersion") or 0
    if version >= CURRENT_SCHEMA_VERSION:
        return doc
    
    if collection == DocumentCollection.MONTHLY_BUDGETS:
        doc = _migrate_budget_v0(doc)
    elif collection == DocumentCollection.ACCOUNTS:
        doc = _migrate_account_v0(doc)
    elif collection == DocumentCollection.TEMPLATES:
        doc = _migrate_template_v0(doc)
    elif collection == DocumentCollection.YEARLY_SUMMARIES:
        doc = _migrate_summary_v0(doc)
    
    doc["schemaVersion"] = CURRENT_SCHEMA_VERSION
    return doc


def _migrate_categories(categories) -> list[dict]:
    migrated = []
    for category in categories or []:
        category = dict(category)
        category["subtotal"] = category.get("subtotal") or dict(_EMPTY_SUBTOTAL)
        items = []
        for item in category.get("items") or []:
            item = dict(item)
            if item.get("transactions") is None:
                item["transactions"] = []
            item.setdefault("projectedCost", 0)
            item.setdefault("actualCost", 0)
            item.setdefault("difference", 0)
            items.append(item)
        category["items"] = items
        migrated.append(category)
    return migrated


def _migrate_budget_v0(doc: dict) -> dict:
    for side in ("projectedIncome", "actualIncome"):
        doc[side] = doc.get(side) or dict(_EMPTY_INCOME)
    for tree in ("projectedExpenses", "actualExpenses"):
        doc[tree] = _migrate_categories(doc.get(tree))
    return doc


def _migrate_account_v0(doc: dict) -> dict:
    values = list(doc.get("monthlyValues") or [])
    doc["monthlyValues"] = values + [0] * (12 - len(values))
    doc.setdefault("currentValue", 0)
    return doc


def _migrate_template_v0(doc: dict) -> dict:
    doc["projectedIncome"] = doc.get("projectedIncome") or dict(_EMPTY_INCOME)
    doc["expenseCategories"] = _migrate_categories(doc.get("expenseCategories"))
    return doc


def _migrate_summary_v0(doc: dict) -> dict:
    # Summaries written before projected figures were tracked
    for key in ("monthlyProjectedIncome", "monthlyProjectedExpenses", "monthlySavings"):
        if doc.get(key) is None:
            doc[key] = [0] * 12
    doc["accountValues"] = [
        _migrate_account_v0(dict(account)) for account in doc.get("accountValues") or []
    ]
    return doc
