"""
Core Budget Models for Budget Tracker

These models define the schemas for monthly budgets and templates.
They are designed to:
1. Keep every amount an exact Decimal (no float penny drift)
2. Load documents written by the original store unchanged
   (camelCase keys, items without a transactions list)
3. Be serializable for storage with model_dump(by_alias=True, mode="json")

DESIGN DECISION: Derived fields (income totals, subtotals, balances,
differences) are plain fields, not computed properties. They are
persisted alongside the inputs, and calculate_totals() is the only
thing that writes them.
"""

import datetime as dt
from decimal import Decimal
from enum import IntEnum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


ZERO = Decimal("0")

CURRENT_SCHEMA_VERSION = 1


# =============================================================================
# MONTHS - the one place 1-based months meet 0-based arrays
# =============================================================================

class Month(IntEnum):
    """
    Calendar month, valued 1-12 as stored on budgets.
    
    Per-month arrays are 0-based; always go through index/from_index
    rather than doing `month - 1` arithmetic inline.
    """
    JAN = 1
    FEB = 2
    MAR = 3
    APR = 4
    MAY = 5
    JUN = 6
    JUL = 7
    AUG = 8
    SEP = 9
    OCT = 10
    NOV = 11
    DEC = 12
    
    @property
    def index(self) -> int:
        """Position of this month in a 12-element per-month array."""
        return self.value - 1
    
    @classmethod
    def from_index(cls, index: int) -> "Month":
        """Month for a 0-based array position."""
        if not 0 <= index < 12:
            raise ValueError(f"Month index out of range: {index}")
        return cls(index + 1)
    
    @property
    def abbreviation(self) -> str:
        """Three-letter English abbreviation, e.g. 'Jan'."""
        return self.name.title()


def zero_months() -> list[Decimal]:
    """A fresh 12-element array of zero amounts."""
    return [ZERO] * 12


# =============================================================================
# BASE
# =============================================================================

class DocumentModel(BaseModel):
    """
    Base for everything that is stored as a document.
    
    Field names are snake_case in Python and camelCase in documents.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
    
    def to_document(self) -> dict:
        """Serialize for storage (camelCase, JSON-safe values)."""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# INCOME & EXPENSES
# =============================================================================

class Income(DocumentModel):
    """Regular plus extra income for one side (projected or actual)."""
    
    regular: Decimal = ZERO
    extra: Decimal = ZERO
    total: Decimal = Field(
        default=ZERO,
        description="Always regular + extra; rewritten by calculate_totals()"
    )
    
    @model_validator(mode='after')
    def derive_total(self) -> 'Income':
        """A stored total is never trusted."""
        self.total = self.regular + self.extra
        return self


class ExpenseTransaction(DocumentModel):
    """
    One dated spend recorded against an expense item.
    
    Immutable once created; it can only be deleted.
    """
    
    id: str = Field(
        default_factory=lambda: f"txn_{uuid4().hex}",
        min_length=1,
        description="Unique within the owning item"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
    )
    amount: Decimal = Field(
        ...,
        gt=0,
    )
    created_at: dt.datetime = Field(
        default_factory=dt.datetime.utcnow,
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the spend"
    )
    
    @field_validator('created_at', mode='after')
    @classmethod
    def created_at_as_naive_utc(cls, v: dt.datetime) -> dt.datetime:
        """Older records carry offset-aware stamps ('...Z'); new ones are naive UTC."""
        if v.tzinfo is not None:
            return v.astimezone(dt.timezone.utc).replace(tzinfo=None)
        return v


class ExpenseItem(DocumentModel):
    """
    A subcategory line within an expense category.
    
    actual_cost is the legacy, manually typed figure. When transactions
    exist, the effective actual cost is the larger of the two; see
    budget_tracker.calculations.reconciler.
    """
    
    sub_category: str = Field(
        ...,
        min_length=1,
        max_length=200,
    )
    projected_cost: Decimal = ZERO
    actual_cost: Decimal = ZERO
    difference: Decimal = ZERO
    transactions: list[ExpenseTransaction] = Field(default_factory=list)
    
    @field_validator('transactions', mode='before')
    @classmethod
    def default_missing_transactions(cls, v):
        """Items saved before transactions existed carry null or nothing."""
        return [] if v is None else v
    
    @property
    def transaction_total(self) -> Decimal:
        return sum((t.amount for t in self.transactions), ZERO)


class Subtotal(DocumentModel):
    projected: Decimal = ZERO
    actual: Decimal = ZERO
    difference: Decimal = ZERO


class ExpenseCategory(DocumentModel):
    """A named group of expense items with its derived subtotal."""
    
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
    )
    items: list[ExpenseItem] = Field(default_factory=list)
    subtotal: Subtotal = Field(default_factory=Subtotal)
    
    @field_validator('items', mode='before')
    @classmethod
    def default_missing_items(cls, v):
        return [] if v is None else v
    
    @field_validator('subtotal', mode='before')
    @classmethod
    def default_missing_subtotal(cls, v):
        return {} if v is None else v
    
    def find_item(self, sub_category: str, ignore_case: bool = False) -> Optional[ExpenseItem]:
        """Item with this subcategory name, or None."""
        for item in self.items:
            if _same_name(item.sub_category, sub_category, ignore_case):
                return item
        return None


def find_category(
    categories: list[ExpenseCategory],
    name: str,
    ignore_case: bool = False,
) -> Optional[ExpenseCategory]:
    """Category with this name, or None."""
    for category in categories:
        if _same_name(category.name, name, ignore_case):
            return category
    return None


def _same_name(left: str, right: str, ignore_case: bool) -> bool:
    if ignore_case:
        return left.casefold() == right.casefold()
    return left == right


# =============================================================================
# MONTHLY BUDGET
# =============================================================================

class MonthlyBudget(DocumentModel):
    """
    One user's budget for one (year, month).
    
    Two trees describe expenses: projected_expenses and actual_expenses.
    They are expected to hold the same categories and items in the same
    order; the editing helpers keep them that way, and every cross-tree
    lookup elsewhere goes by name so a divergence degrades to zeros.
    
    CRITICAL: Every field below "Derived" is recomputed by
    calculate_totals() after any mutation.
    """
    
    id: Optional[str] = Field(
        default=None,
        description="Document id assigned by storage"
    )
    schema_version: int = Field(default=CURRENT_SCHEMA_VERSION)
    
    year: int = Field(
        ...,
        ge=1900,
        le=9999,
    )
    month: int = Field(
        ...,
        ge=1,
        le=12,
        description="Calendar month, 1 = January"
    )
    
    projected_income: Income = Field(default_factory=Income)
    actual_income: Income = Field(default_factory=Income)
    projected_expenses: list[ExpenseCategory] = Field(default_factory=list)
    actual_expenses: list[ExpenseCategory] = Field(default_factory=list)
    
    # Derived
    total_projected_cost: Decimal = ZERO
    total_actual_cost: Decimal = ZERO
    total_difference: Decimal = ZERO
    projected_balance: Decimal = ZERO
    actual_balance: Decimal = ZERO
    difference: Decimal = ZERO
    
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    
    @field_validator('projected_expenses', 'actual_expenses', mode='before')
    @classmethod
    def default_missing_trees(cls, v):
        return [] if v is None else v
    
    @property
    def calendar_month(self) -> Month:
        return Month(self.month)


# =============================================================================
# TEMPLATES
# =============================================================================

class BudgetTemplate(DocumentModel):
    """
    Reusable projected skeleton: projected income plus category structure.
    
    Templates never carry actual-side figures; applying one overwrites
    the month's projected income and both expense trees.
    """
    
    id: Optional[str] = None
    schema_version: int = Field(default=CURRENT_SCHEMA_VERSION)
    
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500,
    )
    projected_income: Income = Field(default_factory=Income)
    expense_categories: list[ExpenseCategory] = Field(default_factory=list)
    
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    
    @field_validator('description', mode='before')
    @classmethod
    def blank_description_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v
