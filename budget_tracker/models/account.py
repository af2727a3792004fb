"""
Account Models

An account holds twelve monthly contribution values. Net worth treats
them as running totals: the value recorded for a month is added to
every later month of the year.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator, model_validator

from budget_tracker.models.budget import (
    CURRENT_SCHEMA_VERSION,
    ZERO,
    DocumentModel,
    Month,
    zero_months,
)


class AccountValue(DocumentModel):
    """
    A savings/investment account tracked month by month.
    
    DESIGN DECISION: year is optional. Records created before it existed
    (year=None) apply to whichever year is being summarised, which is how
    they were always used. Setting a year pins the record to that year.
    """
    
    id: Optional[str] = None
    schema_version: int = Field(default=CURRENT_SCHEMA_VERSION)
    
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Unique among a user's accounts (case-insensitive)"
    )
    monthly_values: list[Decimal] = Field(
        default_factory=zero_months,
        description="One amount per calendar month, index 0 = January"
    )
    current_value: Decimal = Field(
        default=ZERO,
        description="Always sum(monthly_values)"
    )
    year: Optional[int] = Field(
        default=None,
        ge=1900,
        le=9999,
    )
    
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    @field_validator('monthly_values', mode='before')
    @classmethod
    def pad_monthly_values(cls, v):
        """Missing or short arrays are zero-padded to twelve months."""
        if v is None:
            return zero_months()
        values = [ZERO if value is None else value for value in v]
        if len(values) > 12:
            raise ValueError(f"monthly_values holds {len(values)} entries; at most 12 allowed")
        return values + [ZERO] * (12 - len(values))
    
    @model_validator(mode='after')
    def derive_current_value(self) -> 'AccountValue':
        self.current_value = sum(self.monthly_values, ZERO)
        return self
    
    def applies_to_year(self, year: int) -> bool:
        """Whether this account takes part in the given year's figures."""
        return self.year is None or self.year == year
    
    def value_for(self, month: Month) -> Decimal:
        return self.monthly_values[month.index]
    
    def cumulative_through(self, month: Month) -> Decimal:
        """Sum of this account's values from January through month."""
        return sum(self.monthly_values[: month.index + 1], ZERO)
