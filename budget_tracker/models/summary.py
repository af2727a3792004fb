"""
Yearly Summary Models

A YearlySummary is a cache: it can always be regenerated from the
year's monthly budgets and the user's accounts.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from budget_tracker.models.account import AccountValue
from budget_tracker.models.budget import (
    CURRENT_SCHEMA_VERSION,
    ZERO,
    DocumentModel,
    zero_months,
)


def _twelve_months(v):
    if v is None:
        return zero_months()
    if len(v) != 12:
        raise ValueError(f"Expected 12 monthly values, got {len(v)}")
    return v


class NetWorthSummary(DocumentModel):
    monthly_net_worth: list[Decimal] = Field(default_factory=zero_months)
    yearly_high: Decimal = ZERO
    yearly_total: Decimal = Field(
        default=ZERO,
        description="Total savings for the year"
    )
    
    @field_validator('monthly_net_worth', mode='before')
    @classmethod
    def validate_length(cls, v):
        return _twelve_months(v)


class YearlySummary(DocumentModel):
    """
    Per-month arrays and yearly figures for one (user, year).
    
    Averages always divide by 12; months without a budget count as zero.
    """
    
    id: Optional[str] = None
    schema_version: int = Field(default=CURRENT_SCHEMA_VERSION)
    
    year: int = Field(
        ...,
        ge=1900,
        le=9999,
    )
    
    monthly_income: list[Decimal] = Field(default_factory=zero_months)
    monthly_expenses: list[Decimal] = Field(default_factory=zero_months)
    monthly_savings: list[Decimal] = Field(default_factory=zero_months)
    monthly_projected_income: list[Decimal] = Field(default_factory=zero_months)
    monthly_projected_expenses: list[Decimal] = Field(default_factory=zero_months)
    
    yearly_income_total: Decimal = ZERO
    yearly_average_income: Decimal = ZERO
    yearly_expenses_total: Decimal = ZERO
    yearly_average_expense: Decimal = ZERO
    yearly_savings_total: Decimal = ZERO
    yearly_average_savings: Decimal = ZERO
    yearly_projected_income_total: Decimal = ZERO
    yearly_projected_expenses_total: Decimal = ZERO
    
    net_worth_summary: NetWorthSummary = Field(default_factory=NetWorthSummary)
    account_values: list[AccountValue] = Field(
        default_factory=list,
        description="Snapshot of the accounts the net worth was computed from"
    )
    
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    @field_validator(
        'monthly_income',
        'monthly_expenses',
        'monthly_savings',
        'monthly_projected_income',
        'monthly_projected_expenses',
        mode='before',
    )
    @classmethod
    def validate_length(cls, v):
        return _twelve_months(v)
