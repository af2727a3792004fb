"""
Tests for Budget Tracker models

Test strategy:
1. Unit tests for individual components (models, calculators, exporter)
2. Flow tests against the in-memory store
3. No real API calls in tests
"""

import pytest
from decimal import Decimal

from budget_tracker.models import (
    AccountValue,
    BudgetTemplate,
    DocumentCollection,
    ExpenseItem,
    ExpenseTransaction,
    Income,
    Month,
    MonthlyBudget,
    YearlySummary,
    migrate_document,
)


class TestMonth:
    """Tests for the 1-based month / 0-based index conversion."""
    
    def test_index_is_zero_based(self):
        assert Month.JAN.index == 0
        assert Month.DEC.index == 11
    
    def test_from_index_round_trips(self):
        assert all(Month.from_index(m.index) is m for m in Month)
    
    def test_from_index_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            Month.from_index(12)
        with pytest.raises(ValueError):
            Month.from_index(-1)
    
    def test_abbreviation(self):
        assert Month.MAR.abbreviation == "Mar"
        assert [m.abbreviation for m in Month][:2] == ["Jan", "Feb"]


class TestBudgetModels:
    """Tests for budget-related Pydantic models."""
    
    def test_income_total_is_derived(self):
        income = Income(regular=Decimal("900"), extra=Decimal("100"), total=Decimal("5"))
        assert income.total == Decimal("1000")
    
    def test_item_without_transactions_loads_empty(self):
        item = ExpenseItem.model_validate({"subCategory": "Rent", "transactions": None})
        assert item.transactions == []
        assert item.transaction_total == Decimal("0")
    
    def test_transaction_rejects_non_positive_amount(self):
        with pytest.raises(ValueError):
            ExpenseTransaction(description="Coffee", amount=Decimal("0"), date="2024-01-05")
    
    def test_offset_created_at_stored_as_naive_utc(self):
        txn = ExpenseTransaction(
            description="Market",
            amount=Decimal("12"),
            date="2024-03-05",
            createdAt="2024-03-05T12:00:00+02:00",
        )
        assert txn.created_at.tzinfo is None
        assert txn.created_at.hour == 10
    
    def test_transaction_gets_an_id(self):
        first = ExpenseTransaction(description="Coffee", amount=Decimal("3"), date="2024-01-05")
        second = ExpenseTransaction(description="Coffee", amount=Decimal("3"), date="2024-01-05")
        assert first.id and first.id != second.id
    
    def test_budget_rejects_invalid_month(self):
        with pytest.raises(ValueError):
            MonthlyBudget(year=2024, month=13)
    
    def test_budget_document_uses_camel_case(self):
        budget = MonthlyBudget(year=2024, month=2)
        document = budget.to_document()
        assert "projectedIncome" in document
        assert "totalActualCost" in document
        assert "projected_income" not in document
        assert budget.calendar_month is Month.FEB
    
    def test_template_blank_description_is_none(self):
        template = BudgetTemplate(name="Standard", description="   ")
        assert template.description is None


class TestAccountValue:
    """Tests for account month values."""
    
    def test_short_monthly_values_are_padded(self):
        account = AccountValue(name="Savings", monthly_values=[Decimal("100"), None])
        assert len(account.monthly_values) == 12
        assert account.monthly_values[1] == Decimal("0")
        assert account.current_value == Decimal("100")
    
    def test_too_many_values_rejected(self):
        with pytest.raises(ValueError):
            AccountValue(name="Savings", monthly_values=[1] * 13)
    
    def test_current_value_is_sum(self):
        account = AccountValue(name="Savings", monthly_values=[10] * 12, current_value=5)
        assert account.current_value == Decimal("120")
    
    def test_year_scoping(self):
        unscoped = AccountValue(name="Savings")
        pinned = AccountValue(name="Brokerage", year=2023)
        assert unscoped.applies_to_year(2024)
        assert pinned.applies_to_year(2023)
        assert not pinned.applies_to_year(2024)
    
    def test_value_for_month(self):
        account = AccountValue(name="Savings", monthly_values=[1, 2, 3])
        assert account.value_for(Month.MAR) == Decimal("3")
    
    def test_cumulative_through_month(self):
        account = AccountValue(name="Savings", monthly_values=[1, 2, 3, 4])
        assert account.cumulative_through(Month.JAN) == Decimal("1")
        assert account.cumulative_through(Month.MAR) == Decimal("6")
        assert account.cumulative_through(Month.DEC) == Decimal("10")


class TestYearlySummaryModel:
    def test_monthly_arrays_must_hold_twelve_values(self):
        with pytest.raises(ValueError):
            YearlySummary(year=2024, monthly_income=[1, 2, 3])


class TestMigrations:
    """Older stored documents load with defaults filled in."""
    
    def test_budget_items_gain_transactions(self):
        document = {
            "year": 2023,
            "month": 5,
            "actualExpenses": [
                {"name": "Food", "items": [{"subCategory": "Groceries", "actualCost": 120}]},
            ],
        }
        migrated = migrate_document(DocumentCollection.MONTHLY_BUDGETS, document)
        item = migrated["actualExpenses"][0]["items"][0]
        assert item["transactions"] == []
        assert item["projectedCost"] == 0
        assert migrated["schemaVersion"] == 1
        assert migrated["projectedIncome"] == {"regular": 0, "extra": 0, "total": 0}
        
        budget = MonthlyBudget.model_validate(migrated)
        assert budget.actual_expenses[0].items[0].actual_cost == Decimal("120")
    
    def test_migration_does_not_touch_input(self):
        document = {"name": "Savings", "monthlyValues": [5]}
        migrate_document(DocumentCollection.ACCOUNTS, document)
        assert document == {"name": "Savings", "monthlyValues": [5]}
    
    def test_account_values_padded(self):
        migrated = migrate_document(DocumentCollection.ACCOUNTS, {"name": "Savings"})
        assert migrated["monthlyValues"] == [0] * 12
    
    def test_current_documents_unchanged(self):
        document = {"schemaVersion": 1, "name": "Standard"}
        assert migrate_document(DocumentCollection.TEMPLATES, document) == document
