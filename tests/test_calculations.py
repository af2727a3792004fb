"""Tests for the totals calculator and transaction reconciliation."""

import pytest
from datetime import date
from decimal import Decimal

from budget_tracker.calculations import (
    add_transaction,
    calculate_totals,
    delete_transaction,
    effective_actual_cost,
    transactions_newest_first,
)
from budget_tracker.models import ExpenseCategory
from budget_tracker.validation import TransactionValidationError, TransactionValidator

from conftest import make_budget, make_item


class TestEffectiveActualCost:
    """The larger of the manual figure and the transaction sum wins."""
    
    def test_manual_cost_wins_when_larger(self):
        item = make_item("Groceries", actual="50", transactions=["10", "20"])
        assert effective_actual_cost(item) == Decimal("50")
    
    def test_transactions_win_when_larger(self):
        item = make_item("Groceries", actual="50", transactions=["30", "50"])
        assert effective_actual_cost(item) == Decimal("80")
    
    def test_no_transactions(self):
        assert effective_actual_cost(make_item("Rent", actual="1000")) == Decimal("1000")


class TestTransactions:
    def test_add_transaction_returns_new_item(self):
        item = make_item("Groceries")
        updated = add_transaction(item, "Weekly shop", "42.50", date(2024, 1, 6))
        
        assert item.transactions == []
        assert len(updated.transactions) == 1
        assert updated.transactions[0].amount == Decimal("42.50")
        assert effective_actual_cost(updated) == Decimal("42.50")
    
    @pytest.mark.parametrize("description,amount,txn_date", [
        ("", "10", date(2024, 1, 1)),
        ("   ", "10", date(2024, 1, 1)),
        ("Coffee", "0", date(2024, 1, 1)),
        ("Coffee", "-5", date(2024, 1, 1)),
        ("Coffee", "abc", date(2024, 1, 1)),
        ("Coffee", None, date(2024, 1, 1)),
        ("Coffee", "10", None),
        ("Coffee", "10", "not a date"),
    ])
    def test_invalid_input_rejected(self, description, amount, txn_date):
        item = make_item("Groceries")
        with pytest.raises(TransactionValidationError) as exc_info:
            add_transaction(item, description, amount, txn_date)
        assert exc_info.value.issues
        assert item.transactions == []
    
    def test_delete_transaction(self):
        item = make_item("Groceries", transactions=["10", "20"])
        target = item.transactions[0].id
        
        updated = delete_transaction(item, target)
        assert [t.id for t in updated.transactions] == [item.transactions[1].id]
        assert len(item.transactions) == 2
    
    def test_delete_unknown_transaction_is_noop(self):
        item = make_item("Groceries", actual="5", transactions=["10", "20"])
        updated = delete_transaction(item, "txn_missing")
        assert updated.transactions == item.transactions
        assert effective_actual_cost(updated) == effective_actual_cost(item)
    
    def test_newest_first(self):
        item = make_item("Groceries", transactions=["1", "2", "3"])
        ordered = transactions_newest_first(item)
        assert [t.date for t in ordered] == [date(2024, 1, 3), date(2024, 1, 2), date(2024, 1, 1)]


class TestTransactionValidator:
    def test_future_date_is_a_warning(self):
        validator = TransactionValidator(future_date_tolerance_days=31, today=date(2024, 1, 1))
        result = validator.validate("Holiday deposit", "200", date(2024, 6, 1))
        
        assert result.is_valid
        assert result.warnings
        transaction = validator.build_transaction("Holiday deposit", "200", "2024-06-01")
        assert transaction.date == date(2024, 6, 1)
    
    def test_schema_failure_skips_semantic_stage(self):
        result = TransactionValidator().validate("", "10", date(2024, 1, 1))
        assert not result.schema_valid
        assert not result.semantic_valid
        assert result.has_errors


class TestCalculateTotals:
    """Tests for derived budget fields."""
    
    def test_balances(self):
        budget = make_budget(
            projected_regular="1000",
            actual_regular="900",
            actual_extra="100",
            projected_expenses=[ExpenseCategory(name="Living", items=[make_item("All", projected="800")])],
            actual_expenses=[ExpenseCategory(name="Living", items=[make_item("All", projected="800", actual="700")])],
        )
        result = calculate_totals(budget)
        
        assert result.projected_income.total == Decimal("1000")
        assert result.actual_income.total == Decimal("1000")
        assert result.total_projected_cost == Decimal("800")
        assert result.total_actual_cost == Decimal("700")
        assert result.total_difference == Decimal("-100")
        assert result.projected_balance == Decimal("200")
        assert result.actual_balance == Decimal("300")
        assert result.difference == Decimal("100")
    
    def test_actual_subtotals_include_transactions(self):
        budget = make_budget(
            projected_expenses=[ExpenseCategory(name="Food", items=[make_item("Groceries", projected="100")])],
            actual_expenses=[
                ExpenseCategory(name="Food", items=[make_item("Groceries", projected="100", actual="50", transactions=["60", "60"])]),
            ],
        )
        result = calculate_totals(budget)
        
        food = result.actual_expenses[0]
        assert food.subtotal.actual == Decimal("120")
        assert food.subtotal.difference == Decimal("20")
        assert food.items[0].difference == Decimal("20")
        assert result.total_actual_cost == Decimal("120")
    
    def test_input_not_mutated(self, housing_budget):
        calculate_totals(housing_budget)
        assert housing_budget.total_actual_cost == Decimal("0")
    
    def test_idempotent(self, housing_budget):
        once = calculate_totals(housing_budget)
        assert calculate_totals(once) == once
    
    def test_empty_budget(self):
        result = calculate_totals(make_budget())
        assert result.total_projected_cost == Decimal("0")
        assert result.actual_balance == Decimal("0")
