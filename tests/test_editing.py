"""Tests for budget, template and account editing."""

import pytest
from datetime import date
from decimal import Decimal

from budget_tracker.editing import (
    BudgetEditError,
    add_category,
    add_item_transaction,
    add_subcategory,
    apply_template,
    new_account,
    new_monthly_budget,
    remove_category,
    remove_item_transaction,
    remove_subcategory,
    set_account_month_value,
    set_income,
    set_item_cost,
    template_from_budget,
)
from budget_tracker.models import AccountValue, BudgetTemplate
from budget_tracker.validation import TransactionValidationError, check_tree_alignment


def tree_shape(categories):
    return [(c.name, [i.sub_category for i in c.items]) for c in categories]


class TestNewMonth:
    def test_default_skeleton_in_both_trees(self):
        budget = new_monthly_budget(2024, 4)
        expected = [("Category", [f"Subcategory{i}" for i in range(1, 6)])]
        
        assert budget.year == 2024
        assert budget.month == 4
        assert tree_shape(budget.projected_expenses) == expected
        assert tree_shape(budget.actual_expenses) == expected
        assert check_tree_alignment(budget) == []
    
    def test_custom_skeleton(self):
        budget = new_monthly_budget(2024, 4, category_name="Home", subcategory_names=["Rent"])
        assert tree_shape(budget.actual_expenses) == [("Home", ["Rent"])]
    
    def test_invalid_month(self):
        with pytest.raises(ValueError):
            new_monthly_budget(2024, 0)


class TestIncomeAndCosts:
    def test_set_income(self, housing_budget):
        budget = set_income(housing_budget, "actual", extra="250")
        assert budget.actual_income.regular == Decimal("3000")
        assert budget.actual_income.total == Decimal("3250")
        assert budget.actual_balance == Decimal("2250")
    
    def test_unknown_income_side(self, housing_budget):
        with pytest.raises(BudgetEditError):
            set_income(housing_budget, "future", regular="1")
    
    def test_set_projected_cost_mirrors_to_actual_item(self, housing_budget):
        budget = set_item_cost(housing_budget, "Housing", "Rent", projected_cost="1200")
        
        assert budget.projected_expenses[0].items[0].projected_cost == Decimal("1200")
        assert budget.actual_expenses[0].items[0].projected_cost == Decimal("1200")
        assert budget.actual_expenses[0].items[0].difference == Decimal("-200")
        assert budget.total_projected_cost == Decimal("1200")
    
    def test_set_actual_cost(self, housing_budget):
        budget = set_item_cost(housing_budget, "Housing", "Rent", actual_cost="950.50")
        assert budget.total_actual_cost == Decimal("950.50")
    
    def test_negative_cost_rejected(self, housing_budget):
        with pytest.raises(BudgetEditError):
            set_item_cost(housing_budget, "Housing", "Rent", projected_cost="-1")
    
    def test_unknown_item(self, housing_budget):
        with pytest.raises(BudgetEditError):
            set_item_cost(housing_budget, "Housing", "Mortgage", projected_cost="1")


class TestStructure:
    """Structural edits keep the two trees in lockstep."""
    
    def test_add_category(self, housing_budget):
        budget = add_category(housing_budget, "  Travel ")
        assert tree_shape(budget.projected_expenses)[-1] == ("Travel", [])
        assert tree_shape(budget.actual_expenses)[-1] == ("Travel", [])
        assert len(housing_budget.projected_expenses) == 1
    
    @pytest.mark.parametrize("name", ["housing", "HOUSING", "Housing"])
    def test_duplicate_category_case_insensitive(self, housing_budget, name):
        with pytest.raises(BudgetEditError):
            add_category(housing_budget, name)
    
    def test_blank_category(self, housing_budget):
        with pytest.raises(BudgetEditError):
            add_category(housing_budget, "  ")
    
    def test_remove_category(self, housing_budget):
        budget = remove_category(housing_budget, "Housing")
        assert budget.projected_expenses == []
        assert budget.actual_expenses == []
        assert budget.total_actual_cost == Decimal("0")
    
    def test_remove_unknown_category(self, housing_budget):
        with pytest.raises(BudgetEditError):
            remove_category(housing_budget, "Travel")
    
    def test_add_subcategory(self, housing_budget):
        budget = add_subcategory(housing_budget, "Housing", "Utilities")
        assert tree_shape(budget.projected_expenses) == [("Housing", ["Rent", "Utilities"])]
        assert tree_shape(budget.actual_expenses) == [("Housing", ["Rent", "Utilities"])]
    
    def test_duplicate_subcategory(self, housing_budget):
        with pytest.raises(BudgetEditError):
            add_subcategory(housing_budget, "Housing", "rent")
    
    def test_subcategory_in_unknown_category(self, housing_budget):
        with pytest.raises(BudgetEditError):
            add_subcategory(housing_budget, "Travel", "Train")
    
    def test_remove_subcategory(self, housing_budget):
        budget = remove_subcategory(housing_budget, "Housing", "Rent")
        assert tree_shape(budget.projected_expenses) == [("Housing", [])]
        assert tree_shape(budget.actual_expenses) == [("Housing", [])]
        assert budget.total_projected_cost == Decimal("0")
    
    def test_remove_unknown_subcategory(self, housing_budget):
        with pytest.raises(BudgetEditError):
            remove_subcategory(housing_budget, "Housing", "Mortgage")


class TestItemTransactions:
    def test_add_and_remove(self, housing_budget):
        budget = add_item_transaction(housing_budget, "Housing", "Rent", "Deposit top-up", "300", date(2024, 1, 2))
        budget = add_item_transaction(budget, "Housing", "Rent", "Rent", "1000", date(2024, 1, 1))
        
        rent = budget.actual_expenses[0].items[0]
        assert len(rent.transactions) == 2
        assert budget.total_actual_cost == Decimal("1300")
        
        budget = remove_item_transaction(budget, "Housing", "Rent", rent.transactions[0].id)
        assert budget.total_actual_cost == Decimal("1000")
    
    def test_invalid_transaction_leaves_budget(self, housing_budget):
        with pytest.raises(TransactionValidationError):
            add_item_transaction(housing_budget, "Housing", "Rent", "Oops", "-3", date(2024, 1, 2))
        assert housing_budget.actual_expenses[0].items[0].transactions == []
    
    def test_unknown_item(self, housing_budget):
        with pytest.raises(BudgetEditError):
            add_item_transaction(housing_budget, "Housing", "Mortgage", "x", "1", date(2024, 1, 2))
    
    def test_remove_unknown_transaction_is_noop(self, housing_budget):
        budget = remove_item_transaction(housing_budget, "Housing", "Rent", "txn_missing")
        assert budget.actual_expenses[0].items[0].transactions == []
        assert budget.total_actual_cost == Decimal("1000")


class TestTemplates:
    def test_template_keeps_projected_side_only(self, housing_budget):
        budget = add_item_transaction(housing_budget, "Housing", "Rent", "Rent", "1100", date(2024, 1, 1))
        template = template_from_budget(budget, "Standard", "Usual month")
        
        item = template.expense_categories[0].items[0]
        assert template.name == "Standard"
        assert template.projected_income.total == Decimal("3000")
        assert item.projected_cost == Decimal("1000")
        assert item.actual_cost == Decimal("0")
        assert item.transactions == []
    
    def test_duplicate_template_name(self, housing_budget):
        existing = [BudgetTemplate(name="Standard")]
        with pytest.raises(BudgetEditError):
            template_from_budget(housing_budget, "standard", existing=existing)
    
    def test_apply_template(self, housing_budget):
        template = template_from_budget(housing_budget, "Standard")
        fresh = new_monthly_budget(2024, 2)
        fresh = set_income(fresh, "actual", regular="2800")
        
        budget = apply_template(fresh, template)
        assert tree_shape(budget.projected_expenses) == [("Housing", ["Rent"])]
        assert tree_shape(budget.actual_expenses) == [("Housing", ["Rent"])]
        assert budget.projected_income.total == Decimal("3000")
        assert budget.actual_income.total == Decimal("2800")
        assert budget.projected_balance == Decimal("2000")
        assert budget.total_actual_cost == Decimal("0")


class TestAccounts:
    def test_new_account(self):
        account = new_account(" Savings ")
        assert account.name == "Savings"
        assert account.monthly_values == [Decimal("0")] * 12
        assert account.year is None
    
    def test_duplicate_account(self):
        with pytest.raises(BudgetEditError):
            new_account("savings", existing=[AccountValue(name="Savings")])
    
    def test_set_month_value(self):
        account = AccountValue(name="Savings", monthly_values=[100])
        updated = set_account_month_value(account, 3, "250.75")
        
        assert updated.monthly_values[2] == Decimal("250.75")
        assert updated.current_value == Decimal("350.75")
        assert account.current_value == Decimal("100")
    
    def test_withdrawal_allowed(self):
        updated = set_account_month_value(AccountValue(name="Savings"), 1, "-50")
        assert updated.current_value == Decimal("-50")
    
    def test_invalid_value(self):
        with pytest.raises(BudgetEditError):
            set_account_month_value(AccountValue(name="Savings"), 1, "lots")
    
    def test_invalid_month(self):
        with pytest.raises(BudgetEditError):
            set_account_month_value(AccountValue(name="Savings"), 13, "10")
