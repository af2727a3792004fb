"""Tests for the star-schema export."""

import csv
import io
from decimal import Decimal

from budget_tracker.export import (
    EXPORT_FILES,
    build_export_archive,
    build_star_schema,
    export_year,
    format_decimal,
    month_year_key,
    read_export_archive,
    to_csv,
)
from budget_tracker.models import AccountValue, ExpenseCategory, Month

from conftest import make_budget, make_item


def parse(text):
    return list(csv.DictReader(io.StringIO(text)))


class TestCsvFormat:
    """Tests for CSV rendering."""
    
    def test_comma_is_quoted_and_round_trips(self):
        text = to_csv([{"ID": 1, "Name": "Rent, utilities"}], ["ID", "Name"])
        assert text == 'ID,Name\n1,"Rent, utilities"'
        assert parse(text)[0]["Name"] == "Rent, utilities"
    
    def test_quote_is_doubled(self):
        text = to_csv([{"Name": 'The "big" one'}], ["Name"])
        assert text == 'Name\n"The ""big"" one"'
        assert parse(text)[0]["Name"] == 'The "big" one'
    
    def test_empty_table_is_header_and_newline(self):
        assert to_csv([], ["ID", "Name"]) == "ID,Name\n"
    
    def test_no_trailing_newline(self):
        text = to_csv([{"ID": 1}, {"ID": 2}], ["ID"])
        assert text == "ID\n1\n2"
    
    def test_decimal_rendering(self):
        assert format_decimal(Decimal("1500.00")) == "1500"
        assert format_decimal(Decimal("12.50")) == "12.5"
        assert format_decimal(Decimal("1E+3")) == "1000"
        assert format_decimal(Decimal("0.00")) == "0"


class TestMonthYearKey:
    def test_format(self):
        assert month_year_key(2024, Month.MAR) == "24-Mar"
        assert month_year_key(2005, Month.JAN) == "05-Jan"


class TestExportYear:
    """Tests for the seven export tables."""
    
    def test_all_files_with_headers(self):
        files = export_year(2024, [], [])
        assert set(files) == set(EXPORT_FILES)
        for filename, headers in EXPORT_FILES.items():
            assert files[filename].split("\n")[0] == ",".join(headers)
    
    def test_dates_cover_the_year(self):
        rows = parse(export_year(2024, [], [])["DimDates.csv"])
        assert [r["MonthYearKey"] for r in rows][:3] == ["24-Jan", "24-Feb", "24-Mar"]
        assert len(rows) == 12
    
    def test_income_types_fixed(self, housing_budget):
        for budgets in ([], [housing_budget]):
            rows = parse(export_year(2024, budgets, [])["DimIncomeTypes.csv"])
            assert rows == [
                {"ID": "1", "Name": "Actual Income"},
                {"ID": "2", "Name": "Projected Income"},
            ]
    
    def test_income_rows_skip_non_positive_values(self):
        budget = make_budget(month=2, actual_regular="2500", actual_extra="0", projected_regular="2400", projected_extra="-5")
        rows = parse(export_year(2024, [budget], [])["FctMonthlyIncomes.csv"])
        
        assert rows == [
            {"ID": "1", "Name": "Actual Regular Income", "Value": "2500", "MonthYear": "24-Feb", "IncomeTypeID": "1"},
            {"ID": "2", "Name": "Projected Regular Income", "Value": "2400", "MonthYear": "24-Feb", "IncomeTypeID": "2"},
        ]
    
    def test_shared_item_produces_one_row(self, housing_budget):
        rows = parse(export_year(2024, [housing_budget], [])["FctBudgetTransactions.csv"])
        assert rows == [{
            "ID": "1",
            "MonthYear": "24-Jan",
            "ParentSectionID": "1",
            "SubSectionID": "1",
            "ProjectedCost": "1000",
            "ActualCost": "1000",
        }]
    
    def test_actual_cost_includes_transactions(self):
        budget = make_budget(
            projected_expenses=[ExpenseCategory(name="Food", items=[make_item("Groceries", projected="100")])],
            actual_expenses=[ExpenseCategory(name="Food", items=[make_item("Groceries", actual="20", transactions=["40", "45"])])],
        )
        rows = parse(export_year(2024, [budget], [])["FctBudgetTransactions.csv"])
        assert rows[0]["ProjectedCost"] == "100"
        assert rows[0]["ActualCost"] == "85"
    
    def test_diverged_trees(self):
        budget = make_budget(
            projected_expenses=[
                ExpenseCategory(name="Food", items=[make_item("Groceries", projected="100"), make_item("Dining", projected="60")]),
            ],
            actual_expenses=[
                ExpenseCategory(name="Food", items=[make_item("Groceries", actual="90")]),
                ExpenseCategory(name="Travel", items=[make_item("Train", actual="30")]),
            ],
        )
        export = build_star_schema(2024, [budget], [])
        
        assert [r["Name"] for r in export.dim_parent_sections] == ["Food", "Travel"]
        assert [(r["ID"], r["Name"], r["ParentSectionID"]) for r in export.dim_sub_sections] == [
            (1, "Groceries", 1),
            (2, "Train", 2),
            (3, "Dining", 1),
        ]
        lines = [
            (r["SubSectionID"], r["ProjectedCost"], r["ActualCost"])
            for r in export.fct_budget_transactions
        ]
        assert lines == [
            (1, Decimal("100"), Decimal("90")),
            (2, Decimal("0"), Decimal("30")),
            (3, Decimal("60"), Decimal("0")),
        ]
    
    def test_keys_follow_first_seen_order_across_budgets(self):
        january = make_budget(
            month=1,
            actual_expenses=[ExpenseCategory(name="Home", items=[make_item("Rent")])],
            projected_expenses=[ExpenseCategory(name="Home", items=[make_item("Rent")])],
        )
        february = make_budget(
            month=2,
            actual_expenses=[ExpenseCategory(name="Fun", items=[make_item("Cinema")]), ExpenseCategory(name="Home", items=[make_item("Rent")])],
            projected_expenses=[ExpenseCategory(name="Fun", items=[make_item("Cinema")]), ExpenseCategory(name="Home", items=[make_item("Rent")])],
        )
        export = build_star_schema(2024, [january, february], [])
        
        assert [(r["ID"], r["Name"]) for r in export.dim_parent_sections] == [(1, "Home"), (2, "Fun")]
        assert [r["SubSectionID"] for r in export.fct_budget_transactions] == [1, 2, 1]
        assert [r["ID"] for r in export.fct_budget_transactions] == [1, 2, 3]
    
    def test_same_subcategory_under_two_categories(self):
        budget = make_budget(
            actual_expenses=[
                ExpenseCategory(name="Home", items=[make_item("Insurance")]),
                ExpenseCategory(name="Car", items=[make_item("Insurance")]),
            ],
        )
        export = build_star_schema(2024, [budget], [])
        assert [(r["Name"], r["ParentSectionID"]) for r in export.dim_sub_sections] == [
            ("Insurance", 1),
            ("Insurance", 2),
        ]
    
    def test_account_totals(self):
        savings = AccountValue(name="Savings, joint", monthly_values=[100, 200])
        pinned = AccountValue(name="Old", monthly_values=[5], year=2023)
        text = export_year(2024, [], [savings, pinned])["FctAccountTotals.csv"]
        rows = parse(text)
        
        assert len(rows) == 12
        assert rows[0] == {"ID": "1", "Name": "Savings, joint", "MonthYear": "24-Jan", "ActualValue": "100"}
        assert rows[1]["ActualValue"] == "200"
        assert rows[11]["ActualValue"] == "0"
    
    def test_budgets_from_other_years_skipped(self, housing_budget):
        other = housing_budget.model_copy(update={"year": 2023})
        rows = parse(export_year(2024, [other], [])["FctBudgetTransactions.csv"])
        assert rows == []


class TestArchive:
    def test_archive_holds_every_file(self, housing_budget):
        files = export_year(2024, [housing_budget], [])
        filename, data = build_export_archive(2024, files, prefix="ExportedFinancialData")
        
        assert filename == "ExportedFinancialData2024.zip"
        assert read_export_archive(data) == files
    
    def test_default_prefix_from_settings(self):
        filename, _ = build_export_archive(2025, {})
        assert filename == "ExportedFinancialData2025.zip"
