"""
Streamlit Frontend for Budget Tracker

The screen a user keeps open while budgeting month to month.

DESIGN PRINCIPLES:
1. Projected and actual figures side by side
2. Every edit is recalculated and saved immediately
3. Clear error messages in simple language
4. Yearly figures only change when the user refreshes them

All reads and writes go through the flows in budget_tracker.orchestrator;
this module never touches storage directly.
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st

from budget_tracker.calculations import effective_actual_cost, transactions_newest_first
from budget_tracker.config import get_settings, validate_all_settings
from budget_tracker.editing import (
    BudgetEditError,
    add_category,
    add_subcategory,
    remove_category,
    remove_subcategory,
    set_income,
    set_item_cost,
)
from budget_tracker.models import Month, MonthlyBudget, find_category
from budget_tracker.orchestrator import (
    AccountFlow,
    BudgetFlow,
    YearlyFlow,
    create_app_components,
)
from budget_tracker.services.storage import NotFoundError, StorageError
from budget_tracker.validation import TransactionValidationError


# Page configuration
st.set_page_config(
    page_title="Budget Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .big-number {
        font-size: 2.0em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_storage=False)


def format_money(value: Decimal) -> str:
    return f"{value:,.2f}"


def main():
    """Main application entry point."""
    budget_flow, account_flow, yearly_flow, _ = get_components()

    st.sidebar.title("💰 Budget Tracker")
    st.sidebar.markdown("---")

    user_id = st.sidebar.text_input("User", value=st.session_state.get("user_id", "guest"))
    st.session_state.user_id = user_id

    today = date.today()
    year = st.sidebar.number_input("Year", min_value=1900, max_value=9999, value=today.year, step=1)

    page = st.sidebar.radio(
        "Navigate to:",
        ["📅 Monthly Budget", "📊 Yearly Summary", "🏦 Accounts", "📦 Export", "⚙️ Settings"],
        index=0,
    )

    if page == "📅 Monthly Budget":
        render_month_page(budget_flow, user_id, int(year))
    elif page == "📊 Yearly Summary":
        render_yearly_page(yearly_flow, user_id, int(year))
    elif page == "🏦 Accounts":
        render_accounts_page(account_flow, user_id, int(year))
    elif page == "📦 Export":
        render_export_page(yearly_flow, user_id, int(year))
    elif page == "⚙️ Settings":
        render_settings_page()


def save(budget_flow: BudgetFlow, user_id: str, budget: MonthlyBudget, message: str):
    """Persist an edited month and refresh the page."""
    try:
        run_async(budget_flow.save_month(user_id, budget))
        st.toast(message)
        st.rerun()
    except StorageError as e:
        st.error(f"Could not save: {e}")


def render_month_page(budget_flow: BudgetFlow, user_id: str, year: int):
    """Render one month: income, expense lines, transactions, templates."""
    month = st.selectbox(
        "Month",
        options=list(Month),
        index=date.today().month - 1,
        format_func=lambda m: m.abbreviation,
    )
    st.title(f"📅 {month.abbreviation} {year}")

    budget = run_async(budget_flow.load_or_create_month(user_id, year, int(month)))

    # Headline numbers
    col1, col2, col3 = st.columns(3)
    col1.metric("Projected balance", format_money(budget.projected_balance))
    col2.metric("Actual balance", format_money(budget.actual_balance))
    col3.metric("Difference", format_money(budget.difference))

    # Income
    st.subheader("Income")
    with st.form("income"):
        col1, col2 = st.columns(2)
        with col1:
            projected_regular = st.number_input("Projected regular", value=float(budget.projected_income.regular), min_value=0.0)
            projected_extra = st.number_input("Projected extra", value=float(budget.projected_income.extra), min_value=0.0)
        with col2:
            actual_regular = st.number_input("Actual regular", value=float(budget.actual_income.regular), min_value=0.0)
            actual_extra = st.number_input("Actual extra", value=float(budget.actual_income.extra), min_value=0.0)
        if st.form_submit_button("Save income"):
            updated = set_income(budget, "projected", regular=str(projected_regular), extra=str(projected_extra))
            updated = set_income(updated, "actual", regular=str(actual_regular), extra=str(actual_extra))
            save(budget_flow, user_id, updated, "Income saved")

    # Expenses
    st.subheader("Expenses")
    for projected_category in budget.projected_expenses:
        actual_category = find_category(budget.actual_expenses, projected_category.name)
        render_category(budget_flow, user_id, budget, projected_category, actual_category)

    with st.form("new_category", clear_on_submit=True):
        name = st.text_input("New category")
        if st.form_submit_button("➕ Add category"):
            try:
                save(budget_flow, user_id, add_category(budget, name), f'Added category "{name}"')
            except BudgetEditError as e:
                st.error(str(e))

    render_templates(budget_flow, user_id, budget)


def render_category(budget_flow, user_id, budget, projected_category, actual_category):
    """One category table with per-item editing and transactions."""
    with st.expander(
        f"{projected_category.name} | projected {format_money(projected_category.subtotal.projected)}"
        f" / actual {format_money(actual_category.subtotal.actual if actual_category else Decimal(0))}",
        expanded=True,
    ):
        for item in projected_category.items:
            actual_item = actual_category.find_item(item.sub_category) if actual_category else None
            effective = effective_actual_cost(actual_item) if actual_item else Decimal(0)

            col1, col2, col3, col4 = st.columns([3, 2, 2, 2])
            col1.markdown(f"**{item.sub_category}**")
            projected_cost = col2.number_input(
                "Projected",
                value=float(item.projected_cost),
                min_value=0.0,
                key=f"proj-{budget.month}-{projected_category.name}-{item.sub_category}",
            )
            col3.markdown(f"Actual: {format_money(effective)}")
            col4.markdown(f"Difference: {format_money(effective - item.projected_cost)}")

            if Decimal(str(projected_cost)) != item.projected_cost:
                updated = set_item_cost(
                    budget, projected_category.name, item.sub_category, projected_cost=str(projected_cost)
                )
                save(budget_flow, user_id, updated, f"Updated {item.sub_category}")

            if actual_item is not None:
                render_transactions(budget_flow, user_id, budget, projected_category.name, actual_item)

            if st.button("🗑️ Remove subcategory", key=f"rm-{projected_category.name}-{item.sub_category}"):
                updated = remove_subcategory(budget, projected_category.name, item.sub_category)
                save(budget_flow, user_id, updated, f'Removed subcategory "{item.sub_category}"')

        with st.form(f"new-sub-{projected_category.name}", clear_on_submit=True):
            name = st.text_input("New subcategory")
            if st.form_submit_button("➕ Add subcategory"):
                try:
                    updated = add_subcategory(budget, projected_category.name, name)
                    save(budget_flow, user_id, updated, f'Added subcategory "{name}"')
                except BudgetEditError as e:
                    st.error(str(e))

        if st.button("🗑️ Remove category", key=f"rm-cat-{projected_category.name}"):
            save(
                budget_flow,
                user_id,
                remove_category(budget, projected_category.name),
                f'Removed category "{projected_category.name}"',
            )


def render_transactions(budget_flow, user_id, budget, category_name, actual_item):
    """Transaction history and entry for one actual item."""
    key = f"{budget.month}-{category_name}-{actual_item.sub_category}"

    for transaction in transactions_newest_first(actual_item):
        col1, col2, col3, col4 = st.columns([2, 4, 2, 1])
        col1.write(transaction.date.isoformat())
        col2.write(transaction.description)
        col3.write(format_money(transaction.amount))
        if col4.button("✖", key=f"del-{transaction.id}"):
            run_async(budget_flow.remove_transaction(
                user_id, budget.year, budget.month, category_name, actual_item.sub_category, transaction.id
            ))
            st.rerun()

    with st.form(f"txn-{key}", clear_on_submit=True):
        col1, col2, col3 = st.columns([4, 2, 2])
        description = col1.text_input("Description", key=f"desc-{key}")
        amount = col2.text_input("Amount", key=f"amt-{key}")
        txn_date = col3.date_input("Date", value=date.today(), key=f"date-{key}")
        if st.form_submit_button("Add transaction"):
            try:
                run_async(budget_flow.add_transaction(
                    user_id,
                    budget.year,
                    budget.month,
                    category_name,
                    actual_item.sub_category,
                    description,
                    amount,
                    txn_date,
                ))
                st.rerun()
            except TransactionValidationError as e:
                for issue in e.issues:
                    st.error(issue.message)


def render_templates(budget_flow: BudgetFlow, user_id: str, budget: MonthlyBudget):
    st.subheader("Templates")
    templates = run_async(budget_flow.list_templates(user_id))

    col1, col2 = st.columns(2)
    with col1:
        with st.form("save_template", clear_on_submit=True):
            name = st.text_input("Template name")
            description = st.text_input("Description")
            if st.form_submit_button("💾 Save as template"):
                try:
                    run_async(budget_flow.save_template(user_id, budget, name, description))
                    st.success(f'Saved template "{name}"')
                except BudgetEditError as e:
                    st.error(str(e))

    with col2:
        if not templates:
            st.info("No templates yet.")
            return
        template = st.selectbox("Template", options=templates, format_func=lambda t: t.name)
        st.warning("Applying a template replaces this month's expense lines and transactions.")
        if st.button("Apply template"):
            run_async(budget_flow.apply_template(user_id, budget.year, budget.month, template.id))
            st.rerun()
        if st.button("Delete template"):
            run_async(budget_flow.delete_template(user_id, template.id))
            st.rerun()


def render_yearly_page(yearly_flow: YearlyFlow, user_id: str, year: int):
    st.title(f"📊 {year} Summary")

    if st.button("🔄 Refresh summary", type="primary"):
        run_async(yearly_flow.refresh_yearly_summary(user_id, year))

    try:
        summary = run_async(yearly_flow.get_yearly_summary(user_id, year))
    except NotFoundError:
        st.info("No summary for this year yet. Press refresh to build it.")
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Income", format_money(summary.yearly_income_total))
    col2.metric("Expenses", format_money(summary.yearly_expenses_total))
    col3.metric("Savings", format_money(summary.yearly_savings_total))

    col1, col2, col3 = st.columns(3)
    col1.metric("Average income", format_money(summary.yearly_average_income))
    col2.metric("Average expenses", format_money(summary.yearly_average_expense))
    col3.metric("Peak net worth", format_money(summary.net_worth_summary.yearly_high))

    st.dataframe(
        {
            "Month": [m.abbreviation for m in Month],
            "Income": [float(v) for v in summary.monthly_income],
            "Expenses": [float(v) for v in summary.monthly_expenses],
            "Savings": [float(v) for v in summary.monthly_savings],
            "Net worth": [float(v) for v in summary.net_worth_summary.monthly_net_worth],
        },
        use_container_width=True,
    )


def render_accounts_page(account_flow: AccountFlow, user_id: str, year: int):
    st.title("🏦 Accounts")

    with st.form("new_account", clear_on_submit=True):
        name = st.text_input("Account name")
        pin_year = st.checkbox(f"Only count this account in {year}")
        if st.form_submit_button("➕ Add account"):
            try:
                run_async(account_flow.create_account(user_id, name, year=year if pin_year else None))
                st.rerun()
            except BudgetEditError as e:
                st.error(str(e))

    for account in run_async(account_flow.list_accounts(user_id, year)):
        with st.expander(f"{account.name} | {format_money(account.current_value)}"):
            columns = st.columns(6)
            for month in Month:
                column = columns[month.index % 6]
                value = column.number_input(
                    month.abbreviation,
                    value=float(account.value_for(month)),
                    key=f"acct-{account.id}-{month.value}",
                )
                if Decimal(str(value)) != account.value_for(month):
                    run_async(account_flow.update_month_value(user_id, account.id, int(month), str(value)))
                    st.rerun()
            if st.button("🗑️ Delete account", key=f"rm-acct-{account.id}"):
                run_async(account_flow.delete_account(user_id, account.id))
                st.rerun()


def render_export_page(yearly_flow: YearlyFlow, user_id: str, year: int):
    st.title("📦 Export")
    st.markdown(
        "Download the year as seven CSV files (dates, income types, sections, "
        "incomes, expense lines and account totals) for Power BI or Excel."
    )

    filename, data = run_async(yearly_flow.export_year_archive(user_id, year))
    st.download_button(
        "⬇️ Download export",
        data=data,
        file_name=filename,
        mime="application/zip",
        type="primary",
    )


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    app_settings = get_settings().app
    st.write(f"Storage backend: **{app_settings.storage_backend}**")

    status = validate_all_settings()

    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "Set `STORAGE_BACKEND=google_sheets` and the `GOOGLE_SHEETS_*` "
        "variables to keep your budgets in a spreadsheet."
    )


if __name__ == "__main__":
    main()
