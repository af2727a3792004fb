"""Budget calculation package."""

from budget_tracker.calculations.reconciler import (
    add_transaction,
    delete_transaction,
    effective_actual_cost,
    reconcile_item_actual_cost,
    transactions_newest_first,
)
from budget_tracker.calculations.totals import calculate_totals

__all__ = [
    "add_transaction",
    "calculate_totals",
    "delete_transaction",
    "effective_actual_cost",
    "reconcile_item_actual_cost",
    "transactions_newest_first",
]
