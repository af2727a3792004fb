"""
Transaction Reconciliation

An expense item's actual cost can come from two places: the legacy
actual_cost figure typed in by hand, and the itemized transactions.
The effective actual cost is the larger of the two, never their sum.

Everything that shows or aggregates an actual cost (subtotals, the
yearly summary, the export) goes through effective_actual_cost().
"""

from decimal import Decimal
from typing import Any, Optional

import structlog

from budget_tracker.models.budget import ExpenseItem, ExpenseTransaction
from budget_tracker.validation.validator import TransactionValidator


logger = structlog.get_logger()


def effective_actual_cost(item: ExpenseItem) -> Decimal:
    """max(actual_cost, sum of transaction amounts)."""
    return max(item.actual_cost, item.transaction_total)


# Public name used by the flows and the UI
reconcile_item_actual_cost = effective_actual_cost


def add_transaction(
    item: ExpenseItem,
    description: Any,
    amount: Any,
    txn_date: Any,
    validator: Optional[TransactionValidator] = None,
) -> ExpenseItem:
    """
    Return a copy of item with one more transaction.
    
    Raises:
        TransactionValidationError: On a blank description, a non-positive
            or unparseable amount, or a missing/invalid date. The input
            item is untouched.
    """
    validator = validator or TransactionValidator()
    transaction = validator.build_transaction(description, amount, txn_date)
    
    updated = item.model_copy(deep=True)
    updated.transactions.append(transaction)
    
    logger.info(
        "transaction_added",
        sub_category=item.sub_category,
        transaction_id=transaction.id,
        amount=str(transaction.amount),
    )
    return updated


def delete_transaction(item: ExpenseItem, transaction_id: str) -> ExpenseItem:
    """
    Return a copy of item without the transaction with this id.
    
    Only the first match is removed. An unknown id is a no-op.
    """
    updated = item.model_copy(deep=True)
    for position, transaction in enumerate(updated.transactions):
        if transaction.id == transaction_id:
            del updated.transactions[position]
            logger.info(
                "transaction_deleted",
                sub_category=item.sub_category,
                transaction_id=transaction_id,
            )
            break
    return updated


def transactions_newest_first(item: ExpenseItem) -> list[ExpenseTransaction]:
    """Transactions ordered for display: latest date first, then latest entry."""
    return sorted(
        item.transactions,
        key=lambda t: (t.date, t.created_at),
        reverse=True,
    )
