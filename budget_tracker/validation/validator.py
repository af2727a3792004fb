"""
Transaction Input Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Description present and non-blank
- Amount parseable as a decimal and greater than zero
- Date present and a real calendar date
Any failure here is an error and the transaction is rejected.

STAGE 2 - SEMANTIC VALIDATION:
- Dates far in the future
Findings here are warnings; the transaction is still accepted.

IMPORTANT: Validation NEVER silently fixes issues, and a rejected
transaction never leaves a partial change behind.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import structlog

from budget_tracker.models.budget import ExpenseTransaction
from budget_tracker.models.validation import ValidationIssue, ValidationResult


logger = structlog.get_logger()


class TransactionValidationError(Exception):
    """Transaction input was rejected before any change was made."""
    
    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        messages = "; ".join(issue.message for issue in issues if issue.severity == "error")
        super().__init__(messages or "Invalid transaction")


class TransactionValidator:
    """
    Validates raw transaction input coming from the UI.
    
    Stage 1: Schema validation (always)
    Stage 2: Semantic validation (only when stage 1 passed)
    """
    
    def __init__(
        self,
        future_date_tolerance_days: Optional[int] = None,
        today: Optional[date] = None,
    ):
        """
        Initialize validator.
        
        Args:
            future_date_tolerance_days: Warn about dates more than this many
                                        days ahead. None disables the check.
            today: Reference date for the future-date check (defaults to
                   the current date).
        """
        self._tolerance_days = future_date_tolerance_days
        self._today = today
    
    def _validate_schema(
        self,
        description: Any,
        amount: Any,
        txn_date: Any,
    ) -> tuple[bool, list[ValidationIssue], dict]:
        """
        Stage 1: Schema validation.
        
        Returns: (is_valid, list_of_issues, parsed_values)
        """
        issues = []
        parsed = {}
        
        text = description.strip() if isinstance(description, str) else ""
        if not text:
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
                severity="error",
                suggested_fix="Describe what the money was spent on",
            ))
        else:
            parsed["description"] = text
        
        value = _parse_amount(amount)
        if value is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing" if amount in (None, "") else "invalid_format",
                message="Amount must be a number",
                severity="error",
            ))
        elif value <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Enter the amount spent as a positive number",
            ))
        else:
            parsed["amount"] = value
        
        day = _parse_date(txn_date)
        if day is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing" if txn_date in (None, "") else "invalid_format",
                message="A valid date is required",
                severity="error",
                suggested_fix="Use a calendar date such as 2024-03-15",
            ))
        else:
            parsed["date"] = day
        
        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues, parsed
    
    def _validate_semantic(self, parsed: dict) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.
        
        Returns: (is_valid, list_of_issues)
        """
        issues = []
        
        if self._tolerance_days is not None:
            today = self._today or date.today()
            latest = today + timedelta(days=self._tolerance_days)
            if parsed["date"] > latest:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message=f"Transaction date ({parsed['date']}) is in the future",
                    severity="warning",
                    suggested_fix="Please verify the date is correct",
                ))
        
        return True, issues
    
    def validate(self, description: Any, amount: Any, txn_date: Any) -> ValidationResult:
        """Run both stages; stage 2 is skipped when stage 1 fails."""
        schema_valid, issues, parsed = self._validate_schema(description, amount, txn_date)
        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(parsed)
            issues.extend(semantic_issues)
        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            issues=issues,
        )
    
    def build_transaction(
        self,
        description: Any,
        amount: Any,
        txn_date: Any,
    ) -> ExpenseTransaction:
        """
        Validate input and create the transaction.
        
        Raises:
            TransactionValidationError: If any error-level issue was found
        """
        schema_valid, issues, parsed = self._validate_schema(description, amount, txn_date)
        if not schema_valid:
            logger.info(
                "transaction_rejected",
                issues=[issue.issue_type for issue in issues],
            )
            raise TransactionValidationError(issues)
        
        _, warnings = self._validate_semantic(parsed)
        for issue in warnings:
            logger.warning("transaction_warning", field=issue.field, message=issue.message)
        
        return ExpenseTransaction(
            description=parsed["description"],
            amount=parsed["amount"],
            date=parsed["date"],
        )


def _parse_amount(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not amount.is_finite():
        return None
    return amount


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None
