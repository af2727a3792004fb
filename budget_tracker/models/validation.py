"""
Validation Models

ValidationIssue/ValidationResult describe rejected user input.
IntegrityWarning describes a data-shape hazard that is reported but
never blocks anything.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation issue found."""
    
    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.
    
    Stage 1: Schema validation (presence, parseable values)
    Stage 2: Semantic validation (plausibility checks, warnings only)
    """
    
    schema_valid: bool
    semantic_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    
    @property
    def is_valid(self) -> bool:
        return self.schema_valid and not self.has_errors
    
    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)
    
    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]


class IntegrityWarning(BaseModel):
    """
    The projected and actual expense trees of a budget disagree.
    
    Aggregation and export keep working (lookups are by name and an
    unmatched side counts as zero), so this is surfaced, not raised.
    """
    
    issue_type: str = Field(
        ...,
        pattern="^(missing_category|missing_item|category_order|item_order)$",
    )
    category: str
    sub_category: Optional[str] = None
    missing_from: Optional[str] = Field(
        default=None,
        pattern="^(projected|actual)$",
        description="Which tree lacks the entry (for missing_* issues)"
    )
    message: str
