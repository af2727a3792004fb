"""Yearly aggregation package."""

from budget_tracker.aggregation.yearly import aggregate_year

__all__ = ["aggregate_year"]
