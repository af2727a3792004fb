"""
Budget Tracker - Source Package

Monthly projected vs. actual budgeting with yearly roll-ups,
net-worth tracking and a star-schema export for analysis tools.

DESIGN PRINCIPLES:
1. Derived figures are always recomputed, never typed in
2. Missing data counts as zero, never as an error
3. Transaction detail supersedes manually entered actuals
4. Core calculations are pure; only the flows touch storage
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Budget Tracker Team"
