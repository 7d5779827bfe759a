"""
Couple Finance - Source Package

Shared household finances for a two-person couple: transactions,
recurring expenses and incomes, savings goals and debt settlements,
summarized month by month.

DESIGN PRINCIPLES:
1. Aggregation is pure: same records in, same numbers out
2. Fail early, fail visibly
3. No silent corrections
4. Every write must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Couple Finance Team"
