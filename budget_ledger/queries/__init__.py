"""Aggregation engine package."""

from budget_ledger.queries.aggregations import AggregationEngine, is_savings
from budget_ledger.queries.goals import (
    GoalIdMatcher,
    GoalMatcher,
    LinkedOrTitleMatcher,
    TitleSubstringMatcher,
)

__all__ = [
    "AggregationEngine",
    "GoalIdMatcher",
    "GoalMatcher",
    "LinkedOrTitleMatcher",
    "TitleSubstringMatcher",
    "is_savings",
]
