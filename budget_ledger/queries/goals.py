"""
Goal Matching

Goals are not a stored foreign key on older entries: savings used to be
linked to a goal by finding the goal's title inside the entry's description
or note. New savings made for a goal carry goal_id.

Matching sits behind GoalMatcher so the text fallback can be dropped
once old data no longer needs it.
"""

from abc import ABC, abstractmethod

from budget_ledger.models.document import Entry, Goal


class GoalMatcher(ABC):
    """Decides whether a savings entry counts toward a goal."""

    @abstractmethod
    def matches(self, entry: Entry, goal: Goal) -> bool:
        pass


class TitleSubstringMatcher(GoalMatcher):
    """
    Legacy rule: the goal title appears, ignoring case, in the entry's
    description or note. An empty title matches nothing.
    """

    def matches(self, entry: Entry, goal: Goal) -> bool:
        title = goal.title.strip().lower()
        if not title:
            return False
        description = (entry.description or "").lower()
        note = (entry.note or "").lower()
        return title in description or title in note


class GoalIdMatcher(GoalMatcher):
    """Only entries explicitly linked to the goal."""

    def matches(self, entry: Entry, goal: Goal) -> bool:
        return entry.goal_id is not None and entry.goal_id == goal.id


class LinkedOrTitleMatcher(GoalMatcher):
    """
    Default rule: linked entries count for their goal only; unlinked
    entries fall back to the title match.
    """

    def __init__(self):
        self._by_id = GoalIdMatcher()
        self._by_title = TitleSubstringMatcher()

    def matches(self, entry: Entry, goal: Goal) -> bool:
        if entry.goal_id is not None:
            return self._by_id.matches(entry, goal)
        return self._by_title.matches(entry, goal)
