"""Ledger operations and change notification."""

from budget_ledger.ledger.events import (
    DOCUMENT_RELOADED,
    STATE_CHANGED,
    ChangeEvent,
    EventBus,
)
from budget_ledger.ledger.operations import LedgerOperations

__all__ = [
    "DOCUMENT_RELOADED",
    "STATE_CHANGED",
    "ChangeEvent",
    "EventBus",
    "LedgerOperations",
]
