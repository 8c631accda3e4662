"""
Shared fixtures.

Everything runs against in-memory storage and a fixed clock, so no
test touches the real filesystem or depends on today's date.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from budget_ledger.audit import AuditLogger
from budget_ledger.ledger import EventBus, LedgerOperations
from budget_ledger.services.storage import InMemoryStorage
from budget_ledger.store import DocumentStore
from budget_ledger.transfer import SnapshotTransfer


class FixedClock:
    """A clock that returns a set time and only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def today():
    return date(2024, 3, 15)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def store(storage, audit_logger, clock):
    return DocumentStore(storage, audit_logger=audit_logger, clock=clock)


@pytest.fixture
def ledger(store, events, audit_logger, clock):
    return LedgerOperations(store, events=events, audit_logger=audit_logger, clock=clock)


@pytest.fixture
def transfer(store, events, audit_logger):
    return SnapshotTransfer(store, events=events, audit_logger=audit_logger)


def expense(amount, on, category="Groceries / Food", description="", **extra):
    return {
        "type": "expense",
        "amount": amount,
        "category": category,
        "description": description,
        "date": on,
        **extra,
    }


def income(amount, on, category="Salary", description="", **extra):
    return {
        "type": "income",
        "amount": amount,
        "category": category,
        "description": description,
        "date": on,
        **extra,
    }
