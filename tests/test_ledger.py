"""
Tests for ledger operations

Test strategy:
1. Every operation against in-memory storage with a fixed clock
2. Rejections leave the document and storage untouched
3. Persistence failures keep the in-memory change and say so
"""

import json
import pytest
from datetime import date
from decimal import Decimal

from conftest import expense, income

from budget_ledger.ledger import STATE_CHANGED, LedgerOperations
from budget_ledger.models import (
    DEFAULT_EXPENSE_CATEGORIES,
    LOAN_PAYMENT_CATEGORY,
    SAVINGS_CATEGORY,
    AuditEventType,
    EntryDraft,
    EntryType,
    LedgerError,
)
from budget_ledger.services.storage import InMemoryStorage, StorageWriteError
from budget_ledger.store import DocumentStore
from budget_ledger.validation import EntryValidator


class BrokenWriteStorage(InMemoryStorage):
    def __init__(self):
        super().__init__()
        self.fail_writes = False

    def write(self, payload):
        if self.fail_writes:
            raise StorageWriteError("write refused")
        super().write(payload)


def add_loan(ledger, **overrides):
    data = {"name": "Car loan", "lender": "City Bank", "principal": 1000, "dueDate": "2024-12-31"}
    data.update(overrides)
    result = ledger.add_loan(data)
    assert result
    return result.entity_id


def add_goal(ledger, **overrides):
    data = {"title": "Vacation", "targetAmount": 1000, "targetDate": "2024-12-31"}
    data.update(overrides)
    result = ledger.add_goal(data)
    assert result
    return result.entity_id


class TestEntries:
    """Tests for adding, updating and deleting entries."""

    def test_add_entry(self, ledger, clock):
        """Test that an entry is stored under its month with bookkeeping."""
        result = ledger.add_entry(income(5000, "2024-03-10", description="March salary"))
        assert result
        assert result.changed
        assert result.error is None

        bucket = ledger.document.entries["2024-03"]
        assert len(bucket) == 1
        entry = bucket[0]
        assert entry.id == result.entity_id
        assert entry.type == EntryType.INCOME
        assert entry.amount == Decimal("5000")
        assert entry.created_at == clock.now
        assert entry.updated_at == clock.now

    def test_add_entry_persists(self, ledger, storage):
        """Test that the entry is in storage after the call."""
        result = ledger.add_entry(expense("120.75", "2024-03-11"))
        saved = json.loads(storage.read())
        assert saved["entries"]["2024-03"][0]["id"] == result.entity_id
        assert saved["entries"]["2024-03"][0]["amount"] == 120.75

    def test_add_entry_accepts_model(self, ledger):
        """Test that a pydantic draft works as input."""
        draft = EntryDraft(type="expense", amount=40, category="Fuel", date=date(2024, 2, 29))
        assert ledger.add_entry(draft)
        assert "2024-02" in ledger.document.entries

    def test_add_entry_rejects_non_positive_amount(self, ledger, storage):
        """Test that zero and negative amounts are rejected without writing."""
        ledger.document  # load
        writes = storage.write_count

        for amount in (0, -10):
            result = ledger.add_entry(expense(amount, "2024-03-11"))
            assert not result
            assert result.error == LedgerError.VALIDATION_FAILED
            assert "amount" in result.message

        assert ledger.document.entries == {}
        assert storage.write_count == writes

    def test_add_entry_rejects_unknown_expense_category(self, ledger):
        """Test that expenses must use a configured category."""
        result = ledger.add_entry(expense(10, "2024-03-11", category="Yacht fuel"))
        assert not result
        assert result.error == LedgerError.VALIDATION_FAILED
        assert "Unknown expense category" in result.message

    def test_category_check_ignores_case(self, ledger):
        """Test that category matching is case-insensitive."""
        assert ledger.add_entry(expense(10, "2024-03-11", category="fuel"))

    def test_category_stored_with_configured_spelling(self, ledger):
        """Test that a category typed in another case is stored as configured."""
        ledger.add_entry(expense(10, "2024-03-11", category="groceries / food"))
        ledger.add_entry(expense(20, "2024-03-12", category="SAVINGS"))
        categories = [e.category for e in ledger.document.entries["2024-03"]]
        assert categories == ["Groceries / Food", "Savings"]

    def test_update_stores_configured_spelling(self, ledger):
        """Test that an updated category is respelled as configured."""
        entry_id = ledger.add_entry(expense(100, "2024-03-10")).entity_id
        assert ledger.update_entry(entry_id, {"category": "fuel"})
        assert ledger.document.entries["2024-03"][0].category == "Fuel"

    def test_income_category_keeps_spelling(self, ledger):
        """Test that income categories are stored as typed."""
        ledger.add_entry(income(10, "2024-03-11", category="savings"))
        assert ledger.document.entries["2024-03"][0].category == "savings"

    def test_income_category_is_free_text(self, ledger):
        """Test that income categories are not checked."""
        assert ledger.add_entry(income(10, "2024-03-11", category="Freelance"))

    def test_category_check_can_be_disabled(self, store, clock):
        """Test that unknown categories pass when enforcement is off."""
        ledger = LedgerOperations(store, clock=clock, entry_validator=EntryValidator(False))
        assert ledger.add_entry(expense(10, "2024-03-11", category="Yacht fuel"))

    def test_update_entry_does_not_rebucket(self, ledger, clock):
        """Test that moving the date keeps the entry in its original bucket."""
        entry_id = ledger.add_entry(expense(100, "2024-03-10")).entity_id
        clock.advance(minutes=5)

        result = ledger.update_entry(entry_id, {"date": "2024-04-02", "amount": 150})
        assert result

        assert "2024-04" not in ledger.document.entries
        entry = ledger.document.entries["2024-03"][0]
        assert entry.date == date(2024, 4, 2)
        assert entry.amount == Decimal("150")
        assert entry.updated_at == clock.now
        assert entry.created_at < entry.updated_at
        assert entry.id == entry_id

    def test_update_entry_not_found(self, ledger):
        """Test that updating a missing entry reports not_found."""
        result = ledger.update_entry("nope", {"amount": 1})
        assert not result
        assert result.error == LedgerError.NOT_FOUND

    def test_update_entry_rejects_invalid_values(self, ledger):
        """Test that a bad patch leaves the entry unchanged."""
        entry_id = ledger.add_entry(expense(100, "2024-03-10")).entity_id
        result = ledger.update_entry(entry_id, {"amount": -1})
        assert result.error == LedgerError.VALIDATION_FAILED
        assert ledger.document.entries["2024-03"][0].amount == Decimal("100")

    def test_update_entry_rejects_identity_change(self, ledger):
        """Test that the id cannot be overwritten."""
        entry_id = ledger.add_entry(expense(100, "2024-03-10")).entity_id
        result = ledger.update_entry(entry_id, {"id": "other"})
        assert result.error == LedgerError.VALIDATION_FAILED
        assert ledger.document.entries["2024-03"][0].id == entry_id

    def test_update_entry_rechecks_category(self, ledger):
        """Test that switching to an unknown category is rejected."""
        entry_id = ledger.add_entry(expense(100, "2024-03-10")).entity_id
        result = ledger.update_entry(entry_id, {"category": "Yacht fuel"})
        assert result.error == LedgerError.VALIDATION_FAILED

    def test_delete_entry(self, ledger):
        """Test that an entry can be deleted."""
        entry_id = ledger.add_entry(expense(100, "2024-03-10")).entity_id
        assert ledger.delete_entry(entry_id)
        assert ledger.document.find_entry(entry_id) is None

    def test_delete_entry_not_found(self, ledger):
        """Test that deleting a missing entry reports not_found."""
        result = ledger.delete_entry("nope")
        assert result.error == LedgerError.NOT_FOUND
        assert result.changed is False


class TestSavings:
    """Tests for savings shortcuts."""

    def test_add_savings(self, ledger):
        """Test that savings are expenses in the Savings category."""
        result = ledger.add_savings(500, "Emergency fund", "2024-03-05")
        assert result
        entry = ledger.document.entries["2024-03"][0]
        assert entry.type == EntryType.EXPENSE
        assert entry.category == SAVINGS_CATEGORY
        assert entry.description == "Emergency fund"
        assert entry.goal_id is None

    def test_add_savings_to_goal(self, ledger):
        """Test that goal savings are linked by id."""
        goal_id = add_goal(ledger, title="New bike")
        result = ledger.add_savings_to_goal(goal_id, 250, "2024-03-05", note="birthday money")
        assert result
        entry = ledger.document.entries["2024-03"][0]
        assert entry.goal_id == goal_id
        assert entry.description == "Savings for goal: New bike"
        assert entry.note == "birthday money"

    def test_add_savings_to_missing_goal(self, ledger):
        """Test that saving for a missing goal is rejected."""
        result = ledger.add_savings_to_goal("nope", 250, "2024-03-05")
        assert result.error == LedgerError.NOT_FOUND
        assert ledger.document.entries == {}


class TestLoans:
    """Tests for loans and loan payments."""

    def test_add_loan(self, ledger, clock):
        """Test that a loan is stored with bookkeeping."""
        loan_id = add_loan(ledger)
        loan = ledger.document.loans[0]
        assert loan.id == loan_id
        assert loan.paid_amount == Decimal("0")
        assert loan.due_date == date(2024, 12, 31)
        assert loan.created_at == clock.now

    def test_add_loan_rejects_zero_principal(self, ledger):
        """Test that principal must be positive."""
        result = ledger.add_loan({"name": "Nothing", "principal": 0})
        assert result.error == LedgerError.VALIDATION_FAILED
        assert ledger.document.loans == []

    def test_update_loan_allows_overpayment(self, ledger):
        """Test that a direct update does not check paid against principal."""
        loan_id = add_loan(ledger)
        assert ledger.update_loan(loan_id, {"paidAmount": 1500})
        assert ledger.document.loans[0].paid_amount == Decimal("1500")

    def test_delete_loan(self, ledger):
        """Test deleting a loan and deleting it again."""
        loan_id = add_loan(ledger)
        assert ledger.delete_loan(loan_id)
        assert ledger.delete_loan(loan_id).error == LedgerError.NOT_FOUND

    def test_loan_payment_records_expense(self, ledger):
        """Test that a payment updates the loan and books an expense."""
        loan_id = add_loan(ledger)
        result = ledger.add_loan_payment(loan_id, 400, "2024-03-20")
        assert result

        assert ledger.document.loans[0].paid_amount == Decimal("400")
        entry = ledger.document.entries["2024-03"][0]
        assert entry.id == result.details["entry_id"]
        assert entry.category == LOAN_PAYMENT_CATEGORY
        assert entry.description == "Payment for Car loan"
        assert entry.note == "Loan payment to City Bank."

    def test_loan_payment_note_without_lender(self, ledger):
        """Test the payment note for a loan with no lender."""
        loan_id = add_loan(ledger, lender=None)
        ledger.add_loan_payment(loan_id, 100, "2024-03-20", notes="early")
        assert ledger.document.entries["2024-03"][0].note == "Loan payment to lender. early"

    def test_loan_payment_without_expense(self, ledger):
        """Test that the expense entry is optional."""
        loan_id = add_loan(ledger)
        result = ledger.add_loan_payment(loan_id, 400, "2024-03-20", record_expense=False)
        assert result
        assert "entry_id" not in result.details
        assert ledger.document.entries == {}

    def test_loan_payment_exceeding_balance(self, ledger, storage):
        """Test that overpaying is rejected and nothing changes."""
        loan_id = add_loan(ledger)
        ledger.add_loan_payment(loan_id, 400, "2024-03-20")
        writes = storage.write_count

        result = ledger.add_loan_payment(loan_id, 700, "2024-03-21")
        assert not result
        assert result.error == LedgerError.PAYMENT_EXCEEDS_BALANCE
        assert result.message == "Payment amount exceeds remaining balance"
        assert ledger.document.loans[0].paid_amount == Decimal("400")
        assert len(ledger.document.entries["2024-03"]) == 1
        assert storage.write_count == writes

    def test_loan_payment_exact_balance(self, ledger):
        """Test that paying off the exact remainder is allowed."""
        loan_id = add_loan(ledger)
        assert ledger.add_loan_payment(loan_id, 1000, "2024-03-20")
        assert ledger.document.loans[0].paid_amount == Decimal("1000")

    def test_loan_payment_missing_loan(self, ledger):
        """Test that paying a missing loan is rejected."""
        assert ledger.add_loan_payment("nope", 10, "2024-03-20").error == LedgerError.NOT_FOUND


class TestGoals:
    """Tests for goals."""

    def test_add_and_update_goal(self, ledger, clock):
        """Test creating and editing a goal."""
        goal_id = add_goal(ledger)
        clock.advance(days=1)
        assert ledger.update_goal(goal_id, {"targetAmount": 2000})
        goal = ledger.document.goals[0]
        assert goal.target_amount == Decimal("2000")
        assert goal.updated_at == clock.now

    def test_delete_goal(self, ledger):
        """Test deleting a goal."""
        goal_id = add_goal(ledger)
        assert ledger.delete_goal(goal_id)
        assert ledger.document.goals == []

    def test_update_missing_goal(self, ledger):
        """Test updating a goal that does not exist."""
        assert ledger.update_goal("nope", {"title": "x"}).error == LedgerError.NOT_FOUND


class TestCategories:
    """Tests for custom categories."""

    def test_add_custom_category(self, ledger):
        """Test that a new category is appended."""
        assert ledger.add_custom_category("Pets")
        assert ledger.document.settings.expense_categories[-1] == "Pets"

    def test_duplicate_category_is_noop(self, ledger, storage):
        """Test that adding an existing name (any case) changes nothing."""
        ledger.add_custom_category("Pets")
        writes = storage.write_count
        before = list(ledger.document.settings.expense_categories)

        result = ledger.add_custom_category("pets")
        assert result
        assert result.changed is False
        assert ledger.document.settings.expense_categories == before
        assert storage.write_count == writes

    def test_blank_category_rejected(self, ledger):
        """Test that an empty name is a validation failure."""
        assert ledger.add_custom_category("   ").error == LedgerError.VALIDATION_FAILED

    def test_default_category_is_protected(self, ledger):
        """Test that default categories cannot be removed."""
        result = ledger.remove_custom_category("Groceries / Food")
        assert not result
        assert result.error == LedgerError.PROTECTED_CATEGORY
        assert ledger.document.settings.expense_categories == list(DEFAULT_EXPENSE_CATEGORIES)

    def test_remove_custom_category(self, ledger):
        """Test removing a custom category."""
        ledger.add_custom_category("Pets")
        assert ledger.remove_custom_category("Pets")
        assert "Pets" not in ledger.document.settings.expense_categories

    def test_remove_missing_category(self, ledger):
        """Test removing a category that was never added."""
        assert ledger.remove_custom_category("Pets").error == LedgerError.NOT_FOUND

    def test_default_category_protected_in_any_case(self, ledger):
        """Test that a default category typed in another case is still protected."""
        result = ledger.remove_custom_category("groceries / food")
        assert result.error == LedgerError.PROTECTED_CATEGORY
        assert ledger.document.settings.expense_categories == list(DEFAULT_EXPENSE_CATEGORIES)

    def test_remove_custom_category_ignores_case(self, ledger):
        """Test that a custom category can be removed by any spelling."""
        ledger.add_custom_category("Pets")
        result = ledger.remove_custom_category("pets")
        assert result
        assert result.entity_id == "Pets"
        assert "Pets" not in ledger.document.settings.expense_categories


class TestNotifications:
    """Tests for events and audit records."""

    def test_state_changed_published(self, ledger, events):
        """Test that every mutation publishes STATE_CHANGED."""
        seen = []
        events.subscribe(STATE_CHANGED, seen.append)

        entry_id = ledger.add_entry(expense(100, "2024-03-10")).entity_id
        ledger.delete_entry(entry_id)

        assert [event.payload["action"] for event in seen] == ["add_entry", "delete_entry"]
        assert all(event.payload["persisted"] for event in seen)

    def test_rejection_publishes_nothing(self, ledger, events):
        """Test that rejected operations do not notify."""
        seen = []
        events.subscribe(STATE_CHANGED, seen.append)
        ledger.delete_entry("nope")
        assert seen == []

    def test_failing_handler_does_not_block_write(self, ledger, events):
        """Test that a broken subscriber does not break the operation."""
        def broken(event):
            raise RuntimeError("redraw failed")

        seen = []
        events.subscribe(STATE_CHANGED, broken)
        events.subscribe(STATE_CHANGED, seen.append)

        assert ledger.add_entry(expense(100, "2024-03-10"))
        assert len(seen) == 1

    def test_changes_are_audited(self, ledger, audit_logger):
        """Test that successful writes and rejections are audited."""
        ledger.add_entry(expense(100, "2024-03-10"))
        ledger.delete_entry("nope")
        assert audit_logger.events_of_type(AuditEventType.ENTRY_ADDED)
        assert audit_logger.events_of_type(AuditEventType.OPERATION_REJECTED)


class TestPersistenceFailure:
    """Tests for writes that cannot be saved."""

    def test_failed_save_keeps_memory(self, clock, events):
        """Test that the change stays in memory and the result says so."""
        storage = BrokenWriteStorage()
        ledger = LedgerOperations(DocumentStore(storage, clock=clock), events=events, clock=clock)
        ledger.document  # load and persist the default

        seen = []
        events.subscribe(STATE_CHANGED, seen.append)
        storage.fail_writes = True

        result = ledger.add_entry(income(5000, "2024-03-10"))
        assert not result
        assert result.error == LedgerError.PERSISTENCE_FAILED
        assert result.changed is True
        assert result.entity_id is not None
        assert len(ledger.document.entries["2024-03"]) == 1
        assert "2024-03" not in json.loads(storage.read())["entries"]
        assert seen[0].payload["persisted"] is False

    def test_next_save_catches_up(self, clock):
        """Test that a later successful save writes the earlier change too."""
        storage = BrokenWriteStorage()
        ledger = LedgerOperations(DocumentStore(storage, clock=clock), clock=clock)
        ledger.document

        storage.fail_writes = True
        ledger.add_entry(income(5000, "2024-03-10"))
        storage.fail_writes = False
        assert ledger.add_entry(income(100, "2024-03-11"))

        assert len(json.loads(storage.read())["entries"]["2024-03"]) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
