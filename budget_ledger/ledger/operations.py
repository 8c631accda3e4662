"""
Ledger Operations

The only code that mutates the budget document.

Every operation follows the same sequence:
1. Validate input (pydantic models, then business checks)
2. Mutate the in-memory document with id/timestamp bookkeeping
3. Persist the whole document through the store
4. Audit the change and publish STATE_CHANGED

Operations never raise into the caller. They return an OperationResult
that is falsy on failure and says why (not found, validation, persistence).

IMPORTANT: If the save fails, the in-memory change is kept. The result
reports persistence_failed with changed=True so the caller knows memory
is ahead of storage until the next successful save.
"""

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from budget_ledger.audit import AuditLogger
from budget_ledger.ledger.events import STATE_CHANGED, EventBus
from budget_ledger.models.audit import AuditEventType
from budget_ledger.models.document import (
    LOAN_PAYMENT_CATEGORY,
    SAVINGS_CATEGORY,
    BudgetDocument,
    Clock,
    Entry,
    EntryDraft,
    EntryType,
    EntryUpdate,
    Goal,
    GoalDraft,
    GoalUpdate,
    Loan,
    LoanDraft,
    LoanUpdate,
    is_default_category,
    utc_now,
)
from budget_ledger.models.months import month_key
from budget_ledger.models.results import LedgerError, OperationResult
from budget_ledger.store import DocumentStore
from budget_ledger.validation import EntryValidator, describe_validation_error

ModelT = TypeVar("ModelT", bound=BaseModel)
Payload = Union[BaseModel, Mapping]


class LedgerOperations:
    """
    Create/update/delete for entries, loans, goals and categories.

    Holds no document of its own: it always works on the store's
    current document, so an import that replaces the document is
    picked up immediately.
    """

    def __init__(
        self,
        store: DocumentStore,
        events: Optional[EventBus] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Clock = utc_now,
        entry_validator: Optional[EntryValidator] = None,
    ):
        self._store = store
        self._events = events or EventBus()
        self._audit = audit_logger or AuditLogger()
        self._clock = clock
        self._entry_validator = entry_validator or EntryValidator()

    @property
    def document(self) -> BudgetDocument:
        return self._store.document

    @property
    def events(self) -> EventBus:
        return self._events

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    def _coerce(self, model_cls: Type[ModelT], data: Payload) -> ModelT:
        """
        Validate data as model_cls. Model instances of another type are
        re-validated through their field values.

        Raises:
            ValidationError: If the data does not fit the model
        """
        if isinstance(data, BaseModel):
            data = {
                name: value
                for name, value in data.model_dump().items()
                if name in model_cls.model_fields
            }
        return model_cls.model_validate(data)

    def _reject(
        self,
        action: str,
        error: LedgerError,
        message: str,
        entity_id: Optional[str] = None,
    ) -> OperationResult:
        self._audit.log_operation_rejected(action, error.value, message, entity_id)
        return OperationResult.fail(error, message, entity_id=entity_id)

    def _invalid(self, action: str, error: ValidationError) -> OperationResult:
        return self._reject(
            action,
            LedgerError.VALIDATION_FAILED,
            describe_validation_error(error),
        )

    def _commit(
        self,
        action: str,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: Optional[str],
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> OperationResult:
        saved = self._store.save()

        if saved:
            self._audit.log_entity_changed(event_type, entity_type, entity_id, details)

        self._events.publish(STATE_CHANGED, {
            "action": action,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "persisted": saved.success,
        })

        if not saved:
            return OperationResult.fail(
                LedgerError.PERSISTENCE_FAILED,
                saved.message,
                entity_id=entity_id,
                changed=True,
            )
        return OperationResult.ok(message, entity_id=entity_id, details=details)

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    def add_entry(self, entry: Payload) -> OperationResult:
        """
        Add an income or expense entry.

        The entry gets a fresh id and created/updated timestamps and is
        appended to the bucket of its date's month.
        """
        try:
            draft = self._coerce(EntryDraft, entry)
        except ValidationError as e:
            return self._invalid("add_entry", e)

        issues = self._entry_validator.validate(draft, self.document.settings.expense_categories)
        if issues:
            return self._reject("add_entry", LedgerError.VALIDATION_FAILED, "; ".join(issues))
        draft = self._entry_validator.normalize(draft, self.document.settings.expense_categories)

        now = self._clock()
        new_entry = Entry(**draft.model_dump(), created_at=now, updated_at=now)
        key = month_key(new_entry.date)
        self.document.entries.setdefault(key, []).append(new_entry)

        return self._commit(
            "add_entry",
            AuditEventType.ENTRY_ADDED,
            "entry",
            new_entry.id,
            "Entry added successfully",
            {"month_key": key, "type": new_entry.type.value, "amount": str(new_entry.amount)},
        )

    def update_entry(self, entry_id: str, updates: Payload) -> OperationResult:
        """
        Merge updates into an existing entry.

        The entry stays in the bucket it was created in, even when
        its date moves to another month.
        """
        location = self.document.find_entry(entry_id)
        if location is None:
            return self._reject("update_entry", LedgerError.NOT_FOUND, "Entry not found", entry_id)
        key, index = location
        current = self.document.entries[key][index]

        try:
            patch = self._coerce(EntryUpdate, updates)
            changes = patch.model_dump(exclude_unset=True)
            merged = Entry.model_validate({
                **current.model_dump(),
                **changes,
                "updated_at": self._clock(),
            })
        except ValidationError as e:
            return self._invalid("update_entry", e)

        if "type" in changes or "category" in changes:
            issues = self._entry_validator.validate(merged, self.document.settings.expense_categories)
            if issues:
                return self._reject(
                    "update_entry", LedgerError.VALIDATION_FAILED, "; ".join(issues), entry_id
                )
            merged = self._entry_validator.normalize(merged, self.document.settings.expense_categories)

        self.document.entries[key][index] = merged

        return self._commit(
            "update_entry",
            AuditEventType.ENTRY_UPDATED,
            "entry",
            entry_id,
            "Entry updated successfully",
            {"month_key": key, "fields": sorted(changes)},
        )

    def delete_entry(self, entry_id: str) -> OperationResult:
        location = self.document.find_entry(entry_id)
        if location is None:
            return self._reject("delete_entry", LedgerError.NOT_FOUND, "Entry not found", entry_id)
        key, index = location
        del self.document.entries[key][index]

        return self._commit(
            "delete_entry",
            AuditEventType.ENTRY_DELETED,
            "entry",
            entry_id,
            "Entry deleted successfully",
            {"month_key": key},
        )

    # -------------------------------------------------------------------------
    # Savings
    # -------------------------------------------------------------------------

    def add_savings(
        self,
        amount: Union[Decimal, int, float, str],
        description: str,
        date: Union[date, str],
        note: str = "",
    ) -> OperationResult:
        """Record money put aside. Savings are expenses in the Savings category."""
        return self.add_entry({
            "type": EntryType.EXPENSE,
            "amount": amount,
            "category": SAVINGS_CATEGORY,
            "description": description,
            "date": date,
            "note": note or None,
        })

    def add_savings_to_goal(
        self,
        goal_id: str,
        amount: Union[Decimal, int, float, str],
        date: Union[date, str],
        note: str = "",
    ) -> OperationResult:
        """Record savings for a goal, linked to it by id."""
        index = self.document.find_goal(goal_id)
        if index is None:
            return self._reject("add_savings_to_goal", LedgerError.NOT_FOUND, "Goal not found", goal_id)
        goal = self.document.goals[index]

        return self.add_entry({
            "type": EntryType.EXPENSE,
            "amount": amount,
            "category": SAVINGS_CATEGORY,
            "description": f"Savings for goal: {goal.title}",
            "date": date,
            "note": note or None,
            "goal_id": goal.id,
        })

    # -------------------------------------------------------------------------
    # Loans
    # -------------------------------------------------------------------------

    def add_loan(self, loan: Payload) -> OperationResult:
        try:
            draft = self._coerce(LoanDraft, loan)
        except ValidationError as e:
            return self._invalid("add_loan", e)

        now = self._clock()
        new_loan = Loan(**draft.model_dump(), created_at=now, updated_at=now)
        self.document.loans.append(new_loan)

        return self._commit(
            "add_loan",
            AuditEventType.LOAN_ADDED,
            "loan",
            new_loan.id,
            "Loan added successfully",
            {"principal": str(new_loan.principal)},
        )

    def update_loan(self, loan_id: str, updates: Payload) -> OperationResult:
        """
        Merge updates into a loan.

        paid_amount is not checked against principal here; only
        add_loan_payment enforces that.
        """
        index = self.document.find_loan(loan_id)
        if index is None:
            return self._reject("update_loan", LedgerError.NOT_FOUND, "Loan not found", loan_id)

        try:
            changes = self._coerce(LoanUpdate, updates).model_dump(exclude_unset=True)
            merged = Loan.model_validate({
                **self.document.loans[index].model_dump(),
                **changes,
                "updated_at": self._clock(),
            })
        except ValidationError as e:
            return self._invalid("update_loan", e)

        self.document.loans[index] = merged

        return self._commit(
            "update_loan",
            AuditEventType.LOAN_UPDATED,
            "loan",
            loan_id,
            "Loan updated successfully",
            {"fields": sorted(changes)},
        )

    def delete_loan(self, loan_id: str) -> OperationResult:
        index = self.document.find_loan(loan_id)
        if index is None:
            return self._reject("delete_loan", LedgerError.NOT_FOUND, "Loan not found", loan_id)
        del self.document.loans[index]

        return self._commit(
            "delete_loan",
            AuditEventType.LOAN_DELETED,
            "loan",
            loan_id,
            "Loan deleted successfully",
        )

    def add_loan_payment(
        self,
        loan_id: str,
        amount: Union[Decimal, int, float, str],
        date: Union[date, str],
        notes: str = "",
        record_expense: bool = True,
    ) -> OperationResult:
        """
        Pay down a loan.

        Rejects payments that would take paid_amount above principal.
        Unless record_expense is False, the payment is also booked as an
        expense entry in the Loan Payment category. Both changes are
        saved in one write.
        """
        index = self.document.find_loan(loan_id)
        if index is None:
            return self._reject("add_loan_payment", LedgerError.NOT_FOUND, "Loan not found", loan_id)
        loan = self.document.loans[index]

        note = f"Loan payment to {loan.lender or 'lender'}. {notes}".strip()
        try:
            payment = EntryDraft.model_validate({
                "type": EntryType.EXPENSE,
                "amount": amount,
                "category": LOAN_PAYMENT_CATEGORY,
                "description": f"Payment for {loan.name}",
                "date": date,
                "note": note,
            })
        except ValidationError as e:
            return self._invalid("add_loan_payment", e)

        new_paid = loan.paid_amount + payment.amount
        if new_paid > loan.principal:
            return self._reject(
                "add_loan_payment",
                LedgerError.PAYMENT_EXCEEDS_BALANCE,
                "Payment amount exceeds remaining balance",
                loan_id,
            )

        now = self._clock()
        loan.paid_amount = new_paid
        loan.updated_at = now

        details: dict[str, Any] = {"amount": str(payment.amount), "paid_amount": str(new_paid)}
        if record_expense:
            entry = Entry(**payment.model_dump(), created_at=now, updated_at=now)
            self.document.entries.setdefault(month_key(entry.date), []).append(entry)
            details["entry_id"] = entry.id

        return self._commit(
            "add_loan_payment",
            AuditEventType.LOAN_PAYMENT_ADDED,
            "loan",
            loan_id,
            "Payment recorded successfully",
            details,
        )

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    def add_goal(self, goal: Payload) -> OperationResult:
        try:
            draft = self._coerce(GoalDraft, goal)
        except ValidationError as e:
            return self._invalid("add_goal", e)

        now = self._clock()
        new_goal = Goal(**draft.model_dump(), created_at=now, updated_at=now)
        self.document.goals.append(new_goal)

        return self._commit(
            "add_goal",
            AuditEventType.GOAL_ADDED,
            "goal",
            new_goal.id,
            "Goal added successfully",
            {"target_amount": str(new_goal.target_amount)},
        )

    def update_goal(self, goal_id: str, updates: Payload) -> OperationResult:
        index = self.document.find_goal(goal_id)
        if index is None:
            return self._reject("update_goal", LedgerError.NOT_FOUND, "Goal not found", goal_id)

        try:
            changes = self._coerce(GoalUpdate, updates).model_dump(exclude_unset=True)
            merged = Goal.model_validate({
                **self.document.goals[index].model_dump(),
                **changes,
                "updated_at": self._clock(),
            })
        except ValidationError as e:
            return self._invalid("update_goal", e)

        self.document.goals[index] = merged

        return self._commit(
            "update_goal",
            AuditEventType.GOAL_UPDATED,
            "goal",
            goal_id,
            "Goal updated successfully",
            {"fields": sorted(changes)},
        )

    def delete_goal(self, goal_id: str) -> OperationResult:
        index = self.document.find_goal(goal_id)
        if index is None:
            return self._reject("delete_goal", LedgerError.NOT_FOUND, "Goal not found", goal_id)
        del self.document.goals[index]

        return self._commit(
            "delete_goal",
            AuditEventType.GOAL_DELETED,
            "goal",
            goal_id,
            "Goal deleted successfully",
        )

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def add_custom_category(self, name: str) -> OperationResult:
        """
        Append a category unless one with the same name (ignoring case)
        exists. A duplicate is not an error; nothing changes.
        """
        name = (name or "").strip()
        if not name:
            return self._reject("add_custom_category", LedgerError.VALIDATION_FAILED, "Category name is required")

        categories = self.document.settings.expense_categories
        if any(existing.lower() == name.lower() for existing in categories):
            return OperationResult.ok("Category already exists", entity_id=name, changed=False)

        categories.append(name)
        return self._commit(
            "add_custom_category",
            AuditEventType.CATEGORY_ADDED,
            "category",
            name,
            "Category added successfully",
        )

    def remove_custom_category(self, name: str) -> OperationResult:
        """Remove a custom category. Default categories cannot be removed."""
        if is_default_category(name):
            return self._reject(
                "remove_custom_category",
                LedgerError.PROTECTED_CATEGORY,
                "Cannot remove default categories",
                name,
            )

        categories = self.document.settings.expense_categories
        folded = name.strip().lower()
        matches = [existing for existing in categories if existing.lower() == folded]
        if not matches:
            return self._reject("remove_custom_category", LedgerError.NOT_FOUND, "Category not found", name)

        name = matches[0]
        categories.remove(name)
        return self._commit(
            "remove_custom_category",
            AuditEventType.CATEGORY_REMOVED,
            "category",
            name,
            "Category removed successfully",
        )
