"""
Snapshot Import/Export

Moves the whole document in and out as JSON, in the same shape the
store persists. Backup files are named budget-backup-<YYYY-MM-DD>.json.

Import modes:
- replace: the imported document becomes the document
- merge: month buckets are unioned (entries appended), categories are
  unioned ignoring case, loans and goals are concatenated

KNOWN LIMITATION: merge does not detect duplicates. Importing the same
file twice doubles its entries, loans and goals.

An import that fails validation leaves the current document untouched.
"""

import json
from datetime import date
from enum import Enum
from typing import Optional, Union

from budget_ledger.audit import AuditLogger
from budget_ledger.ledger.events import DOCUMENT_RELOADED, EventBus
from budget_ledger.models.document import BudgetDocument
from budget_ledger.models.results import LedgerError, OperationResult
from budget_ledger.store import DocumentStore
from budget_ledger.validation import DocumentFormatError, DocumentValidator

BACKUP_FILENAME_TEMPLATE = "budget-backup-{date}.json"


class ImportMode(str, Enum):
    REPLACE = "replace"
    MERGE = "merge"


def backup_filename(on: Optional[date] = None) -> str:
    return BACKUP_FILENAME_TEMPLATE.format(date=(on or date.today()).isoformat())


class SnapshotTransfer:
    """Export and import of the whole budget document."""

    def __init__(
        self,
        store: DocumentStore,
        events: Optional[EventBus] = None,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[DocumentValidator] = None,
    ):
        self._store = store
        self._events = events or EventBus()
        self._audit = audit_logger or AuditLogger()
        self._validator = validator or DocumentValidator()

    def export_snapshot(self) -> dict:
        """The full document as a JSON-compatible dict."""
        document = self._store.document
        self._audit.log_snapshot_exported(len(document.all_entries()))
        return document.to_json_dict()

    def export_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.export_snapshot(), indent=indent, ensure_ascii=False)

    def import_snapshot(
        self,
        raw: Union[str, bytes, dict],
        mode: Union[ImportMode, str] = ImportMode.REPLACE,
    ) -> OperationResult:
        """
        Validate raw and apply it in the given mode, then persist.

        Returns a failed result with validation_failed if raw is not a
        budget document; the current document is not touched.
        """
        try:
            mode = ImportMode(mode)
        except ValueError:
            return OperationResult.fail(
                LedgerError.VALIDATION_FAILED,
                f"Unknown import mode: {mode}",
            )

        try:
            imported = self._validator.parse(raw)
        except DocumentFormatError as e:
            self._audit.log_import_rejected(str(e))
            return OperationResult.fail(
                LedgerError.VALIDATION_FAILED,
                f"Invalid file format or corrupted data: {e}",
            )

        if mode == ImportMode.MERGE:
            counts = self._merge_into(self._store.document, imported)
            saved = self._store.save()
        else:
            counts = {
                "entries": len(imported.all_entries()),
                "categories": len(imported.settings.expense_categories),
                "loans": len(imported.loans),
                "goals": len(imported.goals),
            }
            saved = self._store.replace(imported)

        self._events.publish(DOCUMENT_RELOADED, {
            "mode": mode.value,
            "persisted": saved.success,
            **counts,
        })

        if not saved:
            return OperationResult.fail(
                LedgerError.PERSISTENCE_FAILED,
                saved.message,
                changed=True,
            )

        self._audit.log_snapshot_imported(mode.value, counts)
        return OperationResult.ok("Data imported successfully", details=counts)

    @staticmethod
    def _merge_into(document: BudgetDocument, imported: BudgetDocument) -> dict[str, int]:
        """Fold imported into document. Returns how many items were added."""
        entry_count = 0
        for key, bucket in imported.entries.items():
            document.entries.setdefault(key, []).extend(bucket)
            entry_count += len(bucket)

        categories = document.settings.expense_categories
        seen = {name.lower() for name in categories}
        category_count = 0
        for name in imported.settings.expense_categories:
            if name.lower() not in seen:
                categories.append(name)
                seen.add(name.lower())
                category_count += 1

        document.loans.extend(imported.loans)
        document.goals.extend(imported.goals)

        return {
            "entries": entry_count,
            "categories": category_count,
            "loans": len(imported.loans),
            "goals": len(imported.goals),
        }
