"""
Document Store

Owns the canonical BudgetDocument and its durable representation.

GUARANTEES:
- load() never raises: the caller always gets a usable document
- Corrupt data is logged, reported, discarded and replaced by a default
- A failed save keeps the in-memory document; memory and disk stay out
  of sync until the next successful save
"""

import json
from typing import Optional

from budget_ledger.audit import AuditLogger
from budget_ledger.models.document import BudgetDocument, Clock, utc_now
from budget_ledger.models.results import (
    LedgerError,
    LoadResult,
    LoadStatus,
    OperationResult,
)
from budget_ledger.services.storage import (
    DocumentStorageInterface,
    StorageError,
    StorageQuotaExceededError,
)
from budget_ledger.validation import DocumentFormatError, DocumentValidator

CORRUPTION_WARNING = "Storage corrupted, resetting to default"
UNAVAILABLE_WARNING = "Saved data could not be read; starting with an empty budget"


class DocumentStore:
    """
    Load/save/reset for the single persisted document.

    The store holds the current document; ledger operations mutate it
    in place and then call save().
    """

    def __init__(
        self,
        storage: DocumentStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        clock: Clock = utc_now,
        currency_locale: str = "en-IN",
        validator: Optional[DocumentValidator] = None,
    ):
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._clock = clock
        self._currency_locale = currency_locale
        self._validator = validator or DocumentValidator()
        self._document: Optional[BudgetDocument] = None

    @property
    def document(self) -> BudgetDocument:
        """The current document, loading it on first access."""
        if self._document is None:
            self.load()
        return self._document

    @property
    def is_loaded(self) -> bool:
        return self._document is not None

    def _fresh_document(self) -> BudgetDocument:
        return BudgetDocument.create_default(
            currency_locale=self._currency_locale,
            now=self._clock(),
        )

    def load(self) -> LoadResult:
        """
        Read the persisted document.

        - Nothing stored: create a default and persist it.
        - Stored but invalid: log, warn, persist a default over it.
        - Storage unreadable: warn and use a default without persisting,
          so the unreadable data is not overwritten.
        """
        try:
            raw = self._storage.read()
        except StorageError as e:
            self._audit.log_document_unavailable(str(e))
            self._document = self._fresh_document()
            return LoadResult(
                document=self._document,
                status=LoadStatus.UNAVAILABLE,
                warning=UNAVAILABLE_WARNING,
                persisted=False,
            )

        if raw is None:
            self._document = self._fresh_document()
            self._audit.log_document_created("first run")
            saved = self.save(self._document)
            return LoadResult(
                document=self._document,
                status=LoadStatus.CREATED,
                persisted=saved.success,
            )

        try:
            document = self._validator.parse(raw)
        except DocumentFormatError as e:
            self._audit.log_document_corrupted(str(e))
            self._document = self._fresh_document()
            self._audit.log_document_created("corruption recovery")
            saved = self.save(self._document)
            return LoadResult(
                document=self._document,
                status=LoadStatus.RECOVERED,
                warning=CORRUPTION_WARNING,
                persisted=saved.success,
            )

        self._document = document
        self._audit.log_document_loaded(
            entry_count=len(document.all_entries()),
            bucket_count=len(document.entries),
        )
        return LoadResult(document=document, status=LoadStatus.LOADED)

    def save(self, document: Optional[BudgetDocument] = None) -> OperationResult:
        """
        Stamp meta.last_updated, serialize and write.

        Saving a document other than the current one makes it current.
        """
        if document is None:
            document = self.document
        self._document = document

        document.meta.last_updated = self._clock()
        payload = json.dumps(document.to_json_dict(), ensure_ascii=False)

        try:
            self._storage.write(payload)
        except StorageQuotaExceededError as e:
            self._audit.log_save_failed(str(e))
            return OperationResult.fail(
                LedgerError.PERSISTENCE_FAILED,
                "Failed to save data: storage is full",
            )
        except StorageError as e:
            self._audit.log_save_failed(str(e))
            return OperationResult.fail(
                LedgerError.PERSISTENCE_FAILED,
                "Failed to save data",
            )

        self._audit.log_document_saved(len(payload.encode("utf-8")))
        return OperationResult.ok("Saved")

    def replace(self, document: BudgetDocument) -> OperationResult:
        """Make document the current one and persist it."""
        return self.save(document)

    def reset(self) -> OperationResult:
        """
        Clear persisted state entirely and forget the in-memory document.

        The next access to `document` (or an explicit load()) starts fresh.
        """
        try:
            self._storage.clear()
        except StorageError as e:
            self._audit.log_save_failed(str(e))
            return OperationResult.fail(
                LedgerError.PERSISTENCE_FAILED,
                "Failed to clear saved data",
            )

        self._document = None
        self._audit.log_document_reset()
        return OperationResult.ok("All data cleared")
