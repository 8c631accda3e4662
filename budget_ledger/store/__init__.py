"""Document store package."""

from budget_ledger.store.document_store import (
    CORRUPTION_WARNING,
    UNAVAILABLE_WARNING,
    DocumentStore,
)

__all__ = ["CORRUPTION_WARNING", "UNAVAILABLE_WARNING", "DocumentStore"]
