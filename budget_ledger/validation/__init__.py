"""Validation package."""

from budget_ledger.validation.validator import (
    REQUIRED_DOCUMENT_FIELDS,
    DocumentFormatError,
    DocumentValidator,
    EntryValidator,
    describe_validation_error,
)

__all__ = [
    "REQUIRED_DOCUMENT_FIELDS",
    "DocumentFormatError",
    "DocumentValidator",
    "EntryValidator",
    "describe_validation_error",
]
