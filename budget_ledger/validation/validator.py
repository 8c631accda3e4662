"""
Document and Entry Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - STRUCTURE:
- The payload is a JSON object
- The required top-level fields (meta, settings, entries) are present
- This is what separates "corrupted" from "merely odd" data

STAGE 2 - SCHEMA:
- Every record parses into its pydantic model
- Month bucket keys are well formed
- Amounts are positive, dates are real dates

Both the store (on load) and the importer run the same checks, so a
file the store would treat as corrupt is also rejected on import.

Entry input is checked separately: the model enforces types and
amounts, and the category check below enforces the configured list.
"""

import json
from typing import Any, Iterable, Optional, TypeVar, Union

from pydantic import ValidationError

from budget_ledger.models.document import (
    SYSTEM_CATEGORIES,
    BudgetDocument,
    EntryDraft,
    EntryType,
)

REQUIRED_DOCUMENT_FIELDS = ("meta", "settings", "entries")

DraftT = TypeVar("DraftT", bound=EntryDraft)


class DocumentFormatError(ValueError):
    """Raw data is not a valid budget document."""
    pass


def describe_validation_error(error: ValidationError, limit: int = 3) -> str:
    """Short human-readable summary of a pydantic ValidationError."""
    parts = []
    for issue in error.errors()[:limit]:
        location = ".".join(str(part) for part in issue["loc"]) or "document"
        parts.append(f"{location}: {issue['msg']}")
    remaining = error.error_count() - limit
    if remaining > 0:
        parts.append(f"and {remaining} more")
    return "; ".join(parts)


class DocumentValidator:
    """Turns raw persisted or imported data into a BudgetDocument."""

    def missing_fields(self, data: Any) -> list[str]:
        if not isinstance(data, dict):
            return list(REQUIRED_DOCUMENT_FIELDS)
        return [name for name in REQUIRED_DOCUMENT_FIELDS if data.get(name) is None]

    def parse(self, raw: Union[str, bytes, dict]) -> BudgetDocument:
        """
        Parse and validate a document.

        Raises:
            DocumentFormatError: With a message fit to show the user
        """
        if isinstance(raw, (str, bytes, bytearray)):
            try:
                data = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise DocumentFormatError(f"Not valid JSON: {e}") from e
        else:
            data = raw

        missing = self.missing_fields(data)
        if missing:
            raise DocumentFormatError(
                f"Invalid data structure: missing {', '.join(missing)}"
            )

        try:
            return BudgetDocument.model_validate(data)
        except ValidationError as e:
            raise DocumentFormatError(
                f"Invalid document: {describe_validation_error(e)}"
            ) from e


class EntryValidator:
    """
    Business checks for new entries.

    Expense entries must use a configured category (or one the ledger
    writes itself). Income categories are free text.
    """

    def __init__(self, enforce_known_categories: bool = True):
        self._enforce = enforce_known_categories

    def canonical_category(self, draft: EntryDraft, categories: Iterable[str]) -> Optional[str]:
        """
        The configured spelling of an expense draft's category, matched
        ignoring case. System categories win over configured ones.
        None for income drafts and for unknown categories.
        """
        if draft.type != EntryType.EXPENSE:
            return None
        folded = draft.category.lower()
        for name in (*SYSTEM_CATEGORIES, *categories):
            if name.lower() == folded:
                return name
        return None

    def validate(self, draft: EntryDraft, categories: Iterable[str]) -> list[str]:
        issues = []
        if self._enforce and draft.type == EntryType.EXPENSE:
            if self.canonical_category(draft, categories) is None:
                issues.append(f"Unknown expense category: {draft.category}")
        return issues

    def normalize(self, draft: DraftT, categories: Iterable[str]) -> DraftT:
        """Return draft with its category respelled as configured, if known."""
        canonical = self.canonical_category(draft, categories)
        if canonical is None or canonical == draft.category:
            return draft
        return draft.model_copy(update={"category": canonical})
