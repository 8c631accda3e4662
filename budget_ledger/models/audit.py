"""
Audit Models for Budget Ledger

Every significant action on the budget document is logged.
This provides:
1. Traceability of every write to the ledger
2. Debugging information when a save or an import fails
3. A record of corruption recoveries, which discard user data

DESIGN DECISION: Events describe what happened; they never carry the
document itself. Amounts are logged as strings to keep Decimal precision.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from budget_ledger.models.document import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Document lifecycle
    DOCUMENT_CREATED = "document_created"
    DOCUMENT_LOADED = "document_loaded"
    DOCUMENT_CORRUPTED = "document_corrupted"
    DOCUMENT_UNAVAILABLE = "document_unavailable"
    DOCUMENT_SAVED = "document_saved"
    DOCUMENT_RESET = "document_reset"
    SAVE_FAILED = "save_failed"

    # Ledger writes
    ENTRY_ADDED = "entry_added"
    ENTRY_UPDATED = "entry_updated"
    ENTRY_DELETED = "entry_deleted"
    LOAN_ADDED = "loan_added"
    LOAN_UPDATED = "loan_updated"
    LOAN_DELETED = "loan_deleted"
    LOAN_PAYMENT_ADDED = "loan_payment_added"
    GOAL_ADDED = "goal_added"
    GOAL_UPDATED = "goal_updated"
    GOAL_DELETED = "goal_deleted"
    CATEGORY_ADDED = "category_added"
    CATEGORY_REMOVED = "category_removed"
    OPERATION_REJECTED = "operation_rejected"

    # Snapshots
    SNAPSHOT_EXPORTED = "snapshot_exported"
    SNAPSHOT_IMPORTED = "snapshot_imported"
    IMPORT_REJECTED = "import_rejected"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'entry', 'loan', 'goal', 'document')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_changed(AuditEventType.ENTRY_ADDED, "entry", entry_id)
        event = AuditEventBuilder.save_failed(error_message)
    """

    @staticmethod
    def document_created(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DOCUMENT_CREATED,
            entity_type="document",
            description=f"Fresh budget document created ({reason})",
            details={"reason": reason},
        )

    @staticmethod
    def document_loaded(entry_count: int, bucket_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DOCUMENT_LOADED,
            entity_type="document",
            description=f"Budget document loaded with {entry_count} entries",
            details={
                "entry_count": entry_count,
                "bucket_count": bucket_count,
            },
        )

    @staticmethod
    def document_corrupted(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DOCUMENT_CORRUPTED,
            severity=AuditSeverity.ERROR,
            entity_type="document",
            description="Stored document is corrupted, resetting to default",
            error_message=error_message,
        )

    @staticmethod
    def document_unavailable(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DOCUMENT_UNAVAILABLE,
            severity=AuditSeverity.ERROR,
            entity_type="document",
            description="Stored document could not be read",
            error_message=error_message,
        )

    @staticmethod
    def document_saved(size_bytes: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DOCUMENT_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="document",
            description=f"Budget document saved ({size_bytes} bytes)",
            details={"size_bytes": size_bytes},
        )

    @staticmethod
    def save_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="document",
            description="Failed to save budget document",
            error_message=error_message,
        )

    @staticmethod
    def document_reset() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DOCUMENT_RESET,
            severity=AuditSeverity.WARNING,
            entity_type="document",
            description="All stored budget data cleared",
        )

    @staticmethod
    def entity_changed(
        event_type: AuditEventType,
        entity_type: str,
        entity_id: Optional[str],
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=event_type.value.replace("_", " ").capitalize(),
            details=details or {},
        )

    @staticmethod
    def operation_rejected(
        action: str,
        reason: str,
        message: str,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_id=entity_id,
            description=f"{action} rejected: {reason}",
            details={"action": action, "reason": reason},
            error_message=message,
        )

    @staticmethod
    def snapshot_exported(entry_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_EXPORTED,
            entity_type="document",
            description=f"Snapshot exported with {entry_count} entries",
            details={"entry_count": entry_count},
        )

    @staticmethod
    def snapshot_imported(mode: str, counts: dict) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_IMPORTED,
            entity_type="document",
            description=f"Snapshot imported ({mode})",
            details={"mode": mode, **counts},
        )

    @staticmethod
    def import_rejected(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="document",
            description="Import rejected: invalid file format",
            error_message=error_message,
        )
