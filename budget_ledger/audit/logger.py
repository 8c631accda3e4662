"""
Audit Logger

DESIGN DECISION: Every significant action on the ledger is logged.
This provides:
1. Complete traceability of writes
2. Debugging capability when saves or imports fail
3. A visible record of corruption recoveries

The audit logger:
- Is synchronous, like the rest of the core
- Never raises into the caller
- Keeps a bounded tail of recent events for inspection
"""

import logging
from collections import deque
from typing import Optional

import structlog

from budget_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditEventType


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through stdlib logging at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))
    logging.getLogger("budget_ledger").setLevel(level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log and remembers
    the most recent ones.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("budget_ledger.audit")
        self._recent: deque[AuditEvent] = deque(maxlen=history_size)

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Recent events, oldest first."""
        return list(self._recent)

    def events_of_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        return [event for event in self._recent if event.event_type == event_type]

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        self._recent.append(event)
        log_dict = event.to_log_dict()

        try:
            if event.severity.value in ("error", "critical"):
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # A broken log handler must not break a ledger write
            logging.getLogger(__name__).error("audit logging failed: %s", e)

    def log_document_created(self, reason: str) -> None:
        self.log(AuditEventBuilder.document_created(reason))

    def log_document_loaded(self, entry_count: int, bucket_count: int) -> None:
        self.log(AuditEventBuilder.document_loaded(entry_count, bucket_count))

    def log_document_corrupted(self, error_message: str) -> None:
        self.log(AuditEventBuilder.document_corrupted(error_message))

    def log_document_unavailable(self, error_message: str) -> None:
        self.log(AuditEventBuilder.document_unavailable(error_message))

    def log_document_saved(self, size_bytes: int) -> None:
        self.log(AuditEventBuilder.document_saved(size_bytes))

    def log_save_failed(self, error_message: str) -> None:
        self.log(AuditEventBuilder.save_failed(error_message))

    def log_document_reset(self) -> None:
        self.log(AuditEventBuilder.document_reset())

    def log_entity_changed(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: Optional[str],
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.entity_changed(event_type, entity_type, entity_id, details))

    def log_operation_rejected(
        self,
        action: str,
        reason: str,
        message: str,
        entity_id: Optional[str] = None,
    ) -> None:
        self.log(AuditEventBuilder.operation_rejected(action, reason, message, entity_id))

    def log_snapshot_exported(self, entry_count: int) -> None:
        self.log(AuditEventBuilder.snapshot_exported(entry_count))

    def log_snapshot_imported(self, mode: str, counts: dict) -> None:
        self.log(AuditEventBuilder.snapshot_imported(mode, counts))

    def log_import_rejected(self, error_message: str) -> None:
        self.log(AuditEventBuilder.import_rejected(error_message))
