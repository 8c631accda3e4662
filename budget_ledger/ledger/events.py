"""
Change Notification

DESIGN DECISION: The core never calls into the presentation layer.
The ledger and the importer publish named events on an EventBus and
whoever renders the data subscribes to them.

EVENTS:
- STATE_CHANGED after every ledger mutation, once it is applied in memory
- DOCUMENT_RELOADED after an import replaced or merged the document

GUARANTEES:
- Handlers run synchronously in subscription order
- A failing handler is logged and its exception returned; the other
  handlers still run and the write that triggered the event stands
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, NamedTuple

import structlog

from budget_ledger.models.document import utc_now

__all__ = ['STATE_CHANGED', 'DOCUMENT_RELOADED', 'ChangeEvent', 'EventBus']

# Published after every in-memory mutation by the ledger.
STATE_CHANGED = "STATE_CHANGED"
# Published when the whole document was swapped or merged by an import.
DOCUMENT_RELOADED = "DOCUMENT_RELOADED"


class ChangeEvent(NamedTuple):
    name: str
    ts: datetime
    payload: dict


Handler = Callable[[ChangeEvent], Any]

_logger = structlog.get_logger("budget_ledger.events")


class EventBus:
    """
    Synchronous publish/subscribe.

    The core publishes, the presentation layer subscribes and redraws.
    A handler that raises does not stop the others; its error is returned
    in the results list and logged.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        if name not in self._subscribers:
            self._subscribers[name] = []
        self._subscribers[name].append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if name in self._subscribers:
            if handler in self._subscribers[name]:
                self._subscribers[name].remove(handler)

    def publish(self, name: str, payload: dict) -> List[Any]:
        if name not in self._subscribers:
            return []

        event = ChangeEvent(name=name, ts=utc_now(), payload=payload)

        results = []
        for handler in list(self._subscribers[name]):
            try:
                results.append(handler(event))
            except Exception as e:
                _logger.error(
                    "event_handler_failed",
                    event_name=name,
                    handler=getattr(handler, "__name__", repr(handler)),
                    error=str(e),
                )
                results.append(e)
        return results
