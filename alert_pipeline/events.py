"""Event bus connecting alert producers to listeners.

The pipeline emits typed events; notifiers subscribe to the kinds they
care about without the producer knowing who listens.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

ALERT_PROCESSED = 'alert.processed'
HIGH_URGENCY_ALERT = 'alert.high_urgency'
NEW_ALERTS = 'alerts.new'


@dataclass
class AlertEvent:
    """Event emitted for an alert (or a group of alerts)."""
    kind: str
    alert: Any
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Listener = Callable[[AlertEvent], None]


class EventBus:
    """Synchronous publish/subscribe dispatcher."""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def subscribe(self, kind: str, listener: Listener):
        self._listeners[kind].append(listener)

    def unsubscribe(self, kind: str, listener: Listener):
        if listener in self._listeners.get(kind, []):
            self._listeners[kind].remove(listener)

    def listener_count(self, kind: str) -> int:
        return len(self._listeners.get(kind, []))

    def emit(self, event: AlertEvent) -> int:
        """Deliver an event to every listener of its kind.

        A failing listener is logged and skipped.

        Returns:
            Number of listeners that handled the event
        """
        delivered = 0
        for listener in list(self._listeners.get(event.kind, [])):
            try:
                listener(event)
                delivered += 1
            except Exception:
                logger.exception("Listener for %s failed", event.kind)
        return delivered
