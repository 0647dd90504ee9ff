"""Post-commit notification outbox.

Workflow operations publish events only after the state change is persisted.
``drain`` runs later (a FastAPI background task after the response) and never
raises: a failed delivery is logged and dropped, the committed state stands.
"""

from __future__ import annotations

import logging
import threading
from collections import deque

from persona.core.protocols import INotifier
from persona.models.notification import NotificationEvent

logger = logging.getLogger(__name__)


class NotificationOutbox:
    def __init__(self, notifier: INotifier) -> None:
        self._notifier = notifier
        self._queue: deque[NotificationEvent] = deque()
        self._lock = threading.Lock()

    def publish(self, event: NotificationEvent) -> None:
        with self._lock:
            self._queue.append(event)
        logger.debug("Queued %s notification for entity %s", event.kind, event.entity_id)

    @property
    def pending(self) -> list[NotificationEvent]:
        with self._lock:
            return list(self._queue)

    def _next(self) -> NotificationEvent | None:
        with self._lock:
            return self._queue.popleft() if self._queue else None

    def drain(self) -> int:
        """Deliver every queued event; returns how many were delivered."""
        delivered = 0
        while (event := self._next()) is not None:
            try:
                self._notifier.notify(event.kind, event.recipient, event.details)
            except Exception:
                logger.exception(
                    "Failed to send %s notification for entity %s to %s",
                    event.kind, event.entity_id, event.recipient,
                )
                continue
            delivered += 1
        return delivered
