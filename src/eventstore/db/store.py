"""In-memory persistence for events."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, TypeAlias
from uuid import uuid4

from eventstore.errors import IdGenerationError
from eventstore.models.events import EventRecord, build_event_record

logger = logging.getLogger(__name__)

IdFactory: TypeAlias = Callable[[], str]

MAX_ID_ATTEMPTS = 100


def default_id_factory() -> str:
    return str(uuid4())


class EventStore:
    """Insertion-ordered collection of events held in process memory.

    Every read and read-modify-write runs under one lock, so handlers may be
    scheduled on worker threads without corrupting the collection.
    """

    def __init__(
        self,
        id_factory: IdFactory | None = None,
        *,
        max_id_attempts: int = MAX_ID_ATTEMPTS,
    ) -> None:
        self._id_factory = id_factory or default_id_factory
        self._max_id_attempts = max_id_attempts
        self._events: list[EventRecord] = []
        self._issued_ids: set[str] = set()
        self._lock = threading.Lock()

    def list_events(self) -> list[EventRecord]:
        with self._lock:
            return [dict(event) for event in self._events]

    def get_event(self, event_id: str) -> EventRecord | None:
        with self._lock:
            for event in self._events:
                if event["id"] == event_id:
                    return dict(event)
        return None

    def append_event(self, payload: dict[str, Any]) -> EventRecord:
        with self._lock:
            event = build_event_record(self._next_id(), payload)
            self._events.append(event)
        logger.debug("Created event %s", event["id"])
        return dict(event)

    def delete_event(self, event_id: str) -> bool:
        """Remove the first event with a matching id."""
        with self._lock:
            index = next(
                (index for index, event in enumerate(self._events) if event["id"] == event_id),
                None,
            )
            if index is None:
                return False
            del self._events[index]
        logger.debug("Deleted event %s", event_id)
        return True

    def count(self) -> int:
        with self._lock:
            return len(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def _next_id(self) -> str:
        # Ids are never reused within a process run, including deleted ones.
        for _ in range(self._max_id_attempts):
            event_id = self._id_factory()
            if event_id and event_id not in self._issued_ids:
                self._issued_ids.add(event_id)
                return event_id
        msg = f"No unused event id after {self._max_id_attempts} attempts"
        raise IdGenerationError(msg)
