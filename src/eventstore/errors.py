"""Domain errors raised by the event store."""

from __future__ import annotations


class EventStoreError(Exception):
    """Base class for event store failures."""


class InvalidEventPayloadError(EventStoreError):
    """Request body cannot be used as an event payload."""


class IdGenerationError(EventStoreError):
    """The id factory kept producing ids that were already issued."""
