"""Shared API dependency providers."""

from __future__ import annotations

from fastapi import Request

from eventstore.db.store import EventStore


def get_store(request: Request) -> EventStore:
    return request.app.state.store
