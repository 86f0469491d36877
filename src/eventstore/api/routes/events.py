"""Event routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from eventstore.api.deps import get_store
from eventstore.db.store import EventStore
from eventstore.errors import EventStoreError, InvalidEventPayloadError
from eventstore.models.events import decode_event_payload

logger = logging.getLogger(__name__)

EVENT_NOT_FOUND_MESSAGE = "Event not found"

router = APIRouter(prefix="/events", tags=["events"])


@router.get("")
async def list_events(store: EventStore = Depends(get_store)) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_200_OK, content=store.list_events())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(request: Request, store: EventStore = Depends(get_store)) -> JSONResponse:
    body = await request.body()
    try:
        payload = decode_event_payload(body)
    except InvalidEventPayloadError as exc:
        logger.info("Rejected event payload: %s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    try:
        event = store.append_event(payload)
    except EventStoreError as exc:
        logger.error("Could not store event: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=event)


@router.delete("/{event_path:path}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(event_path: str, store: EventStore = Depends(get_store)) -> Response:
    # Only the first segment after /events/ addresses an event.
    event_id = event_path.split("/", 1)[0]
    if not store.delete_event(event_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=EVENT_NOT_FOUND_MESSAGE)
    return Response(status_code=status.HTTP_204_NO_CONTENT, media_type="application/json")
