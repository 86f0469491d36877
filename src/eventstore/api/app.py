"""FastAPI app entrypoint."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from eventstore.api.routes.common import http_exception_handler
from eventstore.api.routes.events import router as events_router
from eventstore.api.schemas.events import MessageResponse
from eventstore.config import Settings, configure_logging, get_settings
from eventstore.db.store import EventStore

logger = logging.getLogger(__name__)


def create_app(store: EventStore | None = None, settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.app_title, version="0.1.0", redirect_slashes=False)
    app.state.store = store if store is not None else EventStore()
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.include_router(events_router)

    @app.get("/", tags=["system"], response_model=MessageResponse)
    async def health() -> MessageResponse:
        return MessageResponse(message="Hello World")

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Server running on http://localhost:%d", settings.port)
    uvicorn.run(
        "eventstore.api.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        reload=False,
    )

