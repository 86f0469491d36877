"""Common response helpers."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

NOT_FOUND_MESSAGE = "Not Found"


def message_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as ``{"message": ...}``.

    Unsupported methods on known paths are reported like unknown routes.
    """
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return message_response(status.HTTP_404_NOT_FOUND, NOT_FOUND_MESSAGE)
    response = message_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response
