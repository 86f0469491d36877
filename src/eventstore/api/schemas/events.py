"""Event API schemas."""

from __future__ import annotations

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Plain message envelope used by health and error responses."""

    message: str
