"""Schemas for the cache revalidation webhook."""

from __future__ import annotations

from pydantic import BaseModel


class RevalidateResponse(BaseModel):
    """Body returned to the backend for every webhook delivery."""

    status: int = 200
    revalidated: bool | None = None
    now: int | None = None
