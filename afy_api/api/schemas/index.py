from __future__ import annotations

from pydantic import BaseModel


class RootResponse(BaseModel):
    message: str
    status: str
    authenticated: bool


class HealthResponse(BaseModel):
    status: str
