"""Shared response schemas."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of a booking rejection."""

    detail: str
    code: str


class HealthResponse(BaseModel):
    status: str
    service: str
