import uuid
from typing import Any, Optional

from pydantic import BaseModel, Field


def request_id() -> str:
    """Generates a unique request ID for tracing."""
    return uuid.uuid4().hex


class SuccessResponse(BaseModel):
    """Envelope for every successful response."""
    success: bool = True
    request_id: str = Field(default_factory=request_id)
    data: Optional[Any] = None


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Envelope for every failed response."""
    success: bool = False
    request_id: str = Field(default_factory=request_id)
    error: ErrorDetail
