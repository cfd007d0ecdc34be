"""Common API models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body returned for unhandled server errors."""

    detail: str
    error_type: Optional[str] = None
    path: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.now)
