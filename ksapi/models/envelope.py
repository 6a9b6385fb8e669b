"""
REST error envelope.

Failing REST responses carry a JSON body describing the error. It is
decoded into ErrorEnvelope and surfaced through DecodeError.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorException(BaseModel):
    """Server-side exception details included in development builds."""

    message: Optional[str] = None
    backtrace: List[str] = Field(default_factory=list)


class ErrorEnvelope(BaseModel):
    """Structured error reported by the REST API."""

    model_config = ConfigDict(extra="ignore")

    error_messages: List[str] = Field(min_length=1)
    ksr_code: Optional[str] = None
    http_code: int
    exception: Optional[ErrorException] = None
