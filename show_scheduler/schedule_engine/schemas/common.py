"""Error body shared by every engine failure surfaced over HTTP."""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    code: str = Field(..., description="Stable snake_case error code")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Expected/actual versions, chunk indexes or the validation error list",
    )


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: ErrorDetail
