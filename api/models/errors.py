"""
Error Response Models

Bodies returned by the exception handlers: not-found and bad-request
errors, rejected status changes (409), failed reply generation (502) and
request validation failures (422).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body shared by every failing triage endpoint."""
    status: str = Field(default="error", description="Always 'error'")
    message: str = Field(..., description="What went wrong, e.g. 'No AI response generated yet'")
    error_code: str = Field(
        ...,
        description="HTTP_<code>, VALIDATION_ERROR, INVALID_STATUS_TRANSITION, "
                    "GENERATION_FAILED or INTERNAL_SERVER_ERROR"
    )
    details: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Extra context such as the generation failure reason"
    )
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="When the error was produced")


class ValidationErrorItem(BaseModel):
    """One rejected request field, e.g. a blank email body or unknown status."""
    loc: List[str] = Field(..., description="Path to the offending field")
    msg: str = Field(..., description="Validation message")
    type: str = Field(..., description="Pydantic error type")


class ValidationErrorResponse(ErrorResponse):
    """422 body listing every rejected field of an email request."""
    validation_errors: List[ValidationErrorItem] = Field(..., description="Rejected fields")
