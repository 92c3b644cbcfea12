"""
Email Data Models

Defines request and response models for the email endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from triage.models import EmailStatus, PriorityClass, Sentiment


class ExtractedDataModel(BaseModel):
    """Entities extracted from an email; absent fields are omitted."""
    phone: Optional[str] = Field(default=None, description="Customer phone number")
    alternate_email: Optional[str] = Field(default=None, description="Alternate contact address")
    order_ids: List[str] = Field(default_factory=list, description="Order or invoice identifiers")
    product_names: List[str] = Field(default_factory=list, description="Products mentioned")
    keywords: List[str] = Field(default_factory=list, description="Important keywords")


class EmailCreateRequest(BaseModel):
    """
    Request model for manually entering an email.

    The email is classified on creation and queued for a reply.
    """
    sender: str = Field(..., min_length=3, max_length=320, description="Email sender address")
    subject: str = Field(..., min_length=1, description="Email subject line")
    body: str = Field(..., min_length=1, description="Email body")

    @field_validator("sender", "subject", "body")
    @classmethod
    def strip_whitespace(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class EmailUpdateRequest(BaseModel):
    """Human edits from the review screen."""
    ai_response: Optional[str] = Field(default=None, description="Edited reply text")
    status: Optional[EmailStatus] = Field(default=None, description="Forward-only status change")


class EmailResponse(BaseModel):
    """Complete email record."""
    id: str = Field(..., description="Unique email identifier")
    sender: str = Field(..., description="Email sender address")
    subject: str = Field(..., description="Email subject line")
    body: str = Field(..., description="Email body")
    received_at: datetime = Field(..., description="Email receive timestamp")
    sentiment: Optional[Sentiment] = Field(default=None, description="Classified sentiment")
    urgency: float = Field(..., ge=0.0, le=1.0, description="Urgency score")
    is_urgent: bool = Field(..., description="Whether the urgency score crosses the threshold")
    extracted_data: ExtractedDataModel = Field(
        default_factory=ExtractedDataModel,
        description="Extracted entities"
    )
    ai_response: Optional[str] = Field(default=None, description="Drafted reply")
    status: EmailStatus = Field(..., description="Reply lifecycle status")
    processed_at: Optional[datetime] = Field(default=None, description="When the reply was generated")


class EmailSyncResponse(BaseModel):
    """Result of loading the demo emails."""
    message: str = Field(..., description="Human-readable summary")
    emails: List[EmailResponse] = Field(default_factory=list, description="Created emails")


class QueueClassStats(BaseModel):
    waiting: int = Field(..., ge=0, description="Items waiting in this class")
    active: int = Field(..., ge=0, le=1, description="Items of this class being processed")


class QueueStatsResponse(BaseModel):
    """Live processing queue depth and activity."""
    urgent: QueueClassStats
    normal: QueueClassStats
    total: QueueClassStats


class EnqueueResponse(BaseModel):
    """Acknowledgement of a manual queue trigger."""
    email_id: str = Field(..., description="Queued email identifier")
    priority_class: str = Field(..., description="urgent or normal")
    queue: QueueStatsResponse = Field(..., description="Queue state after enqueueing")

    @field_validator("priority_class")
    @classmethod
    def validate_priority_class(cls, value: str) -> str:
        if value not in {priority.label for priority in PriorityClass}:
            raise ValueError(f"Unknown priority class: {value}")
        return value
