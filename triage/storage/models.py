"""
Database Models for the Email Record Store

Defines the email record table holding the original message, its
classification results and the reply lifecycle.
"""

import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import Column, String, Boolean, DateTime, Text, Float, JSON
from sqlalchemy.orm import declarative_base

from triage.models import EmailStatus

Base = declarative_base()


class Email(Base):
    """
    Support email with classification results and reply state.

    ``sender``, ``subject``, ``body`` and ``received_at`` never change after
    creation; the remaining columns are written by classification, the
    processing queue and human review.
    """
    __tablename__ = "emails"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    sender = Column(String(320), nullable=False, index=True)
    subject = Column(Text, nullable=False)
    body = Column(Text, nullable=False)
    received_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Classification
    sentiment = Column(String(16), nullable=True, index=True)
    urgency = Column(Float, nullable=False, default=0.0)
    is_urgent = Column(Boolean, nullable=False, default=False, index=True)
    extracted_data = Column(JSON, nullable=False, default=dict)

    # Reply lifecycle
    ai_response = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default=EmailStatus.PENDING.value, index=True)
    processed_at = Column(DateTime, nullable=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert email to dictionary representation for API responses."""
        return {
            "id": self.id,
            "sender": self.sender,
            "subject": self.subject,
            "body": self.body,
            "received_at": self.received_at,
            "sentiment": self.sentiment,
            "urgency": self.urgency,
            "is_urgent": self.is_urgent,
            "extracted_data": dict(self.extracted_data or {}),
            "ai_response": self.ai_response,
            "status": self.status,
            "processed_at": self.processed_at,
        }
