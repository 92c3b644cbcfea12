"""
Shared data models for support email triage.

Defines the enumerations, analysis results and inbound message containers
exchanged between the classifier, the record store, the ingestion service
and the priority processing queue.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional

# Scores at or above this value mark an email as urgent
URGENCY_THRESHOLD = 0.6


class Sentiment(str, Enum):
    """Sentiment labels produced by classification."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"

    @classmethod
    def parse(cls, value: Any) -> "Sentiment":
        """Map a raw model label onto a sentiment, defaulting to neutral."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.NEUTRAL


class EmailStatus(str, Enum):
    """
    Reply lifecycle of an email record.

    Moves forward only: pending -> processed -> sent.
    """
    PENDING = "pending"
    PROCESSED = "processed"
    SENT = "sent"

    def can_transition_to(self, target: "EmailStatus") -> bool:
        """Check whether moving from this status to ``target`` is allowed."""
        if target == self:
            return True
        return _STATUS_ORDER.index(target) == _STATUS_ORDER.index(self) + 1


_STATUS_ORDER = [EmailStatus.PENDING, EmailStatus.PROCESSED, EmailStatus.SENT]


class StatusTransitionError(ValueError):
    """Raised when an update would move an email's status backward or skip a state."""


class PriorityClass(IntEnum):
    """Two-level queue priority; lower value is dequeued first."""
    URGENT = 1
    NORMAL = 10

    @classmethod
    def for_urgency(cls, is_urgent: bool) -> "PriorityClass":
        return cls.URGENT if is_urgent else cls.NORMAL

    @property
    def label(self) -> str:
        return self.name.lower()


def clamp_score(value: Any, default: float) -> float:
    """Coerce a model-provided score into the [0, 1] range."""
    try:
        score = float(value)
    except (TypeError, ValueError):
        return default
    return max(0.0, min(1.0, score))


def is_urgent_score(urgency: float) -> bool:
    return urgency >= URGENCY_THRESHOLD


@dataclass
class SentimentAnalysis:
    sentiment: Sentiment
    confidence: float


@dataclass
class UrgencyAnalysis:
    urgency: float
    is_urgent: bool

    @classmethod
    def from_score(cls, score: float) -> "UrgencyAnalysis":
        return cls(urgency=score, is_urgent=is_urgent_score(score))


@dataclass
class ExtractedData:
    """
    Structured details pulled out of an email body.

    Every field is optional; absent values are left out of the serialized form.
    """
    phone: Optional[str] = None
    alternate_email: Optional[str] = None
    order_ids: List[str] = field(default_factory=list)
    product_names: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.phone:
            data["phone"] = self.phone
        if self.alternate_email:
            data["alternate_email"] = self.alternate_email
        if self.order_ids:
            data["order_ids"] = list(self.order_ids)
        if self.product_names:
            data["product_names"] = list(self.product_names)
        if self.keywords:
            data["keywords"] = list(self.keywords)
        return data


@dataclass
class ClassificationResult:
    """Combined output of sentiment, urgency and extraction analysis."""
    sentiment: SentimentAnalysis
    urgency: UrgencyAnalysis
    extracted_data: ExtractedData

    def to_record_fields(self) -> Dict[str, Any]:
        """Fields to merge into a new email record."""
        return {
            "sentiment": self.sentiment.sentiment.value,
            "urgency": self.urgency.urgency,
            "extracted_data": self.extracted_data.to_dict(),
        }


@dataclass
class InboundMessage:
    """An email as received from any source, before classification."""
    sender: str
    subject: str
    body: str
    received_at: Optional[datetime] = None
