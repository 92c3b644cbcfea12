"""
Email Repository Implementation

Provides the record store operations used by the API, the ingestion
service and the processing queue.

Design Considerations:
- Repository pattern for data access abstraction
- Dictionaries returned instead of ORM objects, so records stay usable
  after the session closes
- Record invariants enforced on every write: forward-only status,
  no processed or sent record without a reply, urgent flag derived
  from the score
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, ContextManager, Dict, List, Optional

from sqlalchemy import and_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from triage.models import (
    EmailStatus,
    Sentiment,
    StatusTransitionError,
    clamp_score,
    is_urgent_score,
)
from triage.storage.database import get_db_session
from triage.storage.models import Email

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = {"id", "sender", "subject", "body", "received_at"}
UPDATABLE_FIELDS = {"sentiment", "urgency", "extracted_data", "ai_response", "status", "processed_at"}
REPLY_REQUIRED_STATUSES = {EmailStatus.PROCESSED, EmailStatus.SENT}


class EmailRepository:
    """
    Repository for email record operations.

    Args:
        session_factory: Callable returning a session context manager that
            commits on success; defaults to the application database
    """

    def __init__(self, session_factory: Callable[[], ContextManager[Session]] = get_db_session):
        self.session_factory = session_factory

    async def get_all_emails(self) -> List[Dict[str, Any]]:
        """Return every email, newest first."""
        with self.session_factory() as session:
            emails = session.query(Email).order_by(Email.received_at.desc()).all()
            return [email.to_dict() for email in emails]

    async def get_email_by_id(self, email_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve an email by id.

        Returns:
            Dictionary containing the email if found, None otherwise
        """
        with self.session_factory() as session:
            email = session.get(Email, email_id)
            return email.to_dict() if email else None

    async def create_email(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a new email record.

        Args:
            data: sender, subject and body, plus optional classification
                fields (sentiment, urgency, extracted_data) and received_at

        Returns:
            Dictionary containing the stored email

        Raises:
            ValueError: If required fields are missing or values are invalid
            RuntimeError: If the database write fails
        """
        missing = [name for name in ("sender", "subject", "body") if not data.get(name)]
        if missing:
            raise ValueError(f"Missing required email fields: {', '.join(missing)}")

        urgency = clamp_score(data.get("urgency", 0.0), 0.0)
        sentiment = data.get("sentiment")
        email = Email(
            sender=data["sender"],
            subject=data["subject"],
            body=data["body"],
            received_at=data.get("received_at") or datetime.utcnow(),
            sentiment=Sentiment(sentiment).value if sentiment else None,
            urgency=urgency,
            is_urgent=is_urgent_score(urgency),
            extracted_data=dict(data.get("extracted_data") or {}),
            status=EmailStatus.PENDING.value,
        )

        try:
            with self.session_factory() as session:
                session.add(email)
                session.flush()
                created = email.to_dict()
        except SQLAlchemyError as e:
            logger.error(f"Failed to create email from {data['sender']}: {str(e)}")
            raise RuntimeError(f"Failed to create email: {str(e)}")

        logger.info(f"Created email {created['id']} from {created['sender']} (urgent={created['is_urgent']})")
        return created

    async def update_email(self, email_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply a partial update to an email record.

        Args:
            email_id: Email id
            updates: Subset of sentiment, urgency, extracted_data,
                ai_response, status and processed_at

        Returns:
            Updated email dictionary, or None if the email does not exist

        Raises:
            ValueError: For immutable or unknown fields and invalid values
            StatusTransitionError: If the status would move backward, skip a
                state, or reach processed or sent without a reply
        """
        immutable = IMMUTABLE_FIELDS.intersection(updates)
        if immutable:
            raise ValueError(f"Fields cannot be changed after creation: {', '.join(sorted(immutable))}")
        unknown = set(updates) - UPDATABLE_FIELDS - {"is_urgent"}
        if unknown:
            raise ValueError(f"Unknown email fields: {', '.join(sorted(unknown))}")

        with self.session_factory() as session:
            email = session.get(Email, email_id)
            if email is None:
                return None

            current_status = EmailStatus(email.status)
            target_status = EmailStatus(updates["status"]) if "status" in updates else current_status
            if not current_status.can_transition_to(target_status):
                raise StatusTransitionError(
                    f"Cannot move email {email_id} from {current_status.value} to {target_status.value}"
                )

            ai_response = updates["ai_response"] if "ai_response" in updates else email.ai_response
            reply_touched = target_status != current_status or "ai_response" in updates
            if target_status in REPLY_REQUIRED_STATUSES and reply_touched and not ai_response:
                raise StatusTransitionError(
                    f"Email {email_id} cannot be {target_status.value} without a reply"
                )

            if "sentiment" in updates:
                email.sentiment = Sentiment(updates["sentiment"]).value if updates["sentiment"] else None
            if "urgency" in updates:
                email.urgency = clamp_score(updates["urgency"], 0.0)
            # Always derived so the flag and the score never disagree
            email.is_urgent = is_urgent_score(email.urgency)
            if "extracted_data" in updates:
                email.extracted_data = dict(updates["extracted_data"] or {})
            if "ai_response" in updates:
                email.ai_response = ai_response

            if target_status != current_status:
                email.status = target_status.value
                if target_status == EmailStatus.PROCESSED and "processed_at" not in updates:
                    email.processed_at = datetime.utcnow()
            if "processed_at" in updates:
                email.processed_at = updates["processed_at"]

            try:
                session.flush()
            except SQLAlchemyError as e:
                logger.error(f"Failed to update email {email_id}: {str(e)}")
                raise RuntimeError(f"Failed to update email: {str(e)}")

            logger.debug(f"Updated email {email_id}: {sorted(updates)}")
            return email.to_dict()

    async def get_emails_by_filter(
        self,
        sentiment: Optional[str] = None,
        urgency: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Return emails matching every given filter, newest first.

        Args:
            sentiment: positive, neutral or negative
            urgency: "urgent" or "normal"
            status: pending, processed or sent

        Raises:
            ValueError: If a filter value is not recognised
        """
        conditions = []
        if sentiment:
            conditions.append(Email.sentiment == Sentiment(sentiment).value)
        if urgency == "urgent":
            conditions.append(Email.is_urgent.is_(True))
        elif urgency == "normal":
            conditions.append(Email.is_urgent.is_(False))
        elif urgency:
            raise ValueError(f"Unknown urgency filter: {urgency}")
        if status:
            conditions.append(Email.status == EmailStatus(status).value)

        with self.session_factory() as session:
            query = session.query(Email)
            if conditions:
                query = query.filter(and_(*conditions))
            emails = query.order_by(Email.received_at.desc()).all()
            return [email.to_dict() for email in emails]

    async def find_duplicate(
        self,
        sender: str,
        subject: str,
        received_at: datetime,
        window_seconds: int = 60,
    ) -> Optional[Dict[str, Any]]:
        """Find an email with the same sender and subject received within the window."""
        window = timedelta(seconds=window_seconds)
        with self.session_factory() as session:
            email = session.query(Email).filter(
                and_(
                    Email.sender == sender,
                    Email.subject == subject,
                    Email.received_at >= received_at - window,
                    Email.received_at <= received_at + window,
                )
            ).first()
            return email.to_dict() if email else None

    async def get_analytics(self) -> Dict[str, Any]:
        """
        Aggregate dashboard analytics over all emails.

        Returns:
            Dictionary with totals, sentiment distribution (percentages),
            processing status counts, average response time in hours and
            resolution rate (percentage processed or sent)
        """
        with self.session_factory() as session:
            total_emails = session.query(func.count(Email.id)).scalar() or 0
            urgent_emails = session.query(func.count(Email.id)).filter(Email.is_urgent.is_(True)).scalar() or 0

            sentiment_counts = dict(
                session.query(Email.sentiment, func.count(Email.id)).group_by(Email.sentiment).all()
            )
            status_counts = dict(
                session.query(Email.status, func.count(Email.id)).group_by(Email.status).all()
            )

            replied = session.query(Email.received_at, Email.processed_at).filter(
                Email.processed_at.isnot(None)
            ).all()

        sentiment_distribution = {sentiment.value: 0 for sentiment in Sentiment}
        for label, count in sentiment_counts.items():
            if label in sentiment_distribution and total_emails:
                sentiment_distribution[label] = round(count / total_emails * 100)

        processing_stats = {status.value: 0 for status in EmailStatus}
        for label, count in status_counts.items():
            if label in processing_stats:
                processing_stats[label] = count

        response_hours = [
            (processed_at - received_at).total_seconds() / 3600
            for received_at, processed_at in replied
            if received_at and processed_at
        ]
        avg_response_time = round(sum(response_hours) / len(response_hours), 2) if response_hours else 0.0

        resolved = processing_stats[EmailStatus.PROCESSED.value] + processing_stats[EmailStatus.SENT.value]
        resolution_rate = round(resolved / total_emails * 100) if total_emails else 0

        return {
            "total_emails": total_emails,
            "urgent_emails": urgent_emails,
            "avg_response_time": avg_response_time,
            "resolution_rate": resolution_rate,
            "sentiment_distribution": sentiment_distribution,
            "processing_stats": processing_stats,
        }
