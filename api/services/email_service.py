"""
Email Service Implementation

Bridges the email routes and the triage core: record store, ingestion,
reply generation and the processing queue.

Design Considerations:
- Clean separation from route handling
- Collaborators injected from the application state
- Not-found reported as None, invalid operations as exceptions
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Request

from api.models.emails import EmailCreateRequest, EmailUpdateRequest
from triage.ingestion.samples import sample_messages
from triage.models import EmailStatus, PriorityClass, Sentiment

logger = logging.getLogger(__name__)


class EmailService:
    """
    Email operations exposed through the API.

    Args:
        repository: Email record store
        ingestion: Ingestion service used for new emails
        responder: Reply generator for on-demand generation
        queue: Priority processing queue
    """

    def __init__(self, repository: Any, ingestion: Any, responder: Any, queue: Any):
        self.repository = repository
        self.ingestion = ingestion
        self.responder = responder
        self.queue = queue

    async def list_emails(
        self,
        sentiment: Optional[str] = None,
        urgency: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """List emails, filtered when any filter is given, newest first."""
        if sentiment or urgency or status:
            return await self.repository.get_emails_by_filter(
                sentiment=sentiment, urgency=urgency, status=status
            )
        return await self.repository.get_all_emails()

    async def get_email(self, email_id: str) -> Optional[Dict[str, Any]]:
        return await self.repository.get_email_by_id(email_id)

    async def create_email(self, request: EmailCreateRequest) -> Dict[str, Any]:
        """Classify, store and queue a manually entered email."""
        return await self.ingestion.create_email(
            sender=request.sender,
            subject=request.subject,
            body=request.body,
        )

    async def update_email(self, email_id: str, request: EmailUpdateRequest) -> Optional[Dict[str, Any]]:
        """
        Apply human edits to an email.

        Raises:
            StatusTransitionError: If the status change is not allowed
        """
        updates: Dict[str, Any] = {}
        if request.ai_response is not None:
            updates["ai_response"] = request.ai_response
        if request.status is not None:
            updates["status"] = request.status.value

        if not updates:
            return await self.repository.get_email_by_id(email_id)
        return await self.repository.update_email(email_id, updates)

    async def generate_response(self, email_id: str) -> Optional[Dict[str, Any]]:
        """
        Draft a reply immediately, outside the queue.

        Raises:
            ResponseGenerationError: If the reply could not be generated
            StatusTransitionError: If the email was already sent
        """
        email = await self.repository.get_email_by_id(email_id)
        if email is None:
            return None

        reply = await self.responder.generate_reply(
            sender=email["sender"],
            subject=email["subject"],
            body=email["body"],
            sentiment=email.get("sentiment") or Sentiment.NEUTRAL.value,
            extracted_data=email.get("extracted_data") or {},
        )

        logger.info(f"Generated AI response on demand for email {email_id}")
        return await self.repository.update_email(email_id, {
            "ai_response": reply,
            "status": EmailStatus.PROCESSED.value,
            "processed_at": datetime.utcnow(),
        })

    async def send_email(self, email_id: str) -> Optional[Dict[str, Any]]:
        """
        Mark an email's reply as sent.

        Raises:
            ValueError: If no reply has been generated yet
        """
        email = await self.repository.get_email_by_id(email_id)
        if email is None:
            return None
        if not email.get("ai_response"):
            raise ValueError("No AI response generated yet")

        updated = await self.repository.update_email(email_id, {"status": EmailStatus.SENT.value})
        logger.info(f"Marked reply for email {email_id} as sent")
        return updated

    async def enqueue_email(self, email_id: str) -> Optional[Dict[str, Any]]:
        """Queue an existing email for reply generation."""
        email = await self.repository.get_email_by_id(email_id)
        if email is None:
            return None

        self.queue.enqueue(email_id, is_urgent=email["is_urgent"])
        return {
            "email_id": email_id,
            "priority_class": PriorityClass.for_urgency(email["is_urgent"]).label,
            "queue": self.queue.stats(),
        }

    async def sync_sample_emails(self) -> List[Dict[str, Any]]:
        """Load the demo emails through the regular ingestion path."""
        return await self.ingestion.ingest(sample_messages(), require_support_keywords=False)


def get_email_service(request: Request) -> EmailService:
    """Build the email service from the collaborators held on the application state."""
    state = request.app.state
    return EmailService(
        repository=state.repository,
        ingestion=state.ingestion,
        responder=state.responder,
        queue=state.queue,
    )
