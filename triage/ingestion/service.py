"""
Email Ingestion Service

Turns inbound messages into classified email records and hands them to
the processing queue. Used by manual entry, the demo sync and any
mailbox fetcher that yields ``InboundMessage`` objects.

Design Considerations:
- Support-keyword filter for mailbox traffic
- Duplicate suppression on sender, subject and arrival time
- One failing message never aborts the rest of a batch
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from triage.config.analyzer_config import ANALYZER_CONFIG
from triage.models import InboundMessage

logger = logging.getLogger(__name__)


class EmailIngestionService:
    """
    Classify, persist and enqueue incoming support email.

    Args:
        repository: Record store (``EmailRepository`` or compatible)
        classifier: Classification capability (``EmailClassifier`` or compatible)
        queue: Processing queue; when None, records are stored but not queued
        support_keywords: Keywords marking a message as a support request
        duplicate_window_seconds: Arrival window for duplicate detection
    """

    def __init__(
        self,
        repository: Any,
        classifier: Any,
        queue: Optional[Any] = None,
        support_keywords: Optional[Iterable[str]] = None,
        duplicate_window_seconds: Optional[int] = None,
    ):
        config = ANALYZER_CONFIG["ingestion"]
        self.repository = repository
        self.classifier = classifier
        self.queue = queue
        self.support_keywords = [
            keyword.lower() for keyword in (support_keywords or config["support_keywords"])
        ]
        self.duplicate_window_seconds = (
            duplicate_window_seconds
            if duplicate_window_seconds is not None
            else config["duplicate_window_seconds"]
        )

    def is_support_email(self, subject: str, body: str) -> bool:
        text = f"{subject} {body}".lower()
        return any(keyword in text for keyword in self.support_keywords)

    async def create_email(self, sender: str, subject: str, body: str) -> Dict[str, Any]:
        """
        Classify and store a single manually entered email, then queue it.

        Raises:
            ValueError: If the record is invalid
            RuntimeError: If the record cannot be stored
        """
        message = InboundMessage(sender=sender, subject=subject, body=body)
        return await self._store_and_enqueue(message)

    async def ingest(
        self,
        messages: Iterable[InboundMessage],
        require_support_keywords: bool = True,
    ) -> List[Dict[str, Any]]:
        """
        Ingest a batch of inbound messages.

        Args:
            messages: Messages to ingest
            require_support_keywords: Skip messages that do not look like support requests

        Returns:
            Records created for this batch
        """
        created = []
        skipped = 0

        for message in messages:
            try:
                if require_support_keywords and not self.is_support_email(message.subject, message.body):
                    logger.debug(f"Skipping non-support email from {message.sender}: {message.subject}")
                    skipped += 1
                    continue

                received_at = message.received_at or datetime.utcnow()
                duplicate = await self.repository.find_duplicate(
                    sender=message.sender,
                    subject=message.subject,
                    received_at=received_at,
                    window_seconds=self.duplicate_window_seconds,
                )
                if duplicate:
                    logger.info(f"Skipping duplicate of email {duplicate['id']} from {message.sender}")
                    skipped += 1
                    continue

                created.append(await self._store_and_enqueue(message))
            except Exception as e:
                logger.error(f"Error ingesting email from {message.sender}: {e}", exc_info=True)

        logger.info(f"Ingested {len(created)} email(s), skipped {skipped}")
        return created

    async def _store_and_enqueue(self, message: InboundMessage) -> Dict[str, Any]:
        classification = await self.classifier.classify(message.body)

        record = {
            "sender": message.sender,
            "subject": message.subject,
            "body": message.body,
            **classification.to_record_fields(),
        }
        if message.received_at:
            record["received_at"] = message.received_at

        email = await self.repository.create_email(record)

        if self.queue is not None:
            self.queue.enqueue(email["id"], is_urgent=email["is_urgent"])
        return email
