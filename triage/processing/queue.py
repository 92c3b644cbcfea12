"""
Priority Processing Queue

Serializes AI reply generation across pending emails. Items carry a
two-level priority class; urgent items are always dequeued ahead of normal
ones, and items within a class keep their arrival order. A single worker
task drains the queue, so at most one email is mid-generation at any time.

Design Considerations:
- One drain worker per queue instance (single-flight)
- Items leave the pending set before their side effect runs
- Per-item fault isolation: failures are logged, never fatal to the loop
- Optional bounded retry; failed items are dropped by default
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Deque, Dict, Optional

from triage.models import EmailStatus, PriorityClass, Sentiment

logger = logging.getLogger(__name__)


@dataclass
class QueueItem:
    """Pending work referencing an email record by id."""
    email_id: str
    priority_class: PriorityClass
    enqueued_at: datetime = field(default_factory=datetime.utcnow)
    attempt: int = 0


class ProcessingOutcome(str, Enum):
    PROCESSED = "processed"
    SKIPPED = "skipped"
    MISSING = "missing"
    FAILED = "failed"


class PriorityProcessingQueue:
    """
    In-process priority queue that drafts replies for queued emails.

    Collaborators are duck-typed:

    - ``store`` provides ``async get_email_by_id(id) -> Optional[dict]`` and
      ``async update_email(id, updates) -> Optional[dict]``
    - ``generator`` provides ``async generate_reply(sender, subject, body,
      sentiment, extracted_data) -> str``

    Must be used from a single event loop. ``enqueue`` never blocks and never
    raises; the drain worker is started on demand and exits once the pending
    set is empty.
    """

    def __init__(
        self,
        store: Any,
        generator: Any,
        generation_timeout: Optional[float] = 60.0,
        max_retries: int = 0,
    ):
        """
        Initialize an idle queue.

        Args:
            store: Record store used to read and update email records
            generator: Reply-generation capability
            generation_timeout: Seconds allowed per generation call (None disables)
            max_retries: How many times a failed item is re-queued (0 drops it)
        """
        if max_retries < 0:
            raise ValueError("max_retries must be zero or positive")

        self.store = store
        self.generator = generator
        self.generation_timeout = generation_timeout
        self.max_retries = max_retries

        self._pending: Dict[PriorityClass, Deque[QueueItem]] = {
            PriorityClass.URGENT: deque(),
            PriorityClass.NORMAL: deque(),
        }
        self._active: Optional[QueueItem] = None
        self._draining = False
        self._worker: Optional[asyncio.Task] = None
        self._idle = asyncio.Event()
        self._idle.set()
        self._counters = {outcome.value: 0 for outcome in ProcessingOutcome}
        self._counters["retried"] = 0

    @property
    def is_draining(self) -> bool:
        return self._draining

    def enqueue(self, email_id: str, is_urgent: bool = False) -> None:
        """
        Add an email to the queue and make sure the drain worker is running.

        The same id may be queued more than once; processing skips records
        that already carry a reply.

        Args:
            email_id: Identifier of the email record
            is_urgent: Whether the record is flagged urgent
        """
        item = QueueItem(
            email_id=email_id,
            priority_class=PriorityClass.for_urgency(is_urgent),
        )
        self._pending[item.priority_class].append(item)
        logger.info(f"Added email {email_id} to {item.priority_class.label} queue")
        self.start()

    def start(self) -> None:
        """Start the drain worker if items are pending and none is running."""
        if self._draining or not self._has_pending():
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "No running event loop; queued items will be drained on the next enqueue or start()"
            )
            return

        # Flag is set before the task is scheduled so a second call is a no-op
        self._draining = True
        self._idle.clear()
        self._worker = loop.create_task(self._drain())

    def stats(self) -> Dict[str, Dict[str, int]]:
        """
        Report waiting and active item counts per priority class.

        Returns:
            Dictionary shaped as ``{urgent|normal|total: {waiting, active}}``
        """
        active_class = self._active.priority_class if self._active else None
        urgent = {
            "waiting": len(self._pending[PriorityClass.URGENT]),
            "active": 1 if active_class == PriorityClass.URGENT else 0,
        }
        normal = {
            "waiting": len(self._pending[PriorityClass.NORMAL]),
            "active": 1 if active_class == PriorityClass.NORMAL else 0,
        }
        return {
            "urgent": urgent,
            "normal": normal,
            "total": {
                "waiting": urgent["waiting"] + normal["waiting"],
                "active": urgent["active"] + normal["active"],
            },
        }

    def counters(self) -> Dict[str, int]:
        """Cumulative per-outcome item counts since the queue was created."""
        return dict(self._counters)

    def __len__(self) -> int:
        return sum(len(items) for items in self._pending.values())

    async def join(self) -> None:
        """Wait until the queue is empty and the worker has stopped."""
        await self._idle.wait()

    async def close(self) -> None:
        """Stop the drain worker; pending items are discarded."""
        worker = self._worker
        if worker is not None and not worker.done():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass

        # A worker cancelled before its first step never reaches its own cleanup
        self._draining = False
        self._worker = None
        self._active = None
        self._idle.set()

        dropped = len(self)
        for items in self._pending.values():
            items.clear()
        if dropped:
            logger.warning(f"Queue closed with {dropped} unprocessed item(s)")

    def _has_pending(self) -> bool:
        return any(self._pending.values())

    def _pop_next(self) -> Optional[QueueItem]:
        for priority_class in sorted(self._pending):
            items = self._pending[priority_class]
            if items:
                return items.popleft()
        return None

    async def _drain(self) -> None:
        logger.info("Starting queue processing")
        try:
            while True:
                item = self._pop_next()
                if item is None:
                    break

                self._active = item
                try:
                    logger.info(f"Processing {item.priority_class.label} email: {item.email_id}")
                    outcome = await self._process_item(item)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.error(f"Error processing email {item.email_id}: {e}", exc_info=True)
                    outcome = ProcessingOutcome.FAILED
                    self._handle_failure(item)
                finally:
                    self._active = None

                self._counters[outcome.value] += 1
        finally:
            self._draining = False
            self._worker = None
            self._idle.set()
            logger.info("Queue processing completed")

    async def _process_item(self, item: QueueItem) -> ProcessingOutcome:
        email = await self.store.get_email_by_id(item.email_id)
        if email is None:
            logger.warning(f"Email not found, dropping queue item: {item.email_id}")
            return ProcessingOutcome.MISSING

        if email.get("ai_response"):
            logger.debug(f"Email {item.email_id} already has a reply, skipping")
            return ProcessingOutcome.SKIPPED

        reply = await asyncio.wait_for(
            self.generator.generate_reply(
                sender=email["sender"],
                subject=email["subject"],
                body=email["body"],
                sentiment=email.get("sentiment") or Sentiment.NEUTRAL.value,
                extracted_data=email.get("extracted_data") or {},
            ),
            timeout=self.generation_timeout,
        )

        updated = await self.store.update_email(item.email_id, {
            "ai_response": reply,
            "status": EmailStatus.PROCESSED.value,
            "processed_at": datetime.utcnow(),
        })
        if updated is None:
            logger.warning(f"Email {item.email_id} disappeared before its reply was saved")
            return ProcessingOutcome.MISSING

        logger.info(f"Generated AI response for email {item.email_id}")
        return ProcessingOutcome.PROCESSED

    def _handle_failure(self, item: QueueItem) -> None:
        if item.attempt >= self.max_retries:
            if self.max_retries:
                logger.error(
                    f"Giving up on email {item.email_id} after {item.attempt + 1} attempt(s)"
                )
            return

        retry = QueueItem(
            email_id=item.email_id,
            priority_class=item.priority_class,
            attempt=item.attempt + 1,
        )
        self._pending[retry.priority_class].append(retry)
        self._counters["retried"] += 1
        logger.info(
            f"Re-queued email {item.email_id} (attempt {retry.attempt + 1} of {self.max_retries + 1})"
        )
