"""
Unit tests for the email ingestion service.

Repository, classifier and queue are mocked so the tests focus on the
filtering, duplicate suppression, enqueueing and per-message isolation.
"""

from datetime import datetime

import pytest
from unittest.mock import AsyncMock, MagicMock

from triage.ingestion import EmailIngestionService, SAMPLE_EMAILS, sample_messages
from triage.models import (
    ClassificationResult,
    ExtractedData,
    InboundMessage,
    Sentiment,
    SentimentAnalysis,
    UrgencyAnalysis,
)


def classification(urgency=0.2, sentiment=Sentiment.NEUTRAL):
    return ClassificationResult(
        sentiment=SentimentAnalysis(sentiment=sentiment, confidence=0.9),
        urgency=UrgencyAnalysis.from_score(urgency),
        extracted_data=ExtractedData(keywords=["help"]),
    )


@pytest.fixture
def repository():
    repo = MagicMock()
    counter = {"next": 0}

    async def create_email(data):
        counter["next"] += 1
        return {
            "id": f"id-{counter['next']}",
            "is_urgent": data["urgency"] >= 0.6,
            **data,
        }

    repo.create_email = AsyncMock(side_effect=create_email)
    repo.find_duplicate = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def classifier():
    mock_classifier = MagicMock()
    mock_classifier.classify = AsyncMock(return_value=classification())
    return mock_classifier


@pytest.fixture
def queue():
    return MagicMock()


@pytest.fixture
def service(repository, classifier, queue):
    return EmailIngestionService(repository=repository, classifier=classifier, queue=queue)


class TestCreateEmail:

    async def test_classifies_stores_and_enqueues(self, service, repository, classifier, queue):
        classifier.classify.return_value = classification(urgency=0.9, sentiment=Sentiment.NEGATIVE)

        email = await service.create_email("a@example.com", "Outage", "Everything is down")

        classifier.classify.assert_awaited_once_with("Everything is down")
        stored = repository.create_email.await_args.args[0]
        assert stored["sentiment"] == "negative"
        assert stored["urgency"] == 0.9
        assert stored["extracted_data"] == {"keywords": ["help"]}
        assert "received_at" not in stored
        queue.enqueue.assert_called_once_with(email["id"], is_urgent=True)

    async def test_without_queue_only_stores(self, repository, classifier):
        service = EmailIngestionService(repository=repository, classifier=classifier)

        email = await service.create_email("a@example.com", "Question", "Need help")

        assert email["id"] == "id-1"

    async def test_store_errors_propagate(self, service, repository, queue):
        repository.create_email.side_effect = ValueError("Missing required email fields: body")

        with pytest.raises(ValueError):
            await service.create_email("a@example.com", "Question", "")

        queue.enqueue.assert_not_called()


class TestIngest:

    async def test_support_keyword_filter(self, service, repository):
        messages = [
            InboundMessage(sender="a@example.com", subject="Need help", body="Login issue"),
            InboundMessage(sender="b@example.com", subject="Lunch?", body="Tacos at noon"),
        ]

        created = await service.ingest(messages)

        assert [email["sender"] for email in created] == ["a@example.com"]
        assert repository.create_email.await_count == 1

    def test_is_support_email_case_insensitive(self, service):
        assert service.is_support_email("BUG in checkout", "")
        assert not service.is_support_email("Newsletter", "Monthly highlights")

    async def test_filter_can_be_disabled(self, service):
        messages = [InboundMessage(sender="b@example.com", subject="Lunch?", body="Tacos at noon")]

        created = await service.ingest(messages, require_support_keywords=False)
        assert len(created) == 1

    async def test_duplicates_skipped(self, service, repository, queue):
        repository.find_duplicate.return_value = {"id": "existing"}
        received = datetime(2026, 1, 5, 9, 30)
        messages = [
            InboundMessage(sender="a@example.com", subject="Help", body="Issue", received_at=received)
        ]

        created = await service.ingest(messages)

        assert created == []
        repository.find_duplicate.assert_awaited_once_with(
            sender="a@example.com",
            subject="Help",
            received_at=received,
            window_seconds=60,
        )
        repository.create_email.assert_not_called()
        queue.enqueue.assert_not_called()

    async def test_received_at_is_kept(self, service, repository):
        received = datetime(2026, 1, 5, 9, 30)
        messages = [
            InboundMessage(sender="a@example.com", subject="Help", body="Issue", received_at=received)
        ]

        await service.ingest(messages)

        assert repository.create_email.await_args.args[0]["received_at"] == received

    async def test_one_failure_does_not_stop_batch(self, service, classifier, queue):
        classifier.classify.side_effect = [RuntimeError("classifier down"), classification(urgency=0.7)]
        messages = [
            InboundMessage(sender="a@example.com", subject="Help", body="First issue"),
            InboundMessage(sender="b@example.com", subject="Help", body="Second issue"),
        ]

        created = await service.ingest(messages)

        assert [email["sender"] for email in created] == ["b@example.com"]
        queue.enqueue.assert_called_once_with(created[0]["id"], is_urgent=True)

    async def test_custom_keywords_and_window(self, repository, classifier):
        service = EmailIngestionService(
            repository=repository,
            classifier=classifier,
            support_keywords=["Warranty"],
            duplicate_window_seconds=0,
        )
        messages = [
            InboundMessage(sender="a@example.com", subject="Warranty claim", body="Broken"),
            InboundMessage(sender="b@example.com", subject="Need help", body="Issue"),
        ]

        created = await service.ingest(messages)

        assert [email["sender"] for email in created] == ["a@example.com"]
        assert repository.find_duplicate.await_args.kwargs["window_seconds"] == 0


def test_sample_messages_match_samples():
    messages = sample_messages()

    assert len(messages) == len(SAMPLE_EMAILS) == 3
    assert all(isinstance(message, InboundMessage) for message in messages)
    assert messages[0].sender == "sarah.johnson@techcorp.com"
