"""
Test suite for the EmailClassifier component.

The Groq client is replaced with a mock so no requests leave the process.
Each analysis is exercised for its parsed result and for its fallback when
the model call or its JSON payload fails.

Testing strategy:
1. Mock process_with_retry, dispatching on the system prompt
2. Verify parsing and normalization of each analysis
3. Verify per-analysis fallbacks never leak exceptions
4. Verify model selection and performance recording
"""

import json
from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock, MagicMock

from triage.analyzers.classifier import EmailClassifier
from triage.integrations.groq import ModelManager
from triage.models import Sentiment


def completion(content):
    """Build an object shaped like a Groq chat completion."""
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def routed_client(sentiment=None, urgency=None, extraction=None):
    """
    Client whose replies depend on which analysis is asking.

    Each argument is either a payload dict, raw string content, or an
    exception instance to raise.
    """
    routes = {
        "sentiment analysis expert": sentiment,
        "urgency analysis expert": urgency,
        "information extraction expert": extraction,
    }

    async def process_with_retry(messages, **kwargs):
        system_prompt = messages[0]["content"]
        for marker, payload in routes.items():
            if marker in system_prompt:
                if isinstance(payload, Exception):
                    raise payload
                if isinstance(payload, dict):
                    return completion(json.dumps(payload))
                return completion(payload)
        raise AssertionError("unexpected prompt")

    client = MagicMock()
    client.process_with_retry = AsyncMock(side_effect=process_with_retry)
    return client


@pytest.fixture
def model_manager():
    return ModelManager()


class TestClassify:

    async def test_combines_all_analyses(self, model_manager):
        client = routed_client(
            sentiment={"sentiment": "negative", "confidence": 0.92},
            urgency={"urgency": 0.85},
            extraction={
                "phone": "555-0100",
                "alternateEmail": None,
                "orderIds": ["#12345"],
                "productNames": ["Smart Watch"],
                "keywords": ["refund", "urgent"],
            },
        )
        classifier = EmailClassifier(client=client, model_manager=model_manager)

        result = await classifier.classify("My smart watch order #12345 is broken, I need a refund now!")

        assert result.sentiment.sentiment == Sentiment.NEGATIVE
        assert result.sentiment.confidence == 0.92
        assert result.urgency.urgency == 0.85
        assert result.urgency.is_urgent is True
        assert result.extracted_data.order_ids == ["#12345"]
        assert result.to_record_fields() == {
            "sentiment": "negative",
            "urgency": 0.85,
            "extracted_data": {
                "phone": "555-0100",
                "order_ids": ["#12345"],
                "product_names": ["Smart Watch"],
                "keywords": ["refund", "urgent"],
            },
        }
        assert client.process_with_retry.await_count == 3

    async def test_requests_json_output(self, model_manager):
        client = routed_client(
            sentiment={"sentiment": "neutral", "confidence": 0.5},
            urgency={"urgency": 0.1},
            extraction={},
        )
        classifier = EmailClassifier(client=client, model_manager=model_manager)

        await classifier.classify("Just a question about shipping.")

        for call in client.process_with_retry.await_args_list:
            assert call.kwargs["response_format"] == {"type": "json_object"}
            assert call.kwargs["model"] == "llama-3.3-70b-versatile"

    async def test_every_analysis_falls_back_independently(self, model_manager):
        client = routed_client(
            sentiment=RuntimeError("Failed after 3 attempts"),
            urgency="not json at all",
            extraction={"orderIds": ["A-1"]},
        )
        classifier = EmailClassifier(client=client, model_manager=model_manager)

        result = await classifier.classify("Where is my order A-1?")

        assert result.sentiment.sentiment == Sentiment.NEUTRAL
        assert result.sentiment.confidence == 0.5
        assert result.urgency.urgency == 0.3
        assert result.urgency.is_urgent is False
        assert result.extracted_data.order_ids == ["A-1"]


class TestIndividualAnalyses:

    async def test_unknown_sentiment_label_maps_to_neutral(self, model_manager):
        client = routed_client(sentiment={"sentiment": "ecstatic", "confidence": 3})
        classifier = EmailClassifier(client=client, model_manager=model_manager)

        analysis = await classifier.analyze_sentiment("Great job!")

        assert analysis.sentiment == Sentiment.NEUTRAL
        assert analysis.confidence == 1.0

    async def test_urgent_flag_derived_from_score(self, model_manager):
        client = routed_client(urgency={"urgency": 0.6, "isUrgent": False})
        classifier = EmailClassifier(client=client, model_manager=model_manager)

        analysis = await classifier.analyze_urgency("System is down!")

        assert analysis.urgency == 0.6
        assert analysis.is_urgent is True

    async def test_urgency_score_is_clamped(self, model_manager):
        client = routed_client(urgency={"urgency": -2})
        classifier = EmailClassifier(client=client, model_manager=model_manager)

        analysis = await classifier.analyze_urgency("No rush.")
        assert analysis.urgency == 0.0

    async def test_extraction_normalizes_values(self, model_manager):
        client = routed_client(extraction={
            "phone": "  ",
            "alternateEmail": "backup@example.com",
            "orderIds": "ORD-9",
            "productNames": ["", "Laptop"],
            "keywords": None,
        })
        classifier = EmailClassifier(client=client, model_manager=model_manager)

        data = await classifier.extract_information("Order ORD-9 laptop")

        assert data.phone is None
        assert data.alternate_email == "backup@example.com"
        assert data.order_ids == ["ORD-9"]
        assert data.product_names == ["Laptop"]
        assert data.keywords == []

    async def test_non_object_json_falls_back(self, model_manager):
        client = routed_client(extraction="[1, 2, 3]")
        classifier = EmailClassifier(client=client, model_manager=model_manager)

        data = await classifier.extract_information("anything")
        assert data.to_dict() == {}

    async def test_input_is_truncated(self, model_manager):
        client = routed_client(sentiment={"sentiment": "neutral", "confidence": 0.5})
        classifier = EmailClassifier(client=client, model_manager=model_manager)

        await classifier.analyze_sentiment("x" * 20000)

        messages = client.process_with_retry.await_args.kwargs["messages"]
        assert len(messages[1]["content"]) == classifier.config["max_input_chars"]


class TestModelTracking:

    async def test_records_success_and_failure(self):
        manager = MagicMock(wraps=ModelManager())
        client = routed_client(
            sentiment={"sentiment": "positive", "confidence": 0.8},
            urgency=RuntimeError("boom"),
            extraction={},
        )
        classifier = EmailClassifier(client=client, model_manager=manager)

        await classifier.classify("Thanks for the quick help!")

        outcomes = {
            call.args[1]: call.args[2]["success"]
            for call in manager.record_performance.call_args_list
        }
        assert outcomes == {
            "sentiment_analysis": True,
            "urgency_analysis": False,
            "information_extraction": True,
        }
