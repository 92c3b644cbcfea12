"""
Unit tests for the enhanced Groq client.

The Groq SDK class is patched so no network calls are made; retries run
with a zero backoff delay.
"""

import json

import pytest
from unittest.mock import MagicMock, patch

from triage.integrations.groq import EnhancedGroqClient


@pytest.fixture
def mock_groq():
    with patch("triage.integrations.groq.client.Groq") as groq_class:
        yield groq_class


def make_client(mock_groq, **kwargs):
    kwargs.setdefault("api_key", "test-key")
    kwargs.setdefault("retry_delay", 0)
    return EnhancedGroqClient(**kwargs)


def test_requires_api_key(mock_groq, monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    with patch("triage.integrations.groq.client.load_dotenv"):
        with pytest.raises(ValueError):
            EnhancedGroqClient()


def test_api_key_from_environment(mock_groq, monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "env-key")

    client = EnhancedGroqClient()

    assert client.api_key == "env-key"
    mock_groq.assert_called_once_with(api_key="env-key")


async def test_process_with_retry_success(mock_groq):
    client = make_client(mock_groq)
    create = mock_groq.return_value.chat.completions.create
    create.return_value = "response"

    result = await client.process_with_retry(
        messages=[{"role": "user", "content": "hi"}],
        temperature=0.2,
        max_completion_tokens=128,
        response_format={"type": "json_object"},
    )

    assert result == "response"
    create.assert_called_once_with(
        model="llama-3.3-70b-versatile",
        messages=[{"role": "user", "content": "hi"}],
        temperature=0.2,
        max_completion_tokens=128,
        response_format={"type": "json_object"},
    )
    metrics = client.get_performance_metrics()
    assert metrics["total_requests"] == 1
    assert metrics["success_rate"] == 100


async def test_process_with_retry_recovers(mock_groq):
    client = make_client(mock_groq, max_retries=3)
    create = mock_groq.return_value.chat.completions.create
    create.side_effect = [Exception("rate limited"), "response"]

    result = await client.process_with_retry(messages=[], model="other-model")

    assert result == "response"
    assert create.call_count == 2
    assert create.call_args.kwargs["model"] == "other-model"
    assert len(client.metrics["errors"]) == 1


async def test_process_with_retry_gives_up(mock_groq):
    client = make_client(mock_groq, max_retries=2)
    create = mock_groq.return_value.chat.completions.create
    create.side_effect = Exception("unavailable")

    with pytest.raises(RuntimeError) as excinfo:
        await client.process_with_retry(messages=[])

    assert "Failed after 2 attempts: unavailable" in str(excinfo.value)
    assert create.call_count == 2


async def test_per_call_retry_override(mock_groq):
    client = make_client(mock_groq, max_retries=5)
    create = mock_groq.return_value.chat.completions.create
    create.side_effect = Exception("unavailable")

    with pytest.raises(RuntimeError):
        await client.process_with_retry(messages=[], max_retries=1)

    assert create.call_count == 1


async def test_metrics_persisted_to_file(mock_groq, tmp_path):
    metrics_file = tmp_path / "metrics" / "groq.json"
    client = make_client(mock_groq, metrics_file=str(metrics_file))
    mock_groq.return_value.chat.completions.create.return_value = MagicMock()

    await client.process_with_retry(messages=[])

    saved = json.loads(metrics_file.read_text())
    assert saved["performance"]["total_requests"] == 1

    reloaded = make_client(mock_groq, metrics_file=str(metrics_file))
    assert reloaded.get_performance_metrics()["total_requests"] == 1
