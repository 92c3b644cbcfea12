"""
Unit tests for per-task model selection.
"""

import pytest

from triage.integrations.groq import ModelManager


def test_simple_task_uses_primary_with_task_temperature():
    config = ModelManager().get_model_config("information_extraction")

    assert config["name"] == "llama-3.3-70b-versatile"
    assert config["temperature"] == 0.1
    assert config["max_tokens"] == 512
    assert config["json_output"] is True


def test_complex_task_settings():
    config = ModelManager().get_model_config("response_generation")

    assert config["max_tokens"] == 1024
    assert config["temperature"] == 0.6
    assert config["json_output"] is False


def test_unknown_task_rejected():
    with pytest.raises(ValueError):
        ModelManager().get_model_config("translation")


def test_forced_model_and_overrides():
    manager = ModelManager(overrides={"sentiment_analysis": "override-model"})

    assert manager.get_model_config("sentiment_analysis")["name"] == "override-model"
    assert manager.get_model_config("urgency_analysis", force_model="forced")["name"] == "forced"
    assert manager.get_model_config("urgency_analysis")["name"] == "llama-3.3-70b-versatile"


def test_fallback_after_consecutive_failures():
    manager = ModelManager(error_window=3)
    primary = "llama-3.3-70b-versatile"

    for _ in range(2):
        manager.record_performance(primary, "sentiment_analysis", {"success": False})
    assert manager.get_model_config("sentiment_analysis")["name"] == primary

    manager.record_performance(primary, "sentiment_analysis", {"success": False})
    assert manager.get_model_config("sentiment_analysis")["name"] == "llama-3.1-8b-instant"


def test_recovers_after_success():
    manager = ModelManager(error_window=2)
    primary = "llama-3.3-70b-versatile"

    manager.record_performance(primary, "response_generation", {"success": False})
    manager.record_performance(primary, "response_generation", {"success": False})
    manager.record_performance(primary, "response_generation", {"success": True})

    assert manager.get_model_config("response_generation")["name"] == primary


def test_record_performance_keeps_history():
    manager = ModelManager()
    manager.record_performance("m", "sentiment_analysis", {"success": True, "duration": 0.4})

    history = manager.performance_metrics["models"]["m"]
    assert history[0]["task_type"] == "sentiment_analysis"
    assert history[0]["duration"] == 0.4
    assert "timestamp" in history[0]
