"""
Unit tests for the shared triage data models.
"""

import pytest

from triage.models import (
    EmailStatus,
    ExtractedData,
    PriorityClass,
    Sentiment,
    UrgencyAnalysis,
    clamp_score,
    is_urgent_score,
)


@pytest.mark.parametrize("current, target, allowed", [
    (EmailStatus.PENDING, EmailStatus.PENDING, True),
    (EmailStatus.PENDING, EmailStatus.PROCESSED, True),
    (EmailStatus.PENDING, EmailStatus.SENT, False),
    (EmailStatus.PROCESSED, EmailStatus.SENT, True),
    (EmailStatus.PROCESSED, EmailStatus.PENDING, False),
    (EmailStatus.SENT, EmailStatus.PROCESSED, False),
    (EmailStatus.SENT, EmailStatus.SENT, True),
])
def test_status_transitions(current, target, allowed):
    assert current.can_transition_to(target) is allowed


def test_urgency_threshold_is_inclusive():
    assert is_urgent_score(0.6)
    assert not is_urgent_score(0.5999)
    assert UrgencyAnalysis.from_score(0.75).is_urgent


def test_clamp_score():
    assert clamp_score("0.4", 0.0) == 0.4
    assert clamp_score(7, 0.0) == 1.0
    assert clamp_score(None, 0.3) == 0.3


def test_priority_class_ordering():
    assert PriorityClass.for_urgency(True) < PriorityClass.for_urgency(False)
    assert PriorityClass.URGENT.label == "urgent"


def test_sentiment_parse():
    assert Sentiment.parse(" Negative ") == Sentiment.NEGATIVE
    assert Sentiment.parse(None) == Sentiment.NEUTRAL


def test_extracted_data_omits_empty_fields():
    data = ExtractedData(phone="555-0100", order_ids=["A-1"])
    assert data.to_dict() == {"phone": "555-0100", "order_ids": ["A-1"]}
