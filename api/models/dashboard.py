"""
Dashboard Data Models

Defines models for dashboard analytics.
"""

from pydantic import BaseModel, Field


class SentimentDistribution(BaseModel):
    """Share of emails per sentiment, in whole percent."""

    positive: int = Field(..., ge=0, le=100, description="Positive emails (%)")
    neutral: int = Field(..., ge=0, le=100, description="Neutral emails (%)")
    negative: int = Field(..., ge=0, le=100, description="Negative emails (%)")


class ProcessingStats(BaseModel):
    """Email counts per reply status."""

    pending: int = Field(..., ge=0, description="Emails waiting for a reply")
    processed: int = Field(..., ge=0, description="Emails with a drafted reply")
    sent: int = Field(..., ge=0, description="Emails whose reply was sent")


class AnalyticsResponse(BaseModel):
    """Aggregate metrics for the dashboard header and charts."""

    total_emails: int = Field(..., ge=0, description="Total number of emails")
    urgent_emails: int = Field(..., ge=0, description="Number of urgent emails")
    avg_response_time: float = Field(..., ge=0.0, description="Average hours from receipt to drafted reply")
    resolution_rate: int = Field(..., ge=0, le=100, description="Percentage of emails processed or sent")
    sentiment_distribution: SentimentDistribution
    processing_stats: ProcessingStats
