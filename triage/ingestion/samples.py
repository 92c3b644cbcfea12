"""Demo messages loaded by the dashboard's sync action."""

from typing import List

from triage.models import InboundMessage

SAMPLE_EMAILS = [
    {
        "sender": "sarah.johnson@techcorp.com",
        "subject": "Critical System Outage - Need Immediate Support",
        "body": (
            "Dear Support Team,\n\nOur entire customer portal is down since 2 PM today and we're "
            "losing revenue by the minute. This is absolutely critical as we have hundreds of "
            "customers trying to place orders.\n\nOur system shows error 500 on all pages. Order ID "
            "that was affected: #TC-2024-1891\n\nPlease contact me immediately at +1-555-0123.\n\n"
            "Best regards,\nSarah Johnson\nTechCorp Inc."
        ),
    },
    {
        "sender": "dev.team@startupco.io",
        "subject": "Question About API Rate Limits",
        "body": (
            "Hi,\n\nWe're integrating your API and wondering about the rate limits for our "
            "enterprise plan. Can you provide documentation or clarify the current limits?\n\n"
            "Alternate contact: tech@startupco.io\n\nThanks!"
        ),
    },
    {
        "sender": "mike.rodriguez@gmail.com",
        "subject": "Refund Request - Account Charged Incorrectly",
        "body": (
            "I was charged twice for my subscription renewal. Please process a refund immediately "
            "as this is affecting my business operations. Invoice #INV-2024-3421. My phone is "
            "+1-555-0456."
        ),
    },
]


def sample_messages() -> List[InboundMessage]:
    return [InboundMessage(**sample) for sample in SAMPLE_EMAILS]
