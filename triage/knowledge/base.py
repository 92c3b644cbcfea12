"""
Knowledge Base Lookup

Holds the curated support documents replies are grounded on and ranks
them against a free-text query by keyword overlap.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from triage.config.analyzer_config import ANALYZER_CONFIG

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KnowledgeDocument:
    id: str
    title: str
    content: str
    category: str

    @property
    def searchable_text(self) -> str:
        return f"{self.title} {self.content}".lower()


DEFAULT_DOCUMENTS = [
    KnowledgeDocument(
        id="refund-policy",
        title="Refund Policy",
        content=(
            "We offer full refunds within 30 days of purchase. For digital products, refunds are "
            "processed within 3-5 business days. For physical products, items must be returned in "
            "original condition. Contact billing@company.com for refund requests."
        ),
        category="billing",
    ),
    KnowledgeDocument(
        id="account-access",
        title="Account Access Issues",
        content=(
            "If you cannot access your account, try resetting your password first. If the issue "
            "persists, verify your email address is correct. For security reasons, we may "
            "temporarily lock accounts after multiple failed login attempts. Contact "
            "security@company.com for account recovery."
        ),
        category="technical",
    ),
    KnowledgeDocument(
        id="shipping-info",
        title="Shipping Information",
        content=(
            "Standard shipping takes 5-7 business days. Express shipping is available for next-day "
            "delivery. International shipping may take 10-14 days. Tracking numbers are provided "
            "once items ship. Contact shipping@company.com for delivery issues."
        ),
        category="shipping",
    ),
    KnowledgeDocument(
        id="product-support",
        title="Product Support",
        content=(
            "Our products come with 1-year warranty. Common issues can be resolved by restarting the "
            "device or checking cable connections. Download user manuals from our support portal. "
            "For hardware issues, contact hardware@company.com."
        ),
        category="product",
    ),
    KnowledgeDocument(
        id="subscription-management",
        title="Subscription Management",
        content=(
            "You can upgrade, downgrade, or cancel your subscription anytime from your account "
            "dashboard. Billing cycles are monthly or annual. Cancellations take effect at the end "
            "of your current billing period. Contact billing@company.com for subscription changes."
        ),
        category="billing",
    ),
]


class KnowledgeBase:
    """
    Keyword-ranked lookup over a small, in-memory document set.

    A document matches a query when it contains at least one of the query's
    words of ``min_word_length`` characters or more. Matches are ordered by
    the number of matching words, ties keeping document order.
    """

    def __init__(
        self,
        documents: Optional[Iterable[KnowledgeDocument]] = None,
        min_word_length: Optional[int] = None,
    ):
        config = ANALYZER_CONFIG["knowledge_base"]
        self.documents: List[KnowledgeDocument] = list(
            DEFAULT_DOCUMENTS if documents is None else documents
        )
        self.min_word_length = min_word_length or config["min_word_length"]
        self.fallback_count = config["fallback_document_count"]

    def find_relevant(self, query: str, top_k: int = 3) -> List[KnowledgeDocument]:
        """
        Return up to ``top_k`` documents relevant to the query.

        Args:
            query: Free text, usually the email subject and body
            top_k: Maximum number of documents returned

        Returns:
            Documents ordered by descending relevance; the first few documents
            when ranking fails
        """
        try:
            words = [
                word for word in query.lower().split()
                if len(word) >= self.min_word_length
            ]
            scored = []
            for document in self.documents:
                text = document.searchable_text
                matches = sum(1 for word in words if word in text)
                if matches > 0:
                    scored.append((matches, document))

            scored.sort(key=lambda pair: pair[0], reverse=True)
            relevant = [document for _, document in scored[:top_k]]
            logger.debug(f"Knowledge lookup matched {len(scored)} document(s), returning {len(relevant)}")
            return relevant
        except Exception as e:
            logger.error(f"Error finding relevant knowledge: {e}")
            return self.documents[:self.fallback_count]

    @staticmethod
    def format_context(documents: Iterable[KnowledgeDocument]) -> str:
        """Render documents as prompt context blocks."""
        return "\n\n".join(
            f"**{doc.title}** ({doc.category}):\n{doc.content}" for doc in documents
        )
