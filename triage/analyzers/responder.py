"""
ResponseGenerator: Knowledge-Grounded Reply Drafting

Drafts a customer support reply for a classified email. Relevant
knowledge base documents are looked up from the subject and body and
placed in the system prompt so the reply cites actual policies.

Failures of the model call raise ``ResponseGenerationError``; the caller
decides whether to surface or swallow them.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from triage.config.analyzer_config import ANALYZER_CONFIG
from triage.integrations.groq.client import EnhancedGroqClient
from triage.integrations.groq.model_manager import ModelManager
from triage.knowledge.base import KnowledgeBase

logger = logging.getLogger(__name__)


class ResponseGenerationError(RuntimeError):
    """Raised when a reply could not be drafted."""


class ResponseGenerator:
    """Reply-generation capability backed by the Groq chat completion API."""

    def __init__(
        self,
        client: Optional[EnhancedGroqClient] = None,
        knowledge_base: Optional[KnowledgeBase] = None,
        model_manager: Optional[ModelManager] = None,
    ):
        client_config = ANALYZER_CONFIG["client"]
        self.client = client or EnhancedGroqClient(
            default_model=client_config["default_model"],
            max_retries=client_config["retry_count"],
            retry_delay=client_config["retry_delay"],
        )
        self.knowledge_base = knowledge_base or KnowledgeBase()
        self.model_manager = model_manager or ModelManager()
        self.config = ANALYZER_CONFIG["responder"]

    async def generate_reply(
        self,
        sender: str,
        subject: str,
        body: str,
        sentiment: str = "neutral",
        extracted_data: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Draft a reply to a customer email.

        Args:
            sender: Customer address
            subject: Email subject line
            body: Email body
            sentiment: Classified sentiment label
            extracted_data: Entities extracted during classification

        Returns:
            Reply text; the configured fallback reply when the model returns nothing

        Raises:
            ResponseGenerationError: If the model call fails
        """
        documents = self.knowledge_base.find_relevant(
            f"{subject} {body}", top_k=self.config["knowledge_top_k"]
        )
        logger.info(
            f"Drafting reply for {sender} with {len(documents)} knowledge document(s): "
            f"{[doc.id for doc in documents]}"
        )

        messages = [
            {
                "role": "system",
                "content": self._build_system_prompt(
                    KnowledgeBase.format_context(documents),
                    sentiment,
                    extracted_data or {},
                ),
            },
            {
                "role": "user",
                "content": (
                    f"Customer email from {sender}:\n"
                    f"Subject: {subject}\n\n"
                    f"{body}\n\n"
                    "Please generate an appropriate response using the knowledge base information."
                ),
            },
        ]

        model_config = self.model_manager.get_model_config("response_generation")
        try:
            response = await self.client.process_with_retry(
                messages=messages,
                model=model_config["name"],
                temperature=model_config["temperature"],
                max_completion_tokens=model_config["max_tokens"],
            )
        except Exception as e:
            self.model_manager.record_performance(
                model_config["name"], "response_generation", {"success": False}
            )
            logger.error(f"Failed to generate reply for {sender}: {e}")
            raise ResponseGenerationError(f"Failed to generate reply: {e}") from e

        self.model_manager.record_performance(
            model_config["name"], "response_generation", {"success": True}
        )
        reply = (response.choices[0].message.content or "").strip()
        if not reply:
            logger.warning(f"Model returned an empty reply for {sender}, using fallback")
            return self.config["fallback_reply"]
        return reply

    def _build_system_prompt(
        self,
        knowledge_context: str,
        sentiment: str,
        extracted_data: Dict[str, Any],
    ) -> str:
        case_reference = f"{self.config['case_reference_prefix']}-{datetime.utcnow().year}-XXXX"
        return f"""You are an empathetic customer support assistant with access to company knowledge base. Generate professional, context-aware responses using the provided knowledge base information.

IMPORTANT GUIDELINES:
- Always reference relevant policies and procedures from the knowledge base
- Be empathetic and understanding, especially for negative sentiment emails
- Reference specific information from the email (order IDs, product names, etc.)
- Provide clear next steps based on company policies
- If you cannot find relevant information in the knowledge base, acknowledge this and offer to escalate
- Always include a case reference number in format: {case_reference} (use random 4 digits)
- Stay grounded in the provided knowledge - don't make up policies or procedures

KNOWLEDGE BASE CONTEXT:
{knowledge_context or "No relevant knowledge base articles were found."}

Customer sentiment: {sentiment}
Extracted data: {json.dumps(extracted_data)}"""
