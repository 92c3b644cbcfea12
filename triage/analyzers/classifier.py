"""
EmailClassifier: Sentiment, Urgency and Entity Extraction

Annotates incoming support email before it is stored. Each analysis is a
single JSON-mode call to the language model; any failure degrades to a
neutral fallback so ingestion never stops on a classification error.

Design Considerations:
- JSON-mode prompts with strict output shapes
- Scores clamped to [0, 1]; the urgent flag is always derived locally
- Fallback values on every failure path
- The three analyses run concurrently for a single email
"""

import asyncio
import json
import logging
import traceback
from datetime import datetime
from typing import Any, Dict, List, Optional

from triage.config.analyzer_config import ANALYZER_CONFIG
from triage.integrations.groq.client import EnhancedGroqClient
from triage.integrations.groq.model_manager import ModelManager
from triage.models import (
    ClassificationResult,
    ExtractedData,
    Sentiment,
    SentimentAnalysis,
    UrgencyAnalysis,
    URGENCY_THRESHOLD,
    clamp_score,
)

logger = logging.getLogger(__name__)


class EmailClassifier:
    """
    Classification capability for support email.

    Produces sentiment, urgency and extracted entities for an email body
    using the Groq chat completion API.
    """

    def __init__(
        self,
        client: Optional[EnhancedGroqClient] = None,
        model_manager: Optional[ModelManager] = None,
    ):
        """
        Initialize classifier with a Groq client and model selection.

        Args:
            client: Shared Groq client; created from configuration when omitted
            model_manager: Per-task model selection
        """
        client_config = ANALYZER_CONFIG["client"]
        self.client = client or EnhancedGroqClient(
            default_model=client_config["default_model"],
            max_retries=client_config["retry_count"],
            retry_delay=client_config["retry_delay"],
        )
        self.model_manager = model_manager or ModelManager()
        self.config = ANALYZER_CONFIG["classifier"]
        self.fallbacks = self.config["fallbacks"]
        logger.debug("EmailClassifier initialized")

    async def classify(self, text: str) -> ClassificationResult:
        """
        Run sentiment, urgency and extraction analysis concurrently.

        Args:
            text: Email body

        Returns:
            Combined classification result; never raises
        """
        sentiment, urgency, extracted = await asyncio.gather(
            self.analyze_sentiment(text),
            self.analyze_urgency(text),
            self.extract_information(text),
        )
        return ClassificationResult(
            sentiment=sentiment,
            urgency=urgency,
            extracted_data=extracted,
        )

    async def analyze_sentiment(self, text: str) -> SentimentAnalysis:
        system_prompt = (
            "You are a sentiment analysis expert. Analyze the sentiment of the email text and "
            "provide a sentiment classification (positive, neutral, or negative) and a confidence "
            "score between 0 and 1. Respond with JSON in this format: "
            '{"sentiment": "positive|neutral|negative", "confidence": number}'
        )
        try:
            result = await self._complete_json("sentiment_analysis", system_prompt, text)
            return SentimentAnalysis(
                sentiment=Sentiment.parse(result.get("sentiment")),
                confidence=clamp_score(result.get("confidence"), self.fallbacks["confidence"]),
            )
        except Exception as e:
            logger.error(f"Failed to analyze sentiment: {e}\nStack trace: {traceback.format_exc()}")
            return SentimentAnalysis(
                sentiment=Sentiment(self.fallbacks["sentiment"]),
                confidence=self.fallbacks["confidence"],
            )

    async def analyze_urgency(self, text: str) -> UrgencyAnalysis:
        keywords = ", ".join(f"'{keyword}'" for keyword in self.config["urgency_keywords"])
        system_prompt = (
            "You are an urgency analysis expert for customer support emails. Analyze the urgency "
            f"of the email based on keywords like {keywords}, etc. Provide an urgency score "
            f"between 0 and 1, where scores >= {URGENCY_THRESHOLD} indicate urgent emails. "
            'Respond with JSON in this format: {"urgency": number}'
        )
        try:
            result = await self._complete_json("urgency_analysis", system_prompt, text)
            # The urgent flag is derived from the score, never trusted from the model
            score = clamp_score(result.get("urgency"), 0.0)
            return UrgencyAnalysis.from_score(score)
        except Exception as e:
            logger.error(f"Failed to analyze urgency: {e}\nStack trace: {traceback.format_exc()}")
            return UrgencyAnalysis.from_score(self.fallbacks["urgency"])

    async def extract_information(self, text: str) -> ExtractedData:
        system_prompt = (
            "You are an information extraction expert. Extract key information from customer "
            "support emails including phone numbers, alternate emails, order IDs, product names, "
            "and important keywords. Respond with JSON in this format: "
            '{"phone": string|null, "alternateEmail": string|null, "orderIds": string[], '
            '"productNames": string[], "keywords": string[]}'
        )
        try:
            result = await self._complete_json("information_extraction", system_prompt, text)
            return ExtractedData(
                phone=self._as_text(result.get("phone")),
                alternate_email=self._as_text(result.get("alternateEmail")),
                order_ids=self._as_list(result.get("orderIds")),
                product_names=self._as_list(result.get("productNames")),
                keywords=self._as_list(result.get("keywords")),
            )
        except Exception as e:
            logger.error(f"Failed to extract information: {e}\nStack trace: {traceback.format_exc()}")
            return ExtractedData()

    async def _complete_json(self, task_type: str, system_prompt: str, text: str) -> Dict[str, Any]:
        model_config = self.model_manager.get_model_config(task_type)
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": text[:self.config["max_input_chars"]]},
        ]

        start_time = datetime.now()
        try:
            response = await self.client.process_with_retry(
                messages=messages,
                model=model_config["name"],
                temperature=model_config["temperature"],
                max_completion_tokens=model_config["max_tokens"],
                response_format={"type": "json_object"},
            )
        except Exception:
            self.model_manager.record_performance(model_config["name"], task_type, {"success": False})
            raise

        processing_time = (datetime.now() - start_time).total_seconds()
        self.model_manager.record_performance(
            model_config["name"], task_type, {"success": True, "duration": processing_time}
        )

        content = response.choices[0].message.content or "{}"
        logger.debug(f"{task_type} completed in {processing_time:.3f}s: {content}")
        result = json.loads(content)
        if not isinstance(result, dict):
            raise ValueError(f"Expected a JSON object for {task_type}, got {type(result).__name__}")
        return result

    @staticmethod
    def _as_text(value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @staticmethod
    def _as_list(value: Any) -> List[str]:
        if not value:
            return []
        if isinstance(value, str):
            value = [value]
        return [str(item).strip() for item in value if str(item).strip()]
