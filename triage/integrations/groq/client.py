from groq import Groq
from typing import Dict, List, Optional
from datetime import datetime
import asyncio
import json
import os
from pathlib import Path
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)


class EnhancedGroqClient:
    """Groq client with retry logic, error handling and request metrics."""

    def __init__(self,
                 api_key: Optional[str] = None,
                 default_model: str = 'llama-3.3-70b-versatile',
                 max_retries: int = 3,
                 retry_delay: float = 1.0,
                 metrics_file: Optional[str] = None):
        """Initialize the enhanced Groq client with API key from environment or parameter.

        Args:
            api_key: Groq API key; falls back to the GROQ_API_KEY environment variable
            default_model: Model used when a call does not name one
            max_retries: Attempts per request before giving up
            retry_delay: Base delay in seconds for exponential backoff
            metrics_file: Optional JSON file the metrics are persisted to
        """
        load_dotenv(override=False)
        self.api_key = api_key or os.getenv('GROQ_API_KEY')
        if not self.api_key:
            raise ValueError("GROQ_API_KEY must be provided either through initialization or environment")

        self.client = Groq(api_key=self.api_key)
        self.default_model = default_model
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        self.metrics_file = metrics_file
        if self.metrics_file:
            Path(self.metrics_file).parent.mkdir(parents=True, exist_ok=True)
        self.load_metrics()

    def load_metrics(self):
        """Load or initialize performance metrics."""
        self.metrics = None
        if self.metrics_file:
            try:
                with open(self.metrics_file, 'r') as f:
                    self.metrics = json.load(f)
            except (FileNotFoundError, json.JSONDecodeError):
                logger.debug(f"Starting fresh metrics file at {self.metrics_file}")

        if not self.metrics:
            self.metrics = {
                'requests': [],
                'errors': [],
                'performance': {
                    'avg_response_time': 0,
                    'total_requests': 0,
                    'success_rate': 100
                }
            }

    def save_metrics(self):
        """Save current metrics to file when persistence is enabled."""
        if not self.metrics_file:
            return
        with open(self.metrics_file, 'w') as f:
            json.dump(self.metrics, f, indent=2)

    async def process_with_retry(self,
                                 messages: List[Dict],
                                 model: Optional[str] = None,
                                 max_retries: Optional[int] = None,
                                 **kwargs):
        """Process a chat completion request with retry logic and error handling.

        Args:
            messages: List of message dictionaries for the conversation
            model: Model name, defaults to the client's default model
            max_retries: Override for the number of attempts
            **kwargs: Additional parameters for the API call

        Returns:
            Chat completion response object

        Raises:
            RuntimeError: If every attempt fails
        """
        attempts = max_retries or self.max_retries
        start_time = datetime.now()
        retries = 0
        last_error = None

        params = {
            'model': model or self.default_model,
            'messages': messages,
            'temperature': kwargs.pop('temperature', 0.7),
            'max_completion_tokens': kwargs.pop('max_completion_tokens', 2048),
            **kwargs
        }

        while retries < attempts:
            try:
                response = await asyncio.to_thread(self.client.chat.completions.create, **params)
                self.record_success(start_time)
                return response

            except Exception as e:
                retries += 1
                last_error = str(e)
                self.record_error(last_error)

                if retries == attempts:
                    logger.error(f"Failed after {attempts} attempts: {last_error}")
                    raise RuntimeError(f"Failed after {attempts} attempts: {last_error}") from e

                # Exponential backoff
                wait_time = self.retry_delay * (2 ** (retries - 1))
                logger.warning(f"Attempt {retries} failed. Waiting {wait_time} seconds before retry...")
                await asyncio.sleep(wait_time)

    def record_success(self, start_time: datetime):
        """Record successful request metrics."""
        duration = (datetime.now() - start_time).total_seconds()
        self.metrics['requests'].append({
            'timestamp': datetime.now().isoformat(),
            'duration': duration,
            'status': 'success'
        })

        # Update aggregate performance metrics
        total_reqs = len(self.metrics['requests'])
        self.metrics['performance'].update({
            'avg_response_time': (
                    (self.metrics['performance']['avg_response_time'] * (total_reqs - 1) + duration)
                    / total_reqs
            ),
            'total_requests': total_reqs,
            'success_rate': (
                    total_reqs / (total_reqs + len(self.metrics['errors'])) * 100
            )
        })

        self.save_metrics()

    def record_error(self, error_message: str):
        """Record error metrics."""
        self.metrics['errors'].append({
            'timestamp': datetime.now().isoformat(),
            'error': error_message
        })
        self.save_metrics()

    def get_performance_metrics(self) -> Dict:
        """Get current performance metrics."""
        return self.metrics['performance']
