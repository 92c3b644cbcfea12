"""
API Configuration Management

Provides centralized configuration handling with environment-aware
settings, loaded from environment variables and an optional ``.env`` file.

Design Considerations:
- Environment-specific configuration profiles
- Secure handling of the language-model API key
- Validation of queue and CORS settings
"""

from enum import Enum
from typing import Dict, Optional

from pydantic_settings import BaseSettings
from pydantic import Field, SecretStr, field_validator


class EnvironmentType(str, Enum):
    """Valid environment types for configuration context."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class APISettings(BaseSettings):
    """
    API configuration settings with environment-specific defaults and validation.
    """
    # Environment Configuration
    ENVIRONMENT: EnvironmentType = Field(
        default=EnvironmentType.DEVELOPMENT,
        description="Runtime environment context"
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    # API Settings
    API_TITLE: str = Field(
        default="Support Triage API",
        description="API title for documentation"
    )
    API_DESCRIPTION: str = Field(
        default="Customer support email triage with prioritized AI reply drafting",
        description="API description for documentation"
    )
    API_VERSION: str = Field(
        default="1.0.0",
        description="API version"
    )

    # Language model
    GROQ_API_KEY: Optional[SecretStr] = Field(
        default=None,
        description="Groq API key; read from GROQ_API_KEY when unset"
    )
    MODEL_OVERRIDES: str = Field(
        default="",
        description="Comma-separated task=model pairs overriding the default model selection"
    )

    # Processing queue
    QUEUE_GENERATION_TIMEOUT_SECONDS: float = Field(
        default=60.0,
        gt=0,
        description="Maximum seconds a single reply generation may take inside the queue"
    )
    QUEUE_MAX_RETRIES: int = Field(
        default=0,
        ge=0,
        le=10,
        description="How many times a failed queue item is re-queued (0 drops it)"
    )
    AUTO_ENQUEUE: bool = Field(
        default=True,
        description="Queue newly created emails for reply generation automatically"
    )

    # CORS Settings
    CORS_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed origins for CORS"
    )
    CORS_METHODS: str = Field(
        default="GET,POST,PATCH,OPTIONS",
        description="Comma-separated list of allowed methods for CORS"
    )

    @field_validator("CORS_ORIGINS")
    @classmethod
    def parse_cors_origins(cls, value: str) -> list:
        """Parse comma-separated CORS origins into list."""
        if value == "*":
            return ["*"]
        return [origin.strip() for origin in value.split(",") if origin.strip()]

    @field_validator("CORS_METHODS")
    @classmethod
    def parse_cors_methods(cls, value: str) -> list:
        """Parse comma-separated CORS methods into list."""
        return [method.strip() for method in value.split(",") if method.strip()]

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level

    @property
    def model_overrides(self) -> Dict[str, str]:
        """Parse MODEL_OVERRIDES into a task -> model mapping."""
        overrides = {}
        for pair in self.MODEL_OVERRIDES.split(","):
            if "=" in pair:
                task, model = pair.split("=", 1)
                if task.strip() and model.strip():
                    overrides[task.strip()] = model.strip()
        return overrides

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore"
    }


def get_settings() -> APISettings:
    """
    Retrieve validated API settings.

    Raises:
        ValidationError: If configuration fails validation
    """
    return APISettings()
