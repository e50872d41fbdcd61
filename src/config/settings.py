"""
Environment-specific configuration settings.

Fixture sizes and seeds are pinned so every process builds the same dataset.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional
import os


@dataclass
class Settings:
    """Application settings with demo-friendly defaults."""

    # Environment
    environment: str = "dev"
    aws_region: str = "eu-west-2"

    # Bedrock text enhancement (off unless explicitly enabled)
    llm_enhancement_enabled: bool = False
    model_id: str = "anthropic.claude-3-haiku-20240307-v1:0"
    llm_timeout_seconds: float = 8.0
    llm_max_tokens: int = 300
    llm_temperature: float = 0.7

    # Cache Configuration
    cache_ttl_seconds: int = 300  # 5 minutes
    cache_max_size: int = 100

    # Phrase variation; None means a fresh random source per process
    phrase_seed: Optional[int] = None

    # Dataset fixtures
    reference_date: date = date(2025, 2, 1)
    churn_threshold_months: int = 18
    customer_count: int = 500
    organic_booking_count: int = 200
    customer_seed: int = 42
    campaign_seed: int = 7
    booking_seed: int = 123

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        env = os.environ.get("ENVIRONMENT", "dev")
        enabled_default = "true" if env == "prod" else "false"
        enhancement = (
            os.environ.get("LLM_ENHANCEMENT_ENABLED", enabled_default).lower() == "true"
        )
        region = (
            os.environ.get("BEDROCK_REGION")
            or os.environ.get("AWS_REGION")
            or cls.aws_region
        )
        seed = os.environ.get("PHRASE_SEED")

        return cls(
            environment=env,
            aws_region=region,
            llm_enhancement_enabled=enhancement,
            model_id=os.environ.get("MODEL_ID", cls.model_id),
            llm_timeout_seconds=float(os.environ.get("LLM_TIMEOUT_SECONDS", "8")),
            llm_max_tokens=int(os.environ.get("LLM_MAX_TOKENS", "300")),
            llm_temperature=float(os.environ.get("LLM_TEMPERATURE", "0.7")),
            cache_ttl_seconds=int(os.environ.get("CACHE_TTL_SECONDS", "300")),
            cache_max_size=int(os.environ.get("CACHE_MAX_SIZE", "100")),
            phrase_seed=int(seed) if seed else None,
            churn_threshold_months=int(os.environ.get("CHURN_THRESHOLD_MONTHS", "18")),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Lazy-load settings once per process."""
    global _settings
    if _settings is None:
        _settings = Settings.from_environment()
    return _settings
