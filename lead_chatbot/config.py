"""
Centralized configuration with environment variable overrides.

All matching thresholds, engagement bounds, and response settings are
configurable here. Nothing is hardcoded in classifier or generator logic.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from lead_chatbot.logging_context import SESSION_LOG_FORMAT, session_log_handler

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _optional_int(env_var: str) -> Optional[int]:
    """Parse an optional integer; unset or empty means None."""
    raw = os.getenv(env_var)
    if raw is None or raw.strip() == "":
        return None
    return _safe_int(env_var, raw)


@dataclass(frozen=True)
class BusinessConfig:
    """Company defaults used when the knowledge base leaves a value out."""

    name: str = os.getenv("COMPANY_NAME", "nossa empresa")
    default_tone: str = os.getenv("DEFAULT_TONE", "friendly")


@dataclass(frozen=True)
class MatchingConfig:
    """Relevance thresholds for the knowledge base matcher."""

    product_threshold: float = _safe_float("PRODUCT_THRESHOLD", "0.2")
    faq_threshold: float = _safe_float("FAQ_THRESHOLD", "0.4")
    max_product_results: int = _safe_int("MAX_PRODUCT_RESULTS", "3")
    specific_product_min_score: float = _safe_float("SPECIFIC_PRODUCT_MIN_SCORE", "0.4")


@dataclass(frozen=True)
class EngagementConfig:
    """Message/intent counts that bump the engagement level."""

    medium_messages: int = _safe_int("ENGAGEMENT_MEDIUM_MESSAGES", "5")
    medium_questions: int = _safe_int("ENGAGEMENT_MEDIUM_QUESTIONS", "3")
    high_messages: int = _safe_int("ENGAGEMENT_HIGH_MESSAGES", "10")
    high_questions: int = _safe_int("ENGAGEMENT_HIGH_QUESTIONS", "5")
    follow_up_min_messages: int = _safe_int("FOLLOW_UP_MIN_MESSAGES", "3")


@dataclass(frozen=True)
class ResponseConfig:
    """Response rendering settings."""

    validation_probability: float = _safe_float("VALIDATION_PHRASE_PROBABILITY", "0.4")
    random_seed: Optional[int] = _optional_int("RANDOM_SEED")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    engagement: EngagementConfig = field(default_factory=EngagementConfig)
    response: ResponseConfig = field(default_factory=ResponseConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    knowledge_base_path: Optional[str] = os.getenv("KNOWLEDGE_BASE_PATH") or None


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    for name, value in [
        ("PRODUCT_THRESHOLD", config.matching.product_threshold),
        ("FAQ_THRESHOLD", config.matching.faq_threshold),
        ("SPECIFIC_PRODUCT_MIN_SCORE", config.matching.specific_product_min_score),
        ("VALIDATION_PHRASE_PROBABILITY", config.response.validation_probability),
    ]:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"{name} must be between 0.0 and 1.0, got {value}")

    if config.matching.max_product_results < 1:
        raise ValueError(
            f"MAX_PRODUCT_RESULTS must be >= 1, got {config.matching.max_product_results}"
        )

    engagement = config.engagement
    if engagement.medium_messages > engagement.high_messages:
        raise ValueError(
            "ENGAGEMENT_MEDIUM_MESSAGES must not exceed ENGAGEMENT_HIGH_MESSAGES, "
            f"got {engagement.medium_messages} > {engagement.high_messages}"
        )
    if engagement.medium_questions > engagement.high_questions:
        raise ValueError(
            "ENGAGEMENT_MEDIUM_QUESTIONS must not exceed ENGAGEMENT_HIGH_QUESTIONS, "
            f"got {engagement.medium_questions} > {engagement.high_questions}"
        )
    if engagement.follow_up_min_messages < 0:
        raise ValueError(
            f"FOLLOW_UP_MIN_MESSAGES must be >= 0, got {engagement.follow_up_min_messages}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=SESSION_LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[session_log_handler()],
    )
    logger.info("Configuration loaded (default company: '%s')", config.business.name)
    return config


# Singleton instance
settings = load_config()
