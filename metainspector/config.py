"""
Configuration management for MetaInspector.
Loads from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import List

# Base paths
PACKAGE_DIR = Path(__file__).parent.resolve()
PROJECT_ROOT = PACKAGE_DIR.parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"
LOG_DIR = Path(os.environ.get("METAINSPECTOR_LOG_DIR", str(PROJECT_ROOT / "logs")))


@dataclass
class FetchConfig:
    """Outbound page fetch configuration."""
    timeout_seconds: float = field(
        default_factory=lambda: float(os.environ.get("METAINSPECTOR_TIMEOUT", "15"))
    )
    max_redirects: int = 5
    max_bytes: int = 5 * 1024 * 1024  # 5MB
    user_agent: str = field(default_factory=lambda: os.environ.get(
        "METAINSPECTOR_USER_AGENT",
        "Mozilla/5.0 (compatible; SEOMetaInspector/1.0; +https://metainspector.com)",
    ))


@dataclass
class ScoringConfig:
    """Meta tag thresholds and score weights."""
    # Length thresholds (characters)
    title_min_length: int = 30
    title_max_length: int = 60
    description_min_length: int = 120
    description_max_length: int = 155

    # Essential tags (max 10)
    weight_title_optimal: float = 3.0
    weight_title_present: float = 1.5
    weight_description_optimal: float = 3.0
    weight_description_present: float = 1.5
    weight_canonical_absolute: float = 2.0
    weight_canonical_present: float = 1.0
    weight_robots_indexable: float = 2.0
    weight_robots_noindex: float = 0.5

    # Social tags (max 10)
    weight_og_title: float = 2.0
    weight_og_description: float = 2.0
    weight_social_fallback: float = 0.5  # Plain title/description stands in
    weight_og_image_absolute: float = 3.0
    weight_og_image_present: float = 1.5
    weight_twitter_card_large: float = 3.0
    weight_twitter_card_present: float = 2.0
    preferred_twitter_card: str = "summary_large_image"

    # Structure and performance
    structure_base: float = 6.0
    structure_essentials_bonus: float = 2.0
    performance_default: float = 7.0

    # Category weights for the overall percentage
    category_weight_essential: float = 0.35
    category_weight_social: float = 0.25
    category_weight_structure: float = 0.20
    category_weight_performance: float = 0.20


@dataclass
class RetryConfig:
    """Retry and backoff configuration."""
    max_retries: int = field(
        default_factory=lambda: int(os.environ.get("METAINSPECTOR_MAX_RETRIES", "2"))
    )
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 8.0
    exponential_base: float = 2.0
    jitter: bool = True


@dataclass
class ServerConfig:
    """Dashboard / REST server configuration."""
    host: str = field(default_factory=lambda: os.environ.get("METAINSPECTOR_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.environ.get("METAINSPECTOR_PORT", "5000")))


@dataclass
class Config:
    """Main configuration container."""
    fetch: FetchConfig = field(default_factory=FetchConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def load_config() -> Config:
    """Load configuration from environment variables."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    return Config()


def validate_config(config: Config) -> List[str]:
    """Validate configuration and return list of errors."""
    errors = []
    scoring = config.scoring

    if config.fetch.timeout_seconds <= 0:
        errors.append("METAINSPECTOR_TIMEOUT must be positive")
    if config.retry.max_retries < 0:
        errors.append("METAINSPECTOR_MAX_RETRIES must not be negative")
    if not 0 < config.server.port < 65536:
        errors.append(f"METAINSPECTOR_PORT out of range: {config.server.port}")
    if scoring.title_min_length > scoring.title_max_length:
        errors.append("title_min_length exceeds title_max_length")
    if scoring.description_min_length > scoring.description_max_length:
        errors.append("description_min_length exceeds description_max_length")

    category_total = (
        scoring.category_weight_essential
        + scoring.category_weight_social
        + scoring.category_weight_structure
        + scoring.category_weight_performance
    )
    if abs(category_total - 1.0) > 1e-6:
        errors.append(f"Category weights must sum to 1.0 (got {category_total:.2f})")

    return errors
