"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Toolkit configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "sure-forecast"
    log_level: str = "INFO"
    reporting_currency: str = "USD"

    # Growth rate
    growth_minimum_months: int = 6
    growth_lookback_padding_months: int = 3
    stagnant_growth_threshold_cents: int = 100  # $1 per month

    # String similarity
    jaro_winkler_scaling: float = 0.1
    jaro_winkler_prefix_cap: int = 4

    # Categorization
    fuzzy_match_threshold: float = 0.80
    auto_categorize_threshold: float = 0.75
    pattern_min_confidence: float = 0.30
    pattern_stale_months: int = 6
    pattern_min_matches: int = 5

    # Retirement (4% rule simplification, not a decumulation model)
    safe_withdrawal_rate: float = 0.04
    retirement_needs_multiplier: int = 25


settings = Settings()
