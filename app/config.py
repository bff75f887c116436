# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,  # ... means required (no default)
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key (magic-link sign-in)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret for verifying access tokens"
    )

    # -------------------------------------------------------------------------
    # Generative API (xAI Grok, OpenAI-compatible)
    # -------------------------------------------------------------------------
    # Optional - without a key, development mode serves mock item data

    GROK_API_KEY: str = Field(
        default="",
        description="xAI API key for generic item lookups"
    )

    GROK_BASE_URL: str = Field(
        default="https://api.x.ai/v1",
        description="Base URL of the chat-completions API"
    )

    GROK_MODEL: str = Field(
        default="grok-3",
        description="Model used for item lookups"
    )

    GROK_TEMPERATURE: float = Field(
        default=0.1,
        ge=0.0,
        le=2.0,
        description="Sampling temperature (lower = more consistent prices)"
    )

    GROK_MAX_TOKENS: int = Field(
        default=1500,
        ge=64,
        le=8192,
        description="Max completion tokens for a full item lookup"
    )

    GROK_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="Abort a completion call after this many seconds"
    )

    # -------------------------------------------------------------------------
    # Market Data (CoinGecko)
    # -------------------------------------------------------------------------

    MARKET_DATA_BASE_URL: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="Market-data API base URL"
    )

    MARKET_DATA_API_KEY: str = Field(
        default="",
        description="Optional CoinGecko demo API key"
    )

    MARKET_HISTORY_DAYS: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Days of daily price history to request"
    )

    MARKET_TIMEOUT_SECONDS: float = Field(
        default=15.0,
        gt=0,
        description="Timeout for market-data HTTP calls"
    )

    # -------------------------------------------------------------------------
    # Category Catalog
    # -------------------------------------------------------------------------

    CATALOG_SOURCE: Literal["file", "supabase"] = Field(
        default="file",
        description="Where category teasers come from"
    )

    CATALOG_PATH: str = Field(
        default="data/categories.json",
        description="Path to the static category catalog"
    )

    CATALOG_URL: str = Field(
        default="",
        description="Absolute URL of the static catalog (overrides CATALOG_PATH)"
    )

    LIVE_TEASER_PRICES: bool = Field(
        default=False,
        description="Refresh teaser prices from market data on each request"
    )

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------

    ALPHA_VANTAGE_API_KEY: str = Field(
        default="",
        description="Alpha Vantage key for seeding stock symbols"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------
    # Default to localhost for development

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    TEASER_REFRESH_MINUTES: int = Field(
        default=60,
        ge=5,
        description="How often the beat schedule refreshes teaser prices"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # Where magic links send the user back to
    AUTH_REDIRECT_URL: str = Field(
        default="http://localhost:3000/auth/confirm",
        description="Default email redirect for magic-link sign-in"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (useful for production where
        # env vars are set directly)
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def has_grok_key(self) -> bool:
        """True when a generative API key is configured."""
        return bool(self.GROK_API_KEY.strip())

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
