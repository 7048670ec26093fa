"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from monet.config.business_constants import PLATFORM_FEE_RATE, REFERRAL_MAX_DEPTH


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Payments (Stripe Connect)
    stripe_secret_key: str
    payout_currency: str = "usd"
    platform_fee_rate: Decimal = Field(
        default=PLATFORM_FEE_RATE,
        description="Fraction of the post-referral amount kept by the platform",
    )
    referral_max_depth: int = Field(
        default=REFERRAL_MAX_DEPTH,
        ge=1,
        le=REFERRAL_MAX_DEPTH,
        description="How many referrer levels share a session payout",
    )

    # Zoom (server-to-server OAuth app)
    zoom_account_id: str | None = None
    zoom_client_id: str | None = None
    zoom_client_secret: str | None = None
    zoom_api_base_url: str = "https://api.zoom.us/v2"
    zoom_oauth_url: str = "https://zoom.us/oauth/token"

    # Google Calendar
    google_calendar_api_base_url: str = "https://www.googleapis.com/calendar/v3"

    # Outbound HTTP
    external_http_timeout_seconds: float = Field(default=15.0, gt=0)

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/monet.log"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("platform_fee_rate")
    @classmethod
    def validate_platform_fee_rate(cls, v: Decimal) -> Decimal:
        """Fee must leave something for the professional."""
        if v < 0 or v >= 1:
            raise ValueError("platform_fee_rate must be in [0, 1)")
        return v

    @field_validator("payout_currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """Stripe expects lowercase ISO currency codes."""
        return v.strip().lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def zoom_configured(self) -> bool:
        """Check if Zoom credentials are present."""
        return bool(
            self.zoom_account_id and self.zoom_client_id and self.zoom_client_secret
        )


# Global settings instance
settings = Settings()
