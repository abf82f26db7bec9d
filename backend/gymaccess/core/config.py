"""Application configuration using pydantic-settings.

All environment variables should be accessed through the settings object
rather than using os.getenv() directly.
"""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Database - SQLite file for local development, PostgreSQL via env in production
    database_url: str = "sqlite:///./data/gymaccess.db"

    # Security
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours

    # CORS - comma-separated origins or "*" for development only
    cors_origins: str = "http://localhost:3000,http://localhost:5000"

    # Gym wall clock: "today", "yesterday" and expiry checks use this zone
    timezone: str = "UTC"

    # ==========================================================================
    # Scoring
    # ==========================================================================
    base_points: int = 100
    points_per_level: int = 1000
    streak_multiplier_step: float = 0.1
    streak_multiplier_cap: Optional[float] = None  # None = unbounded

    # ==========================================================================
    # Background jobs
    # ==========================================================================
    membership_sweep_interval_seconds: int = 3600  # 0 disables the sweep task
    seed_badges_on_startup: bool = True

    # Server
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    sql_echo: bool = False

    # API
    api_prefix: str = "/api"

    # Rate limiting
    rate_limit_enabled: bool = True
    login_rate_limit: str = "10/minute"

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        if v == "change-me-in-production":
            import warnings
            warnings.warn(
                "Using default SECRET_KEY is insecure! Set SECRET_KEY environment variable.",
                UserWarning,
                stacklevel=2,
            )
        return v

    @field_validator("streak_multiplier_cap")
    @classmethod
    def validate_multiplier_cap(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 1.0:
            raise ValueError("STREAK_MULTIPLIER_CAP must be at least 1.0")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Refuse to start in production mode with a weak secret key."""
        if not self.debug:
            if self.secret_key == "change-me-in-production":
                raise ValueError(
                    "FATAL: Cannot start in production mode with default SECRET_KEY. "
                    "Set a secure SECRET_KEY environment variable (minimum 32 characters)."
                )
            if len(self.secret_key) < 32:
                raise ValueError(
                    f"FATAL: SECRET_KEY must be at least 32 characters in production mode "
                    f"(current length: {len(self.secret_key)})."
                )
        return self

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
