"""
Configuration management for the Storefront Admin API.

Loads settings from .env via pydantic-settings.

Security notes:
    - validate_production_settings() enforces strict CORS in production
    - JWT_SECRET is mandatory in production (admin identity comes from tokens)
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/storefront_admin.db"

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"
    sql_echo: bool = False

    # ── Auth (JWT) ──────────────────────────────────────────────────
    jwt_secret: str = ""
    jwt_issuer: str = "storefront-admin-api"
    jwt_access_ttl_minutes: int = 60

    # ── Pagination ──────────────────────────────────────────────────
    default_page_size: int = 10
    max_page_size: int = 100

    # ── Dashboard / Inventory ───────────────────────────────────────
    low_stock_threshold: int = 10
    dashboard_default_days: int = 30
    dashboard_max_days: int = 365

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # allow unknown .env keys without crashing
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def async_database_url(self) -> str:
        """Rewrite sqlite:///... to sqlite+aiosqlite:///... for the async driver."""
        if self.database_url.startswith("sqlite:///"):
            return self.database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return self.database_url

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup. Raises ValueError on unsafe production
        configuration, logs warnings for the same problems elsewhere.
        """
        if self.environment == "production":
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            if not self.jwt_secret:
                raise ValueError(
                    "JWT_SECRET must be set in production. "
                    "It is used to verify admin access tokens."
                )
            if self.sql_echo:
                raise ValueError("SQL_ECHO must be false in production.")
            logger.info("Production settings validated")
        else:
            warnings = []
            if not self.jwt_secret:
                warnings.append("JWT_SECRET is empty (admin endpoints will reject every token)")
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            for w in warnings:
                logger.warning(f"{w}")


# Global settings instance
settings = Settings()
