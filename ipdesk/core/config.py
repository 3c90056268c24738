"""
Centralized configuration for the ipdesk console.

All environment variables and settings should be defined here
to avoid duplication across modules.
"""
import os
from functools import lru_cache


class Settings:
    """Console settings loaded from environment variables."""

    # Inventory API - defaults for the login form, operator can override
    INVENTORY_URL: str = os.environ.get("IPDESK_URL", "https://demo.netbox.dev")
    INVENTORY_TOKEN: str = os.environ.get("IPDESK_TOKEN", "")

    # Page size requested per collection call; continuation links are followed
    PAGE_SIZE: int = int(os.environ.get("IPDESK_PAGE_SIZE", "1000"))
    REQUEST_TIMEOUT: float = float(os.environ.get("IPDESK_REQUEST_TIMEOUT", "30"))

    # Refresh cadence: a view counts down REFRESH_INTERVAL seconds,
    # one tick every TICK_SECONDS
    REFRESH_INTERVAL: float = float(os.environ.get("IPDESK_REFRESH_INTERVAL", "50"))
    TICK_SECONDS: float = float(os.environ.get("IPDESK_TICK_SECONDS", "1"))

    # Spreadsheets
    EXPORT_DIR: str = os.environ.get("IPDESK_EXPORT_DIR", "data/exports")
    IMPORT_SHEET: str = os.environ.get("IPDESK_IMPORT_SHEET", "Sheet1")

    # CORS - comma-separated list of allowed origins
    ALLOWED_ORIGINS: list = os.environ.get(
        "ALLOWED_ORIGINS",
        "http://localhost:8090,http://127.0.0.1:8090"
    ).split(",")

    # API key for protecting write endpoints (optional)
    API_KEY: str = os.environ.get("IPDESK_API_KEY", "")

    LOG_LEVEL: str = os.environ.get("IPDESK_LOG_LEVEL", "INFO")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for easy import
settings = get_settings()
