"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Validates all required settings
- Provides type-safe access to configuration values
- Keeps credentials out of the venue's static description

Static venue metadata (endpoint tables, fee schedule, alias tables) is NOT
configured here: it lives in exchanges/<venue>/description.py as an immutable
value passed to the adapter constructor.

Usage:
    from core.config import settings

    print(settings.exbitron_hostname)
    print(settings.has_exbitron_credentials)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Application Settings

    Values are automatically loaded from environment variables or .env file.

    Attributes:
        exbitron_hostname: Host substituted into the venue's URL templates
        exbitron_api_key: API key for private endpoints
        exbitron_secret: API secret used for HMAC request signing
        exbitron_totp_secret: Base32 TOTP secret, required only for withdrawals
        order_book_limit: Depth requested when the caller passes no limit
        markets_fetch_limit: Page size for the market/currency listings
        request_timeout: Timeout for HTTP requests in seconds
        app_host: Host address for FastAPI server
        app_port: Port number for FastAPI server
        environment: Current environment (development, production)
        log_level: Logging level name
    """

    # ============================================
    # Exbitron API Configuration
    # ============================================

    exbitron_hostname: str = Field(
        default="exbitron.com",
        description="Exbitron API hostname"
    )

    exbitron_api_key: str = Field(
        default="",
        description="Exbitron API key (optional for public endpoints)"
    )

    exbitron_secret: str = Field(
        default="",
        description="Exbitron API secret (optional for public endpoints)"
    )

    exbitron_totp_secret: str = Field(
        default="",
        description="TOTP secret for withdrawal one-time passwords"
    )

    # ============================================
    # Request Defaults
    # ============================================

    order_book_limit: int = Field(
        default=100,
        description="Default order book depth per side"
    )

    markets_fetch_limit: int = Field(
        default=500,
        description="Number of markets/currencies requested per listing call"
    )

    request_timeout: int = Field(
        default=10,
        description="HTTP request timeout in seconds"
    )

    # ============================================
    # Application Configuration
    # ============================================

    app_host: str = Field(
        default="0.0.0.0",
        description="FastAPI server host address"
    )

    app_port: int = Field(
        default=8000,
        description="FastAPI server port"
    )

    environment: str = Field(
        default="development",
        description="Application environment (development, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # ============================================
    # Pydantic Settings Configuration
    # ============================================

    model_config = SettingsConfigDict(
        # Look for .env file in the project root
        env_file=".env",
        # Ignore extra fields in .env that aren't defined here
        extra="ignore",
        # Case-insensitive environment variable matching
        case_sensitive=False
    )

    @property
    def has_exbitron_credentials(self) -> bool:
        """True when both API key and secret are configured."""
        return bool(self.exbitron_api_key and self.exbitron_secret)


# ============================================
# Global Settings Instance
# ============================================

# Create a single instance of settings to be imported throughout the application
settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration() -> None:
    """
    Validate critical configuration settings on application startup.

    Raises:
        ValueError: If required configuration is missing or invalid
    """
    # logging.py imports config.py, so we can't import at module level
    from core.logging import logger

    if not settings.exbitron_hostname:
        raise ValueError("EXBITRON_HOSTNAME must not be empty")

    if bool(settings.exbitron_api_key) != bool(settings.exbitron_secret):
        raise ValueError("EXBITRON_API_KEY and EXBITRON_SECRET must be set together")

    if settings.order_book_limit <= 0:
        raise ValueError(f"Invalid ORDER_BOOK_LIMIT: {settings.order_book_limit}. Must be positive")

    if settings.markets_fetch_limit <= 0:
        raise ValueError(f"Invalid MARKETS_FETCH_LIMIT: {settings.markets_fetch_limit}. Must be positive")

    if not (1 <= settings.app_port <= 65535):
        raise ValueError(f"Invalid port number: {settings.app_port}. Must be between 1 and 65535")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if settings.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{settings.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    logger.info("Configuration validated successfully")
    logger.info(f"Exbitron host: {settings.exbitron_hostname}")
    logger.info(f"Private endpoints: {'enabled' if settings.has_exbitron_credentials else 'disabled'}")
    logger.info(f"Server: {settings.app_host}:{settings.app_port}")
    logger.info(f"Log level: {settings.log_level.upper()}")
