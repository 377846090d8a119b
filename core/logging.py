"""
Unified Logging Configuration

This module sets up a centralized logging system for the entire application.
All modules should import and use the logger from this module instead of
using print() statements.

Usage:
    from core.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Loaded 120 markets")

Log Levels (from most to least verbose):
    DEBUG    - Request/response tracing, skipped catalog entries
    INFO     - Catalog refreshes, lifecycle events
    WARNING  - Malformed venue data that was dropped
    ERROR    - Faults surfaced to the caller

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file.
"""

import logging
import sys
from typing import Optional


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    include_module: bool = True
) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string (uses default if None)
        include_timestamp: Include timestamp in log messages
        include_module: Include module name in log messages

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Application started")
        2024-01-01 12:00:00 [INFO] exadapter: Application started
    """
    if log_format is None:
        format_parts = []

        if include_timestamp:
            format_parts.append("%(asctime)s")

        format_parts.append("[%(levelname)s]")

        if include_module:
            format_parts.append("%(name)s")

        format_parts.append("%(message)s")

        log_format = " ".join(format_parts)

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True
    )

    logger = logging.getLogger("exadapter")
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

try:
    from core.config import settings
    log_level = settings.log_level if hasattr(settings, 'log_level') else "INFO"
except ImportError:
    # If settings not available yet (during initial import), use INFO
    log_level = "INFO"

logger = setup_logging(log_level=log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module or component.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Logger instance for the specified name

    Example:
        # In exchanges/exbitron/api_client.py:
        logger = get_logger(__name__)  # "exadapter.exchanges.exbitron.api_client"
    """
    return logging.getLogger(f"exadapter.{name}")


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(exchange: str, method: str, url: str, body: Optional[str] = None) -> None:
    """
    Log an outbound API request with consistent formatting.

    Signed headers are never logged; the body is, since it only carries
    order/withdrawal parameters.

    Example:
        >>> log_api_request("exbitron", "GET", "https://exbitron.com/api/v2/peatio/public/markets")
        [DEBUG] API Request: exbitron GET https://exbitron.com/api/v2/peatio/public/markets
    """
    if body:
        logger.debug(f"API Request: {exchange} {method} {url} | Body: {body}")
    else:
        logger.debug(f"API Request: {exchange} {method} {url}")


def log_api_response(exchange: str, method: str, url: str, status: int, response_time: Optional[float] = None) -> None:
    """
    Log an API response with status and timing information.

    Example:
        >>> log_api_response("exbitron", "GET", "/markets", 200, 0.342)
        [DEBUG] API Response: exbitron GET /markets | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {exchange} {method} {url} | Status: {status}{time_str}")


logger.debug("Logging system initialized")
