"""
Core Utilities Package

This package contains utility functions and helpers used throughout the application.

Modules:
    - time: Timestamp conversion and normalization utilities
    - parsing: Tolerant field access for loosely typed venue payloads
"""

from core.utils.time import iso8601, parse8601, seconds_to_milliseconds

__all__ = ["iso8601", "parse8601", "seconds_to_milliseconds"]
