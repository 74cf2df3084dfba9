"""
Shared utilities for the Financial Advisor services.

This package contains code shared across services:
- settings: Environment-driven service configuration
- observability: JSON logging, request ids, and privacy utilities
"""

from .settings import (
    DB_URL_ENV,
    DEFAULT_PROJECTION_MONTHS,
    AdvisorSettings,
    AdvisorSettingsError,
    load_advisor_settings,
)

__all__ = [
    "DB_URL_ENV",
    "DEFAULT_PROJECTION_MONTHS",
    "AdvisorSettings",
    "AdvisorSettingsError",
    "load_advisor_settings",
]
