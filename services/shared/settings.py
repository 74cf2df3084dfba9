from __future__ import annotations

"""
Environment-driven settings for the advisor service.

Values are read once at import time of the service and validated here so that a
misconfigured deployment fails loudly on startup instead of producing odd
projections or writing snapshots to an unexpected database.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

PROJECTION_MONTHS_ENV = "ADVISOR_PROJECTION_MONTHS"
DB_URL_ENV = "ADVISOR_DB_URL"
LOG_LEVEL_ENV = "ADVISOR_LOG_LEVEL"
CORS_ORIGINS_ENV = "ADVISOR_CORS_ORIGINS"

DEFAULT_PROJECTION_MONTHS = 6
MAX_PROJECTION_MONTHS = 60
DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


class AdvisorSettingsError(RuntimeError):
    """Raised when service configuration cannot be constructed."""


@dataclass(frozen=True, slots=True)
class AdvisorSettings:
    projection_months: int
    log_level: str
    cors_origins: tuple[str, ...]


def load_advisor_settings() -> AdvisorSettings:
    """
    Construct AdvisorSettings from the environment.

    The database location is read separately by the persistence layer (ADVISOR_DB_URL).
    """

    projection_months = _parse_int(
        os.getenv(PROJECTION_MONTHS_ENV), DEFAULT_PROJECTION_MONTHS, PROJECTION_MONTHS_ENV
    )
    if not 1 <= projection_months <= MAX_PROJECTION_MONTHS:
        raise AdvisorSettingsError(
            f"{PROJECTION_MONTHS_ENV} must be between 1 and {MAX_PROJECTION_MONTHS} (received {projection_months})"
        )

    return AdvisorSettings(
        projection_months=projection_months,
        log_level=_parse_log_level(os.getenv(LOG_LEVEL_ENV)),
        cors_origins=_parse_origins(os.getenv(CORS_ORIGINS_ENV)),
    )


def _parse_int(raw_value: Optional[str], default: int, env_key: str) -> int:
    if raw_value is None or raw_value.strip() == "":
        return default

    try:
        return int(raw_value)
    except ValueError as exc:
        raise AdvisorSettingsError(f"{env_key} must be an integer (received '{raw_value}')") from exc


def _parse_log_level(raw_value: Optional[str]) -> str:
    candidate = (raw_value or "").strip().upper() or "INFO"
    if not isinstance(logging.getLevelName(candidate), int):
        raise AdvisorSettingsError(f"{LOG_LEVEL_ENV} must be a logging level name (received '{raw_value}')")
    return candidate


def _parse_origins(raw_value: Optional[str]) -> tuple[str, ...]:
    if not raw_value:
        return DEFAULT_CORS_ORIGINS
    origins = tuple(origin.strip() for origin in raw_value.split(",") if origin.strip())
    if not origins:
        return DEFAULT_CORS_ORIGINS
    # FastAPI expects ["*"] instead of mixing '*' with explicit origins.
    if "*" in origins:
        return ("*",)
    return origins
