"""Process settings read from the environment (and ``.env`` via the app wiring)."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_WEIGHTS_PATH = "data/ppm_weights.json"
DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_HTTP_TIMEOUT = 10.0

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _env_str(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip()


def _env_positive_float(key: str, default: float) -> float:
    raw = _env_str(key)
    if not raw:
        return default
    try:
        parsed = float(raw)
    except ValueError:
        logger.warning("Invalid %s value '%s'; using %s.", key, raw, default)
        return default
    if parsed <= 0:
        logger.warning("Ignoring %s=%s (must be positive)", key, raw)
        return default
    return parsed


def _env_log_level(key: str, default: str) -> str:
    raw = (_env_str(key) or "").upper()
    if not raw:
        return default
    if raw not in _LOG_LEVELS:
        logger.warning("Unknown %s '%s'; using %s.", key, raw, default)
        return default
    return raw


@dataclass(frozen=True)
class Settings:
    log_level: str
    weights_path: str
    # empty selects the in-memory interview store
    api_url: str
    http_timeout: float

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            log_level=_env_log_level("PPM_LOG_LEVEL", DEFAULT_LOG_LEVEL),
            weights_path=_env_str("PPM_WEIGHTS_PATH") or DEFAULT_WEIGHTS_PATH,
            api_url=_env_str("PPM_API_URL", DEFAULT_API_URL) or "",
            http_timeout=_env_positive_float("PPM_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
        )
