"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_PATH = PROJECT_ROOT / ".env"
load_dotenv(ENV_PATH)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _log_level_env(name: str, default: str) -> str:
    value = os.getenv(name, default).strip().upper()
    return value if value in _LOG_LEVELS else default


@dataclass(frozen=True)
class Settings:
    """Typed runtime settings.

    Args:
        host: Interface the HTTP server binds to.
        port: Port the HTTP server listens on.
        cors_origin: Value for the Access-Control-Allow-Origin header.
        log_level: Root logging level name.
    """

    host: str = field(default_factory=lambda: os.getenv("FOURSIGMA_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _int_env("FOURSIGMA_PORT", 8000))
    cors_origin: str = field(default_factory=lambda: os.getenv("FOURSIGMA_CORS_ORIGIN", "*"))
    log_level: str = field(default_factory=lambda: _log_level_env("FOURSIGMA_LOG_LEVEL", "INFO"))

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


settings = Settings()
