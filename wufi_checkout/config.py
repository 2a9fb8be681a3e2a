"""Environment configuration and logging setup."""

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

import structlog

from .errors import InvalidArgumentError

DEFAULT_BACKEND_URL = "http://localhost:9000"
DEFAULT_HTTP_TIMEOUT = 30.0


@dataclass(frozen=True)
class StoreConfig:
    """Connection settings for the Medusa backend.

    Environment variables:
        MEDUSA_BACKEND_URL: Base URL of the backend (default: http://localhost:9000)
        MEDUSA_PUBLISHABLE_KEY: Store API publishable key
        MEDUSA_ADMIN_TOKEN: Admin API token, needed only for product updates
        WUFI_HTTP_TIMEOUT: Per-request timeout in seconds (default: 30)
        LOG_LEVEL: structlog filtering level (default: INFO)
    """

    backend_url: str = DEFAULT_BACKEND_URL
    publishable_key: Optional[str] = None
    admin_token: Optional[str] = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = "INFO"


def load_config(env: Optional[Mapping[str, str]] = None) -> StoreConfig:
    """Read StoreConfig from the environment."""
    if env is None:
        env = os.environ

    raw_timeout = env.get("WUFI_HTTP_TIMEOUT", "")
    http_timeout = DEFAULT_HTTP_TIMEOUT
    if raw_timeout:
        try:
            http_timeout = float(raw_timeout)
        except ValueError:
            raise InvalidArgumentError(f"WUFI_HTTP_TIMEOUT={raw_timeout!r}") from None
        if http_timeout <= 0:
            raise InvalidArgumentError("WUFI_HTTP_TIMEOUT must be positive")

    return StoreConfig(
        backend_url=env.get("MEDUSA_BACKEND_URL", DEFAULT_BACKEND_URL).rstrip("/"),
        publishable_key=env.get("MEDUSA_PUBLISHABLE_KEY") or None,
        admin_token=env.get("MEDUSA_ADMIN_TOKEN") or None,
        http_timeout=http_timeout,
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog with JSON rendering and ISO timestamps."""
    min_level = logging.getLevelName(level.upper())
    if not isinstance(min_level, int):
        min_level = logging.INFO
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )
