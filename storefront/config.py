"""Application configuration and constants."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    catalog_endpoint: str = _get_env("CATALOG_ENDPOINT", "http://localhost:8082/api/v1")
    debounce_delay_ms: int = int(_get_env("DEBOUNCE_DELAY_MS", "500"))
    request_timeout_seconds: float = float(_get_env("REQUEST_TIMEOUT_SECONDS", "10"))
    products_path: str = _get_env("PRODUCTS_PATH", "data/products.json")
    cache_enabled: bool = _get_env("CACHE_ENABLED", "false").lower() in {"1", "true", "yes"}
    cache_ttl_seconds: int = int(_get_env("CACHE_TTL_SECONDS", "60"))
    redis_host: str = _get_env("REDIS_HOST", "localhost")
    redis_port: int = int(_get_env("REDIS_PORT", "6379"))
    log_level: str = _get_env("LOG_LEVEL", "INFO")


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    # ``force=True`` replaces handlers installed by uvicorn or an earlier call.
    log_level = logging.getLevelName((level or settings.log_level).upper())
    logging.basicConfig(level=log_level, format=LOG_FORMAT, force=True)
    for name in ("httpx", "uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(log_level)
