"""Configuration utilities for infrastructure layer.

Settings are read from environment variables. A .env file in the working
directory is loaded first when present (existing variables win).

Example .env:
    COROS_ACCESS_TOKEN=abc123
    ACTIVITY_CACHE_FILE=~/.cache/coros/activities.json
    LOG_LEVEL=DEBUG
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from activity_calendar.domain.cache.models import (
    DEFAULT_MAX_ENTRIES,
    DEFAULT_PREFIX,
    DEFAULT_TTL_MS,
    DEFAULT_VERSION,
    CacheSettings,
)
from activity_calendar.domain.shared.errors import ValidationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class CorosApiSettings(BaseModel):
    """COROS API connection settings."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(default="https://teamapi.coros.com", min_length=1)
    access_token: Optional[str] = None
    timeout_seconds: float = Field(default=5, gt=0)
    max_retries: int = Field(default=3, ge=1)
    page_size: int = Field(default=100, ge=1)


class AppSettings(BaseModel):
    """Everything needed to assemble the activity calendar."""

    model_config = ConfigDict(frozen=True)

    api: CorosApiSettings = Field(default_factory=CorosApiSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    cache_file: Optional[Path] = None
    log_level: str = "INFO"
    log_json: bool = False


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationError(f"{name} must be an integer, got {raw!r}") from e


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValidationError(f"{name} must be a number, got {raw!r}") from e


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValidationError(f"{name} must be a boolean, got {raw!r}")


def get_access_token() -> Optional[str]:
    """COROS access token from COROS_ACCESS_TOKEN, or None if not logged in."""
    return os.getenv("COROS_ACCESS_TOKEN") or None


def get_cache_file() -> Optional[Path]:
    """JSON store path from ACTIVITY_CACHE_FILE (~ expanded), or None for in-memory."""
    raw = os.getenv("ACTIVITY_CACHE_FILE")
    if not raw:
        return None
    return Path(raw).expanduser()


def load_api_settings() -> CorosApiSettings:
    return CorosApiSettings(
        base_url=os.getenv("COROS_API_BASE_URL", "https://teamapi.coros.com"),
        access_token=get_access_token(),
        timeout_seconds=_get_float("COROS_TIMEOUT_SECONDS", 5),
        max_retries=_get_int("COROS_MAX_RETRIES", 3),
        page_size=_get_int("COROS_PAGE_SIZE", 100),
    )


def load_cache_settings() -> CacheSettings:
    return CacheSettings(
        prefix=os.getenv("ACTIVITY_CACHE_PREFIX", DEFAULT_PREFIX),
        ttl_ms=_get_int("ACTIVITY_CACHE_TTL_MS", DEFAULT_TTL_MS),
        max_entries=_get_int("ACTIVITY_CACHE_MAX_ENTRIES", DEFAULT_MAX_ENTRIES),
        version=os.getenv("ACTIVITY_CACHE_VERSION", DEFAULT_VERSION),
    )


def load_settings(env_file: Optional[Path] = None) -> AppSettings:
    """
    Build application settings from the environment.

    Args:
        env_file: Optional .env path (default: search from working directory)

    Returns:
        Validated settings

    Raises:
        ValidationError: If a variable cannot be parsed or is out of range
    """
    load_dotenv(env_file or find_dotenv(usecwd=True))

    try:
        return AppSettings(
            api=load_api_settings(),
            cache=load_cache_settings(),
            cache_file=get_cache_file(),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_json=_get_bool("LOG_JSON", False),
        )
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid configuration: {e}") from e
