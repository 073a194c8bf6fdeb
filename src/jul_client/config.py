"""Client configuration loaded from ``JUL_*`` environment variables.

Precedence (high to low):
1. Arguments passed to ``JulClient``
2. Environment variables (``JUL_API_URL``, ``JUL_TOKEN``, ``JUL_LOG_LEVEL``)
3. Built-in defaults
"""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "http://localhost:8000"


class ClientSettings(BaseSettings):
    """Settings for one Jul API client."""

    model_config = SettingsConfigDict(env_prefix="JUL_", extra="ignore")

    api_url: str = DEFAULT_BASE_URL
    token: str | None = None
    log_level: str = "WARNING"

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/") or DEFAULT_BASE_URL

    @field_validator("token")
    @classmethod
    def _blank_token_is_unset(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()
