"""Configuration management for the atoship client."""

from typing import Any

import httpx
from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

SDK_VERSION = "1.0.0"
DEFAULT_BASE_URL = "https://api.atoship.com"


class AtoshipConfig(BaseSettings):
    """
    Client configuration, loaded from arguments or ``ATOSHIP_*`` environment variables.

    Instances are frozen: build one per client, or build a shared default once
    and pass it explicitly to every client that should use it.
    """

    model_config = SettingsConfigDict(
        env_prefix="ATOSHIP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    api_key: SecretStr
    base_url: str = DEFAULT_BASE_URL

    # Per-attempt deadline, in seconds
    timeout: float = Field(default=30.0, gt=0)

    # Retry budget: a call makes at most max_retries + 1 attempts
    max_retries: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(default=1.0, ge=0)
    retry_max_delay: float = Field(default=30.0, ge=0)

    enable_logging: bool = False

    @field_validator("api_key")
    @classmethod
    def _require_api_key(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("api_key must not be empty")
        return value

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        value = value.strip()
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as e:
            raise ValueError(f"base_url is not a valid URL: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("base_url must be an absolute http(s) URL")
        return value.rstrip("/")

    @property
    def user_agent(self) -> str:
        return f"atoship-python-sdk/{SDK_VERSION}"

    @classmethod
    def create(cls, **values: Any) -> "AtoshipConfig":
        """Build a config, raising ConfigurationError instead of a pydantic error."""
        unknown = sorted(set(values) - set(cls.model_fields))
        if unknown:
            raise ConfigurationError(f"Unknown atoship configuration option(s): {', '.join(unknown)}")
        try:
            return cls(**values)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Invalid atoship configuration: {problems}") from e

    @classmethod
    def from_env(cls) -> "AtoshipConfig":
        """Load configuration purely from the environment (and .env)."""
        return cls.create()

    def with_overrides(self, **changes: Any) -> "AtoshipConfig":
        """Return a new, re-validated config with some values replaced."""
        values = self.model_dump()
        values.update(changes)
        return type(self).create(**values)
