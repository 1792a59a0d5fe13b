"""Typed configuration using pydantic-settings.

Provides a single ``Settings`` class backed by ``.env`` file and ``EVENTFSM_``
environment variables, and a cached ``get_settings()`` accessor.

Apart from the error hierarchy, this module imports nothing from the rest of
the ``eventfsm`` package so the state machine can read its defaults without
circular imports.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from eventfsm.domain.errors import ConfigurationError


class Settings(BaseSettings):
    """Library settings loaded from environment variables and ``.env`` file."""

    model_config = SettingsConfigDict(
        env_prefix="EVENTFSM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -- Logging ---------------------------------------------------------------
    # JSON rendering at INFO when true, console rendering at DEBUG otherwise.
    production: bool = False

    # -- State machine ---------------------------------------------------------
    # Run transitions on one machine one at a time instead of letting
    # overlapping transitions race to commit.
    serialize_transitions: bool = False


@lru_cache
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance.

    Environment variables are parsed exactly once.  Call
    ``get_settings.cache_clear()`` in tests to reset.

    Raises:
        ConfigurationError: If an ``EVENTFSM_*`` variable has an invalid value.
    """
    try:
        return Settings()
    except ValidationError as exc:
        fields = ", ".join(".".join(str(part) for part in error["loc"]) for error in exc.errors())
        raise ConfigurationError(f"Invalid eventfsm settings: {fields}") from exc
