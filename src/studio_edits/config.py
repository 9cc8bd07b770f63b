"""Runtime configuration loaded from the environment (and a .env file)."""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from studio_edits.history.manager import DEFAULT_MAX_HISTORY_SIZE

ENV_MAX_HISTORY = "STUDIO_EDITS_MAX_HISTORY"
ENV_ATOMIC = "STUDIO_EDITS_ATOMIC"
ENV_LOG_LEVEL = "STUDIO_EDITS_LOG_LEVEL"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


class ConfigError(Exception):
    """Raised when an environment setting has an invalid value."""


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_history_size: int = Field(default=DEFAULT_MAX_HISTORY_SIZE, ge=1)
    atomic: bool = False  # All-or-nothing batches by default
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def load_settings(env_file: str | None = None) -> Settings:
    """Build Settings from environment variables.

    Args:
        env_file: Optional .env path. Values already in the environment win.

    Raises:
        ConfigError: If a variable cannot be parsed.
    """
    load_dotenv(env_file)

    values: dict = {}
    raw_size = os.getenv(ENV_MAX_HISTORY)
    if raw_size is not None:
        try:
            values["max_history_size"] = int(raw_size)
        except ValueError as exc:
            raise ConfigError(f"{ENV_MAX_HISTORY} must be an integer, got {raw_size!r}") from exc

    raw_atomic = os.getenv(ENV_ATOMIC)
    if raw_atomic is not None:
        values["atomic"] = _parse_bool(ENV_ATOMIC, raw_atomic)

    raw_level = os.getenv(ENV_LOG_LEVEL)
    if raw_level is not None:
        values["log_level"] = raw_level

    try:
        return Settings(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
