"""XDG config loading/saving for terminal preferences."""

from __future__ import annotations

import os
import sys
from contextlib import suppress
from pathlib import Path
from typing import Literal, cast

from pydantic import BaseModel, ConfigDict, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from termroster.errors import ErrorCode, TermRosterError
from termroster.logging import normalize_level

DEFAULT_CONFIG_PATH = Path("~/.config/termroster/config.toml").expanduser()
DEFAULT_LOG_LEVEL: Literal["DEBUG", "INFO", "WARN", "ERROR"] = "INFO"
TRACK_ENV_OVERRIDE = "TERMROSTER_TRACK_ENV"

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARN", "ERROR"}
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class AppConfig(BaseModel):
    """User preferences consumed by the session registry.

    Satisfies the registry's preferences provider contract through the
    ``track_environment`` and ``blinking_cursor`` attributes.
    """

    model_config = ConfigDict(validate_assignment=True)

    track_environment: bool = False
    blinking_cursor: bool = True
    log_level: Literal["DEBUG", "INFO", "WARN", "ERROR"] = DEFAULT_LOG_LEVEL

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return normalize_level(value)
        return value


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _toml_scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    raise TypeError(f"Unsupported TOML scalar type: {type(value)!r}")


def _parse_env_flag(raw: str) -> bool | None:
    normalized = raw.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    return None


def _sanitize(raw: dict[str, object]) -> AppConfig:
    cfg = AppConfig()

    track_environment = raw.get("track_environment", cfg.track_environment)
    if isinstance(track_environment, bool):
        cfg.track_environment = track_environment
    env_override = _parse_env_flag(os.getenv(TRACK_ENV_OVERRIDE, ""))
    if env_override is not None:
        cfg.track_environment = env_override

    blinking_cursor = raw.get("blinking_cursor", cfg.blinking_cursor)
    if isinstance(blinking_cursor, bool):
        cfg.blinking_cursor = blinking_cursor

    log_level = raw.get("log_level", cfg.log_level)
    if isinstance(log_level, str) and normalize_level(log_level) in _VALID_LOG_LEVELS:
        cfg.log_level = cast(Literal["DEBUG", "INFO", "WARN", "ERROR"], normalize_level(log_level))

    return cfg


def load_config(path: str | Path | None = None) -> AppConfig:
    resolved = get_config_path(path)
    if not resolved.exists():
        return _sanitize({})
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError):
        return _sanitize({})
    if not isinstance(raw, dict):
        return _sanitize({})
    return _sanitize(raw)


def save_config(config: AppConfig, path: str | Path | None = None) -> Path:
    resolved = get_config_path(path)
    lines = [
        f"track_environment = {_toml_scalar(config.track_environment)}",
        f"blinking_cursor = {_toml_scalar(config.blinking_cursor)}",
        f"log_level = {_toml_scalar(config.log_level)}",
    ]
    try:
        resolved.parent.mkdir(parents=True, exist_ok=True)
        resolved.write_text("\n".join(lines) + "\n", encoding="utf-8")
    except OSError as exc:
        raise TermRosterError(
            f"Failed to write config: {resolved}",
            code=ErrorCode.CONFIG_ERROR,
            hint=str(exc) or "Check that the config directory is writable.",
        ) from exc
    with suppress(OSError):
        resolved.chmod(0o600)
    return resolved
