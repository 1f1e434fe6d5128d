"""Core configuration.

Responsibility:
- Centralize environment variables (pydantic-settings) for the API layer.
- Give adapters (HTTP, token store, CLI) one consistent view of base URL,
  endpoint paths and timeouts.
- Own the per-user config directory (`.env` written by `fieldops doctor
  setup`, token written by `fieldops login`).
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fieldops.core.domain.language import Language

APP_DIR_NAME = "fieldops"
CONFIG_DIR_ENV = "FIELDOPS_CONFIG_DIR"


def get_user_config_dir() -> Path:
    """Per-user configuration directory.

    `FIELDOPS_CONFIG_DIR` wins; otherwise APPDATA on Windows, Application
    Support on macOS and `$XDG_CONFIG_HOME` (or `~/.config`) elsewhere.
    """

    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()

    home = Path.home()
    if sys.platform.startswith("win"):
        root = Path(os.environ.get("APPDATA") or home)
    elif sys.platform == "darwin":
        root = home / "Library" / "Application Support"
    else:
        root = Path(os.environ.get("XDG_CONFIG_HOME") or home / ".config")
    return root / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _split_env_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if line.startswith("export "):
        line = line[len("export "):]
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key or key.startswith("#"):
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1]
    return key, value


def read_user_env_vars(path: Path | None = None) -> dict[str, str]:
    """Variables of the user `.env`; empty when missing or unreadable."""

    env_path = path or get_user_env_file()
    try:
        text = env_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        # Missing or unreadable config is replaced on the next write.
        return {}

    values: dict[str, str] = {}
    for raw_line in text.splitlines():
        pair = _split_env_line(raw_line)
        if pair is not None:
            values[pair[0]] = pair[1]
    return values


def write_user_env_vars(values: Mapping[str, str | None]) -> Path:
    """Merge `values` into the user `.env`; a None value removes the key."""

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    merged = read_user_env_vars(env_path)
    for key, value in values.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value

    body = "".join(f"{key}={merged[key]}\n" for key in sorted(merged))
    env_path.write_text(f"# {APP_DIR_NAME} user config (.env)\n{body}", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    Every endpoint the clients talk to is derived from `base_url` plus one of
    the path fields below, so pointing the CLI at another backend is a matter
    of environment variables (`FIELDOPS_*`) or the user `.env`.
    """

    model_config = SettingsConfigDict(
        env_prefix="FIELDOPS_",
        extra="ignore",
        case_sensitive=False,
        # Project .env first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    base_url: str = Field(
        default="http://localhost:8000/api",
        min_length=8,
        description="Base URL of the field-ops REST API.",
    )
    api_token: str | None = Field(
        default=None,
        description="Static bearer token; overrides the token stored by `fieldops login`.",
    )

    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout per JSON request (seconds).",
    )
    upload_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout per multipart upload (seconds).",
    )
    user_agent: str = Field(
        default="fieldops/0.1",
        min_length=1,
        description="User-Agent sent with every request.",
    )
    client_version: str = Field(
        default="2.0.0",
        min_length=1,
        description="Client version marker sent on login.",
    )

    language: Language = Field(
        default=Language.ENGLISH,
        description="Language for fallback and transport error messages (en/id).",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level name for the `fieldops` logger.",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional log file; stderr only when unset.",
    )

    # Auth endpoints
    login_path: str = Field(default="/login")
    request_otp_path: str = Field(default="/send-otp")
    verify_otp_path: str = Field(default="/verify-otp")
    profile_path: str = Field(default="/profile")
    logout_path: str = Field(default="/logout")

    # Resource endpoints
    outlets_path: str = Field(default="/outlet")
    users_path: str = Field(default="/user")
    visits_path: str = Field(default="/visits")
    plan_visits_path: str = Field(default="/planvisit")
    notifications_path: str = Field(default="/notifications")

    def endpoint(self, path: str) -> str:
        """Join `base_url` and a resource/endpoint path."""

        return self.base_url.rstrip("/") + "/" + path.lstrip("/")
