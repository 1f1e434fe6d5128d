"""Bearer token providers.

The API clients read the token through a zero-argument callable on every
request. `FileTokenStore` keeps it in the user config directory so the CLI
can log in once; `StaticTokenProvider` serves a fixed token (env var, tests).
"""

from __future__ import annotations

from pathlib import Path

from fieldops.core.config import get_user_config_dir


class StaticTokenProvider:
    def __init__(self, token: str | None = None) -> None:
        self._token = token or None

    def __call__(self) -> str | None:
        return self._token


class FileTokenStore:
    """Token persisted as a single line in `<user config>/token`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or get_user_config_dir() / "token"

    @property
    def path(self) -> Path:
        return self._path

    def __call__(self) -> str | None:
        if not self._path.exists():
            return None
        token = self._path.read_text(encoding="utf-8").strip()
        return token or None

    def save(self, token: str) -> Path:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(token.strip() + "\n", encoding="utf-8")
        return self._path

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
