"""Logging setup for fieldops."""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional


def setup_logger(
    name: str = "fieldops",
    level: int | str = logging.INFO,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure and return a logger.

    Args:
        name: Logger name.
        level: Logging level (number or name such as "DEBUG").
        log_file: Optional path to log file. If None, logs to stderr only.

    Returns:
        Configured logger.
    """
    log = logging.getLogger(name)
    if log.handlers:
        return log

    log.setLevel(level.upper() if isinstance(level, str) else level)
    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    h = logging.StreamHandler(sys.stderr)
    h.setFormatter(fmt)
    log.addHandler(h)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(fmt)
        log.addHandler(fh)

    return log


def get_logger(name: str = "fieldops") -> logging.Logger:
    """Return the application logger. Use after setup_logger has been called."""
    return logging.getLogger(name)


def _format_payload(payload: Any) -> str:
    if isinstance(payload, Mapping):
        return " ".join(f"{key}={value!r}" for key, value in payload.items())
    return repr(payload)


class AppLogger:
    """Adapts a stdlib logger to the `log(label, payload)` collaborator contract.

    Structured payloads are rendered as `key=value` pairs and also attached as
    `record.payload`. Records whose payload has `outcome == "error"` are
    emitted at WARNING, everything else at INFO.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger()

    def log(self, label: str, payload: Any = None) -> None:
        level = logging.INFO
        if isinstance(payload, Mapping) and payload.get("outcome") == "error":
            level = logging.WARNING
        try:
            if payload is None:
                self._logger.log(level, label)
            else:
                self._logger.log(
                    level,
                    "%s %s",
                    label,
                    _format_payload(payload),
                    extra={"payload": payload},
                )
        except Exception:
            # Logging never interrupts an API operation.
            return
