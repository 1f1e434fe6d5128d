"""Language utilities for fieldops.

Display messages produced by the API layer (fallbacks, transport failures)
exist in English and Indonesian; this enum is the single switch between them
and lives in the domain layer so config, services and adapters share it
without circular imports.
"""

from __future__ import annotations

from enum import Enum


class Language(str, Enum):
    """Supported languages for user-facing messages."""

    ENGLISH = "en"
    INDONESIAN = "id"

    @classmethod
    def default(cls) -> "Language":
        """Return the default language used across the application."""

        return cls.ENGLISH

    def label(self) -> str:
        """Human readable label for prompts and logging."""

        return "Indonesian" if self is Language.INDONESIAN else "English"
