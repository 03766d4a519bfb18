"""Language code helpers used when phrasing provider prompts."""

from __future__ import annotations

from typing import Dict

LANGUAGE_NAMES: Dict[str, str] = {
    "en": "English",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
}


def language_name(language: str | None) -> str:
    """Return the English name for a known code, or the descriptor as given."""

    if not language:
        return ""
    cleaned = language.strip()
    return LANGUAGE_NAMES.get(cleaned.lower(), cleaned)


def same_language(first: str | None, second: str | None) -> bool:
    """Whether two descriptors (codes or names) denote the same language."""

    return language_name(first).casefold() == language_name(second).casefold()
