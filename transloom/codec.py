"""Numbered prompt encoding and response decoding."""

from __future__ import annotations

import re
from typing import List, Sequence

from .errors import DecodeCountMismatch
from .languages import language_name

MARKUP_PATTERN = re.compile(r"<[^>]+>")
NUMBERED_LINE_PATTERN = re.compile(r"^\d+\.")
NUMBER_PREFIX_PATTERN = re.compile(r"^\d+\.\s*")

CONTENT_HEADER = "Content to translate:"


def contains_markup(text: str) -> bool:
    """Detect whether the text carries HTML-like tags."""

    return bool(MARKUP_PATTERN.search(text))


def encode_items(items: Sequence[str]) -> str:
    """Render items as a 1-based numbered list separated by blank lines."""

    return "\n\n".join(f"{index + 1}. {item}" for index, item in enumerate(items))


def build_prompt(
    items: Sequence[str],
    *,
    source_language: str,
    target_language: str,
    context: str | None = None,
) -> str:
    """Compose the provider prompt for a batch of items."""

    source = language_name(source_language)
    target = language_name(target_language)
    setting = context or "general"
    numbered = encode_items(items)

    if any(contains_markup(item) for item in items):
        return (
            f"Please translate the following numbered {source} texts to {target}. "
            f"This is in the context of a {setting} application.\n\n"
            "IMPORTANT RULES:\n"
            "1. Maintain the same numbering format (1., 2., 3., etc.)\n"
            "2. For HTML content: preserve ALL HTML tags and structure exactly as they are\n"
            "3. Only translate the text content between HTML tags\n"
            "4. Do not translate HTML attributes or tag names\n"
            "5. Do not add any explanations or notes\n"
            "6. Maintain all formatting, spacing, and structure\n\n"
            f"{CONTENT_HEADER}\n{numbered}"
        )

    return (
        f"Please translate the following numbered {source} texts to {target}. "
        f"This is in the context of a {setting} application. "
        "Please maintain the same numbering format and provide only the "
        f"translations without any additional explanation or notes.\n\n"
        f"{CONTENT_HEADER}\n{numbered}"
    )


def decode_response(response_text: str, expected_count: int) -> List[str]:
    """Split a numbered response back into one string per item.

    A line starting with ``N.`` opens a new item; any other non-blank line
    continues the current one and is joined with a single space. Text
    preceding the first numbered line is discarded.
    """

    decoded: List[str] = []
    current: str | None = None

    for raw_line in response_text.split("\n"):
        line = raw_line.strip()
        if NUMBERED_LINE_PATTERN.match(line):
            if current is not None:
                decoded.append(current.strip())
            current = NUMBER_PREFIX_PATTERN.sub("", line, count=1)
        elif line and current is not None:
            current = f"{current} {line}"

    if current is not None:
        decoded.append(current.strip())

    if len(decoded) != expected_count:
        raise DecodeCountMismatch(expected_count, len(decoded))
    return decoded
