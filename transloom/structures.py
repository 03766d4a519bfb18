"""Core data structures for the Transloom pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from .errors import BatchConfigError


@dataclass(frozen=True)
class TranslationRequest:
    """A single text to translate together with its language pair."""

    text: str
    source_language: str
    target_language: str
    context: str = ""


@dataclass(frozen=True)
class Segment:
    """A translatable text run located inside a markup string."""

    text: str
    start: int
    end: int


@dataclass
class Batch:
    """A group of text items sent to the provider in one request."""

    batch_id: int
    items: List[str]

    @property
    def total_chars(self) -> int:
        return sum(len(item) for item in self.items)


@dataclass(frozen=True)
class BatchConfig:
    """Batching and pacing limits applied to one translation call."""

    max_items_per_batch: int = 20
    max_chars_per_batch: int = 3000
    inter_batch_delay_ms: int = 1000
    item_delay_ms: int = 500
    max_retries: int = 0
    retry_backoff: Tuple[float, ...] = (1, 4, 9)

    def __post_init__(self) -> None:
        problems: List[str] = []
        for name in ("max_items_per_batch", "max_chars_per_batch"):
            if getattr(self, name) < 1:
                problems.append(f"{name} must be at least 1")
        for name in ("inter_batch_delay_ms", "item_delay_ms", "max_retries"):
            if getattr(self, name) < 0:
                problems.append(f"{name} must not be negative")
        if any(wait < 0 for wait in self.retry_backoff):
            problems.append("retry_backoff must not contain negative waits")
        if problems:
            raise BatchConfigError(
                "Invalid batch configuration:\n"
                + "\n".join(f"- {problem}" for problem in problems)
            )


DEFAULT_CONFIG = BatchConfig()

# HTML-bearing runs take more of the provider's attention per character.
RICH_TEXT_CONFIG = BatchConfig(
    max_items_per_batch=3,
    max_chars_per_batch=2000,
    inter_batch_delay_ms=1500,
)


@dataclass
class TranslationOutcome:
    """Report returned after the orchestrator processed a list of texts."""

    translations: List[str]
    total_items: int
    total_batches: int = 0
    failed_batches: int = 0
    fallback_items: int = 0
    untranslated_items: int = 0
    elapsed_seconds: float = 0.0
    error_messages: List[str] = field(default_factory=list)
