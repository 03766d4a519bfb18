"""Error definitions for the Transloom translation pipeline."""

from __future__ import annotations


class TransloomError(Exception):
    """Base exception for all custom errors."""


class ProviderConfigurationError(TransloomError):
    """Raised when the completion provider is misconfigured."""


class UnsupportedProvider(ProviderConfigurationError):
    """Raised when a provider identifier has no implementation."""


class ProviderError(TransloomError):
    """Raised when the completion provider call fails."""


class EmptyResponse(ProviderError):
    """Raised when the provider answered without usable text."""


class DecodeCountMismatch(TransloomError):
    """Raised when a numbered response does not line up with its batch."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Expected {expected} numbered translations but decoded {actual}."
        )
        self.expected = expected
        self.actual = actual


class TranslationUnavailable(TransloomError):
    """Raised when a single text could not be translated by any means."""


class BatchConfigError(TransloomError, ValueError):
    """Raised when batching or pacing limits are out of range."""
