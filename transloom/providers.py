"""Text completion provider abstractions."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Dict

from openai import OpenAI

from .codec import CONTENT_HEADER
from .errors import (
    EmptyResponse,
    ProviderConfigurationError,
    ProviderError,
    UnsupportedProvider,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderSettings:
    """Explicit provider configuration handed to an adapter at construction."""

    provider: str = "deepseek"
    api_key: str | None = None
    base_url: str | None = None
    model: str | None = None
    timeout: float = 60.0
    debug: bool = False


class CompletionProvider(ABC):
    """Abstract adapter for text completion providers."""

    @abstractmethod
    def complete(self, prompt: str, *, max_tokens: int | None = None) -> str:
        """Return the provider's best-effort answer to ``prompt``."""


class EchoProvider(CompletionProvider):
    """A provider that answers with the numbered content it was sent."""

    def complete(self, prompt: str, *, max_tokens: int | None = None) -> str:
        _, _, body = prompt.rpartition(CONTENT_HEADER)
        return body.strip()


class OpenAICompatibleProvider(CompletionProvider):
    """Completion provider speaking the OpenAI chat completions protocol."""

    TEMPERATURE = 0.3
    ENDPOINTS: Dict[str, tuple[str | None, str]] = {
        "deepseek": ("https://api.deepseek.com", "deepseek-chat"),
        "openai": (None, "gpt-4o-mini"),
    }

    def __init__(self, settings: ProviderSettings) -> None:
        if settings.provider not in self.ENDPOINTS:
            raise UnsupportedProvider(
                f"Unsupported translation provider: {settings.provider}"
            )
        if not settings.api_key:
            raise ProviderConfigurationError(
                f"No API key configured for provider '{settings.provider}'."
            )

        default_url, default_model = self.ENDPOINTS[settings.provider]
        self.provider_name = settings.provider
        self.model = settings.model or default_model
        self.debug = settings.debug
        self._client = OpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url or default_url,
            timeout=settings.timeout,
        )

    def complete(self, prompt: str, *, max_tokens: int | None = None) -> str:
        self._log_debug("provider.request.prompt", prompt)

        request: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.TEMPERATURE,
        }
        if max_tokens:
            request["max_tokens"] = max_tokens

        try:
            response = self._client.chat.completions.create(**request)
        except Exception as exc:
            raise ProviderError(
                f"{self.provider_name} API error: {exc}"
            ) from exc
        self._log_debug("provider.response.raw", self._safe_dump_response(response))

        content = self._extract_content(response)
        if content is None or not content.strip():
            raise EmptyResponse(
                f"{self.provider_name} returned an empty completion."
            )
        return content.strip()

    def _extract_content(self, response: Any) -> str | None:
        """Pull the first message text out of a chat completion."""

        choices = getattr(response, "choices", None) or []
        for choice in choices:
            message = getattr(choice, "message", None)
            if message is None:
                continue
            message_content = getattr(message, "content", None)
            if isinstance(message_content, list):
                parts: list[str] = []
                for part in message_content:
                    text_value = getattr(part, "text", None)
                    if text_value is None and isinstance(part, dict):
                        text_value = part.get("text")
                    if text_value:
                        parts.append(str(text_value))
                if parts:
                    return "\n".join(parts)
            elif message_content:
                return str(message_content)
        return None

    def _log_debug(self, label: str, payload: Any) -> None:
        """Emit structured debug information when enabled."""

        if not self.debug:
            return
        if isinstance(payload, (dict, list)):
            message = json.dumps(payload, ensure_ascii=False, indent=2, default=str)
        else:
            message = str(payload)
        logger.debug("%s:\n%s", label, message)

    def _safe_dump_response(self, response: Any) -> Any:
        """Best-effort conversion of SDK response objects into JSON-friendly data."""

        model_dump = getattr(response, "model_dump", None)
        if callable(model_dump):
            try:
                return model_dump()
            except (TypeError, ValueError):
                pass
        return str(response)


def build_provider(settings: ProviderSettings) -> CompletionProvider:
    """Factory to create providers by identifier."""

    normalized = (settings.provider or "deepseek").strip().lower()
    if normalized in {"echo", "noop", "mock"}:
        return EchoProvider()
    if normalized in OpenAICompatibleProvider.ENDPOINTS:
        if normalized != settings.provider:
            settings = replace(settings, provider=normalized)
        return OpenAICompatibleProvider(settings)
    raise UnsupportedProvider(
        f"Unsupported translation provider: {settings.provider}"
    )
