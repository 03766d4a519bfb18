"""High-level orchestration for batch, single-text and rich-text translation."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Sequence

from .codec import build_prompt, decode_response
from .errors import (
    DecodeCountMismatch,
    EmptyResponse,
    ProviderError,
    TransloomError,
    TranslationUnavailable,
)
from .languages import same_language
from .markup import reinsert_segments
from .providers import CompletionProvider
from .segmenter import extract_segments, plan_batches
from .structures import (
    DEFAULT_CONFIG,
    RICH_TEXT_CONFIG,
    Batch,
    BatchConfig,
    TranslationOutcome,
    TranslationRequest,
)

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], None]

MIN_RESPONSE_TOKENS = 1000
MAX_RESPONSE_TOKENS = 4000


def response_token_budget(prompt: str) -> int:
    """Size the completion budget after the prompt, within fixed bounds."""

    return max(MIN_RESPONSE_TOKENS, min(MAX_RESPONSE_TOKENS, len(prompt)))


class BatchTranslator:
    """Sends one batch through the provider and decodes the numbered answer."""

    def __init__(self, provider: CompletionProvider, *, sleep: Sleeper = time.sleep) -> None:
        self.provider = provider
        self.sleep = sleep

    def translate(
        self,
        batch: Batch,
        *,
        source_language: str,
        target_language: str,
        context: str | None = None,
        config: BatchConfig = DEFAULT_CONFIG,
    ) -> List[str]:
        prompt = build_prompt(
            batch.items,
            source_language=source_language,
            target_language=target_language,
            context=context,
        )
        response = self._complete(prompt, batch=batch, config=config)
        if not response or not response.strip():
            raise EmptyResponse(f"Batch {batch.batch_id} received an empty response.")
        return decode_response(response, len(batch.items))

    def _complete(self, prompt: str, *, batch: Batch, config: BatchConfig) -> str:
        max_tokens = response_token_budget(prompt)
        attempt = 0
        while True:
            try:
                return self.provider.complete(prompt, max_tokens=max_tokens)
            except EmptyResponse:
                raise
            except ProviderError as exc:
                attempt += 1
                if attempt > config.max_retries:
                    raise
                backoff = config.retry_backoff or (0,)
                wait_time = backoff[min(attempt - 1, len(backoff) - 1)]
                logger.warning(
                    "Batch %s failed (attempt %s of %s: %s). Retrying in %ss.",
                    batch.batch_id,
                    attempt,
                    config.max_retries,
                    exc,
                    wait_time,
                )
                self.sleep(wait_time)


class Translator:
    """Coordinates batching, provider calls and the fallback cascade.

    Batches and, within a failed batch, individual items are processed
    strictly one after the other. The provider call and the pacing pause
    are the only points where the calling thread waits. A ``Translator``
    keeps no per-call state, so one instance may serve concurrent callers.
    """

    def __init__(
        self,
        provider: CompletionProvider,
        *,
        config: BatchConfig = DEFAULT_CONFIG,
        sleep: Sleeper = time.sleep,
    ) -> None:
        self.provider = provider
        self.config = config
        self.sleep = sleep
        self.batch_translator = BatchTranslator(provider, sleep=sleep)

    def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        context: str | None = None,
    ) -> str:
        """Translate one text, raising when no translation could be obtained."""

        if not text or not text.strip():
            return ""
        if same_language(source_language, target_language):
            return text

        try:
            translated = self.batch_translator.translate(
                Batch(batch_id=1, items=[text]),
                source_language=source_language,
                target_language=target_language,
                context=context,
                config=self.config,
            )
        except (ProviderError, DecodeCountMismatch) as exc:
            logger.error("Translation failed: %s", exc)
            raise TranslationUnavailable(
                "Translation service temporarily unavailable"
            ) from exc
        return translated[0]

    def translate_request(self, request: TranslationRequest) -> str:
        return self.translate(
            request.text,
            request.source_language,
            request.target_language,
            request.context,
        )

    def translate_batch(
        self,
        texts: Sequence[str],
        source_language: str,
        target_language: str,
        context: str | None = None,
        config: BatchConfig | None = None,
    ) -> List[str]:
        """Translate many texts; the result always lines up with ``texts``."""

        return self.run(
            texts,
            source_language,
            target_language,
            context,
            config=config,
        ).translations

    def run(
        self,
        texts: Sequence[str],
        source_language: str,
        target_language: str,
        context: str | None = None,
        *,
        config: BatchConfig | None = None,
    ) -> TranslationOutcome:
        """Translate ``texts`` batch by batch and report how it went."""

        start_time = time.time()
        config = config or self.config
        # Blank items collapse to "" and never reach the provider.
        results = [text if text.strip() else "" for text in texts]
        outcome = TranslationOutcome(translations=results, total_items=len(results))

        if not results or same_language(source_language, target_language):
            return outcome

        pending = [index for index, text in enumerate(results) if text.strip()]
        batches = plan_batches(
            [results[index] for index in pending],
            config.max_items_per_batch,
            config.max_chars_per_batch,
        )
        outcome.total_batches = len(batches)
        logger.debug(
            "Prepared %s texts (%s non-blank) in %s batches.",
            len(results),
            len(pending),
            len(batches),
        )

        cursor = 0
        for position, batch in enumerate(batches):
            slots = pending[cursor:cursor + len(batch.items)]
            cursor += len(batch.items)
            try:
                translated = self.batch_translator.translate(
                    batch,
                    source_language=source_language,
                    target_language=target_language,
                    context=context,
                    config=config,
                )
            except (ProviderError, DecodeCountMismatch) as exc:
                outcome.failed_batches += 1
                outcome.error_messages.append(f"Batch {batch.batch_id}: {exc}")
                logger.warning(
                    "Batch %s failed (%s); translating its %s items one by one.",
                    batch.batch_id,
                    exc,
                    len(batch.items),
                )
                self._translate_items(
                    batch,
                    slots,
                    results,
                    outcome,
                    source_language=source_language,
                    target_language=target_language,
                    context=context,
                    config=config,
                )
                continue

            for slot, value in zip(slots, translated):
                results[slot] = value
            logger.info(
                "Processed batch %s (%s items, %s chars).",
                batch.batch_id,
                len(batch.items),
                batch.total_chars,
            )
            if position < len(batches) - 1:
                self.sleep(config.inter_batch_delay_ms / 1000)

        outcome.elapsed_seconds = time.time() - start_time
        return outcome

    def _translate_items(
        self,
        batch: Batch,
        slots: Sequence[int],
        results: List[str],
        outcome: TranslationOutcome,
        *,
        source_language: str,
        target_language: str,
        context: str | None,
        config: BatchConfig,
    ) -> None:
        for slot, item in zip(slots, batch.items):
            try:
                translated = self.batch_translator.translate(
                    Batch(batch_id=batch.batch_id, items=[item]),
                    source_language=source_language,
                    target_language=target_language,
                    context=context,
                    config=config,
                )
            except (ProviderError, DecodeCountMismatch) as exc:
                outcome.untranslated_items += 1
                outcome.error_messages.append(f"Batch {batch.batch_id} item: {exc}")
                logger.warning("Keeping original text after item failure: %s", exc)
                continue
            results[slot] = translated[0]
            outcome.fallback_items += 1
            self.sleep(config.item_delay_ms / 1000)

    def translate_rich_text(
        self,
        markup: str,
        source_language: str,
        target_language: str,
        context: str | None = None,
    ) -> str:
        """Translate the text runs of an HTML fragment, leaving its tags intact."""

        if not markup or not markup.strip():
            return ""
        if same_language(source_language, target_language):
            return markup

        try:
            segments = extract_segments(markup)
            if not segments:
                return markup
            translations = self.translate_batch(
                [segment.text for segment in segments],
                source_language,
                target_language,
                context,
                config=RICH_TEXT_CONFIG,
            )
            return reinsert_segments(markup, segments, translations)
        except (TransloomError, ValueError) as exc:
            logger.error("Rich text translation failed: %s", exc)
            return markup
