"""Command line interface for the Transloom translation pipeline."""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys
from dataclasses import replace
from typing import Iterable, Optional, TextIO

from .configuration import (
    get_settings,
    load_settings,
    normalise_provider_name,
    provider_settings,
)
from .errors import (
    BatchConfigError,
    ProviderConfigurationError,
    TranslationUnavailable,
    TransloomError,
    UnsupportedProvider,
)
from .providers import OpenAICompatibleProvider, ProviderSettings, build_provider
from .structures import DEFAULT_CONFIG, BatchConfig
from .translator import Translator

MODES = ("text", "batch", "rich")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="transloom",
        description=(
            "Translate CMS text, text lists, or HTML rich text through a language model."
        ),
    )
    parser.add_argument(
        "input_file",
        nargs="?",
        help="File holding the content to translate. Reads standard input when omitted.",
    )
    parser.add_argument(
        "-t",
        "--target-language",
        required=True,
        help="Destination language (name or ISO-639 code).",
    )
    parser.add_argument(
        "-s",
        "--source-language",
        default="en",
        help="Source language (name or ISO-639 code, default: en).",
    )
    parser.add_argument(
        "-c",
        "--context",
        default="general",
        help="Kind of content being translated, e.g. post, tag, category.",
    )
    parser.add_argument(
        "--mode",
        choices=MODES,
        default="text",
        help="text: one string; batch: JSON array of strings; rich: HTML fragment.",
    )
    parser.add_argument(
        "-p",
        "--provider",
        help="Completion provider identifier (default from configuration).",
    )
    parser.add_argument(
        "-m",
        "--model",
        help="Provider-specific model identifier.",
    )
    parser.add_argument(
        "--max-items",
        type=int,
        default=DEFAULT_CONFIG.max_items_per_batch,
        help="Maximum texts per provider request in batch mode (default: 20).",
    )
    parser.add_argument(
        "--max-chars",
        type=int,
        default=DEFAULT_CONFIG.max_chars_per_batch,
        help="Maximum characters per provider request in batch mode (default: 3000).",
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=DEFAULT_CONFIG.inter_batch_delay_ms,
        help="Pause between batches in milliseconds (default: 1000).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show batch progress information.",
    )
    parser.add_argument(
        "--debug-provider",
        action="store_true",
        help="Log complete provider prompts and responses for troubleshooting.",
    )
    return parser


def configure_logging(*, verbose: bool, provider_debug: bool) -> None:
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if provider_debug:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="[transloom] %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def resolve_provider_settings(
    provider: str | None,
    model: str | None,
    provider_debug: bool,
) -> ProviderSettings:
    """Combine loaded configuration with command line overrides."""

    if provider:
        name = normalise_provider_name(provider)
        if name == "echo":
            return ProviderSettings(provider="echo", debug=provider_debug)
        if name not in OpenAICompatibleProvider.ENDPOINTS:
            raise UnsupportedProvider(f"Unsupported translation provider: {provider}")
        # Credentials, endpoint and model must come from the chosen provider's keys.
        settings = provider_settings(load_settings(TRANSLATION_PROVIDER=name))
    else:
        settings = provider_settings(get_settings())

    overrides: dict[str, object] = {}
    if model:
        overrides["model"] = model
    if provider_debug:
        overrides["debug"] = True
    return replace(settings, **overrides) if overrides else settings


def read_input(input_file: str | None, stdin: TextIO) -> str:
    if input_file in (None, "-"):
        return stdin.read()
    return pathlib.Path(input_file).expanduser().read_text(encoding="utf-8")


def execute_translation(
    *,
    translator: Translator,
    mode: str,
    content: str,
    source_language: str,
    target_language: str,
    context: str,
    config: BatchConfig,
) -> tuple[int, str | None, str | None]:
    """Run one translation and return the exit code, output, and message."""

    if mode == "batch":
        try:
            texts = json.loads(content)
        except json.JSONDecodeError as exc:
            return 1, None, f"Batch input must be a JSON array of strings ({exc})."
        if not isinstance(texts, list) or not all(isinstance(t, str) for t in texts):
            return 1, None, "Batch input must be a JSON array of strings."
        translated = translator.translate_batch(
            texts, source_language, target_language, context, config=config
        )
        return 0, json.dumps(translated, ensure_ascii=False, indent=2), None

    if mode == "rich":
        return 0, translator.translate_rich_text(
            content, source_language, target_language, context
        ), None

    try:
        translated_text = translator.translate(
            content.strip(), source_language, target_language, context
        )
    except TranslationUnavailable as exc:
        return 2, None, str(exc)
    return 0, translated_text, None


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    configure_logging(verbose=args.verbose, provider_debug=args.debug_provider)

    try:
        settings = resolve_provider_settings(
            args.provider, args.model, args.debug_provider
        )
        provider = build_provider(settings)
    except ProviderConfigurationError as exc:
        print(exc, file=sys.stderr)
        return 1

    try:
        config = replace(
            DEFAULT_CONFIG,
            max_items_per_batch=args.max_items,
            max_chars_per_batch=args.max_chars,
            inter_batch_delay_ms=args.delay_ms,
        )
    except BatchConfigError as exc:
        print(exc, file=sys.stderr)
        return 1

    try:
        content = read_input(args.input_file, sys.stdin)
    except OSError as exc:
        print(f"Could not read input: {exc}", file=sys.stderr)
        return 1

    translator = Translator(provider, config=config)

    try:
        exit_code, output, message = execute_translation(
            translator=translator,
            mode=args.mode,
            content=content,
            source_language=args.source_language,
            target_language=args.target_language,
            context=args.context,
            config=config,
        )
    except TransloomError as exc:
        exit_code, output, message = 1, None, str(exc)
    except KeyboardInterrupt:
        exit_code, output, message = 2, None, "Translation interrupted by user."

    if message:
        print(message, file=sys.stderr)
    if output is not None:
        print(output)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
