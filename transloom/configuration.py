"""Layered configuration loader for Transloom.

Values are read, lowest priority first, from a YAML file
(``~/.config/transloom/config.yaml`` then ``./config.yaml``), a local
``.env`` file and the process environment.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Sequence

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .errors import ProviderConfigurationError
from .providers import ProviderSettings

APP_NAME = "transloom"

YAML_FILES = (
    Path.home() / ".config" / APP_NAME / "config.yaml",
    Path("config.yaml"),
)

PROVIDER_SYNONYMS = {
    "deep_seek": "deepseek",
    "deepseek_chat": "deepseek",
    "open_ai": "openai",
    "gpt": "openai",
    "noop": "echo",
    "mock": "echo",
}


def normalise_provider_name(value: str) -> str:
    """Map a provider identifier and its common spellings to one canonical name."""

    normalized = value.strip().lower().replace("-", "_")
    return PROVIDER_SYNONYMS.get(normalized, normalized)


class TransloomConfig(BaseSettings):
    """Schema describing all supported configuration options."""

    TRANSLATION_PROVIDER: Literal["deepseek", "openai", "echo"] = Field(
        default="deepseek",
        description="Completion provider used for machine translation.",
    )
    DEEPSEEK_API_KEY: SecretStr | None = None
    DEEPSEEK_BASE_URL: str | None = None
    DEEPSEEK_MODEL: str | None = None
    OPENAI_API_KEY: SecretStr | None = None
    OPENAI_BASE_URL: str | None = None
    OPENAI_MODEL: str | None = None
    TRANSLATION_TIMEOUT: float = Field(
        default=60.0,
        gt=0,
        description="Seconds to wait for one provider call.",
    )
    TRANSLATION_PROVIDER_DEBUG: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file=YAML_FILES,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
        )

    @field_validator("TRANSLATION_PROVIDER", mode="before")
    @classmethod
    def _normalise_provider(cls, value: Any) -> Any:
        if isinstance(value, str):
            return normalise_provider_name(value)
        return value


def load_settings(**overrides: Any) -> TransloomConfig:
    """Load and validate configuration, raising a readable error on failure."""

    try:
        settings = TransloomConfig(**overrides)
    except ValidationError as exc:
        raise ProviderConfigurationError(
            _format_validation_errors(exc.errors())
        ) from exc
    _validate_provider_settings(settings)
    return settings


def _validate_provider_settings(settings: TransloomConfig) -> None:
    provider = settings.TRANSLATION_PROVIDER
    required = {
        "deepseek": ("DEEPSEEK_API_KEY", settings.DEEPSEEK_API_KEY),
        "openai": ("OPENAI_API_KEY", settings.OPENAI_API_KEY),
    }
    if provider not in required:
        return

    name, value = required[provider]
    if value is None or not value.get_secret_value():
        raise ProviderConfigurationError(
            "Configuration validation errors detected:\n"
            f"- {name} is required when TRANSLATION_PROVIDER is '{provider}'."
        )


def _format_validation_errors(entries: Sequence[Any]) -> str:
    details: list[str] = []
    for entry in entries:
        path = entry.get("loc") or []
        if isinstance(path, (list, tuple)):
            location = ".".join(str(part) for part in path if part not in {None, ""})
        else:
            location = str(path)
        message = str(entry.get("msg") or "Invalid value")
        prefix = f"{location}: " if location else ""
        details.append(f"- {prefix}{message}")
    return "Configuration validation errors detected:\n" + "\n".join(details)


@lru_cache(maxsize=1)
def get_settings() -> TransloomConfig:
    """Return the validated settings, loaded once per process."""

    return load_settings()


def provider_settings(settings: TransloomConfig) -> ProviderSettings:
    """Translate the loaded configuration into an adapter settings value."""

    provider = settings.TRANSLATION_PROVIDER
    if provider == "openai":
        secret = settings.OPENAI_API_KEY
        base_url = settings.OPENAI_BASE_URL
        model = settings.OPENAI_MODEL
    elif provider == "deepseek":
        secret = settings.DEEPSEEK_API_KEY
        base_url = settings.DEEPSEEK_BASE_URL
        model = settings.DEEPSEEK_MODEL
    else:
        secret = base_url = model = None

    return ProviderSettings(
        provider=provider,
        api_key=secret.get_secret_value() if secret is not None else None,
        base_url=base_url,
        model=model,
        timeout=settings.TRANSLATION_TIMEOUT,
        debug=settings.TRANSLATION_PROVIDER_DEBUG,
    )
