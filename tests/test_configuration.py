"""
Tests for configuration loading and conversion into provider settings.
"""

import pytest

from transloom.configuration import TransloomConfig, load_settings, provider_settings
from transloom.errors import ProviderConfigurationError

CONFIG_KEYS = [name for name in TransloomConfig.model_fields]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    for key in CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


class TestLoadSettings:
    def test_deepseek_from_environment(self, monkeypatch):
        monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-deep")

        settings = load_settings(_env_file=None)

        assert settings.TRANSLATION_PROVIDER == "deepseek"
        assert settings.TRANSLATION_TIMEOUT == 60.0
        assert provider_settings(settings).api_key == "sk-deep"

    @pytest.mark.parametrize(
        "raw,expected",
        [("Deep-Seek", "deepseek"), ("OPENAI", "openai"), ("gpt", "openai"), ("mock", "echo")],
    )
    def test_provider_names_are_normalised(self, monkeypatch, raw, expected):
        monkeypatch.setenv("TRANSLATION_PROVIDER", raw)
        monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-deep")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-open")

        assert load_settings(_env_file=None).TRANSLATION_PROVIDER == expected

    def test_missing_key_for_selected_provider(self, monkeypatch):
        monkeypatch.setenv("TRANSLATION_PROVIDER", "openai")

        with pytest.raises(ProviderConfigurationError, match="OPENAI_API_KEY"):
            load_settings(_env_file=None)

    def test_unknown_provider_is_reported(self, monkeypatch):
        monkeypatch.setenv("TRANSLATION_PROVIDER", "babelfish")

        with pytest.raises(ProviderConfigurationError, match="TRANSLATION_PROVIDER"):
            load_settings(_env_file=None)

    def test_invalid_timeout_is_reported(self, monkeypatch):
        monkeypatch.setenv("TRANSLATION_PROVIDER", "echo")
        monkeypatch.setenv("TRANSLATION_TIMEOUT", "-1")

        with pytest.raises(ProviderConfigurationError, match="TRANSLATION_TIMEOUT"):
            load_settings(_env_file=None)

    def test_dotenv_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "TRANSLATION_PROVIDER=openai\n"
            "OPENAI_API_KEY=sk-dotenv\n"
            "OPENAI_MODEL=gpt-4o\n"
            "TRANSLATION_PROVIDER_DEBUG=true\n",
            encoding="utf-8",
        )

        converted = provider_settings(load_settings(_env_file=env_file))

        assert converted.provider == "openai"
        assert converted.api_key == "sk-dotenv"
        assert converted.model == "gpt-4o"
        assert converted.debug is True

    def test_environment_overrides_yaml(self, monkeypatch, tmp_path):
        (tmp_path / "config.yaml").write_text(
            "TRANSLATION_PROVIDER: deepseek\n"
            "DEEPSEEK_API_KEY: sk-yaml\n"
            "DEEPSEEK_MODEL: deepseek-reasoner\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-env")

        converted = provider_settings(load_settings(_env_file=None))

        assert converted.api_key == "sk-env"
        assert converted.model == "deepseek-reasoner"

    def test_echo_needs_no_credentials(self, monkeypatch):
        monkeypatch.setenv("TRANSLATION_PROVIDER", "echo")

        converted = provider_settings(load_settings(_env_file=None))

        assert converted.provider == "echo"
        assert converted.api_key is None
