# tests/core/test_config.py
"""Tests for configuration schema and loading."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError


class TestProviderCredentials:
    """Credential value object."""

    def test_defaults_are_empty(self) -> None:
        from textchain.core.config import ProviderCredentials

        creds = ProviderCredentials()
        assert creds.openai_api_key == ""
        assert creds.google_api_key == ""

    def test_api_key_for_each_provider(self) -> None:
        from textchain.contracts import Provider
        from textchain.core.config import ProviderCredentials

        creds = ProviderCredentials(
            openai_api_key="a",
            groq_api_key="b",
            anthropic_api_key="c",
            google_api_key="d",
        )
        assert creds.api_key_for(Provider.OPENAI) == "a"
        assert creds.api_key_for(Provider.GROQ) == "b"
        assert creds.api_key_for(Provider.ANTHROPIC) == "c"
        assert creds.api_key_for(Provider.GOOGLE) == "d"

    def test_credentials_are_frozen(self) -> None:
        from textchain.core.config import ProviderCredentials

        creds = ProviderCredentials(openai_api_key="a")
        with pytest.raises(ValidationError):
            creds.openai_api_key = "b"  # type: ignore[misc]


class TestProviderEndpointSettings:
    """Wire constants and their validation."""

    def test_defaults_match_public_endpoints(self) -> None:
        from textchain.core.config import ProviderEndpointSettings

        settings = ProviderEndpointSettings()
        assert settings.openai_url == "https://api.openai.com/v1/chat/completions"
        assert settings.groq_url == "https://api.groq.com/openai/v1/chat/completions"
        assert settings.anthropic_url == "https://api.anthropic.com/v1/messages"
        assert settings.anthropic_version == "2023-06-01"
        assert settings.anthropic_max_tokens == 1024
        assert settings.google_temperature == 0.0

    def test_max_tokens_must_be_positive(self) -> None:
        from textchain.core.config import ProviderEndpointSettings

        with pytest.raises(ValidationError):
            ProviderEndpointSettings(anthropic_max_tokens=0)


class TestTextchainSettings:
    """Top-level settings."""

    def test_all_sections_default(self) -> None:
        from textchain.core.config import TextchainSettings

        settings = TextchainSettings()
        assert settings.ledger.url == "sqlite:///./state/textchain.db"
        assert settings.http.timeout_seconds == 60.0
        assert settings.logging.level == "INFO"
        assert settings.tracing.enabled is False

    def test_invalid_log_level_rejected(self) -> None:
        from textchain.core.config import LoggingSettings

        with pytest.raises(ValidationError):
            LoggingSettings(level="TRACE")  # type: ignore[arg-type]

    def test_timeout_must_be_positive(self) -> None:
        from textchain.core.config import HttpSettings

        with pytest.raises(ValidationError):
            HttpSettings(timeout_seconds=0)


class TestLoadSettings:
    """YAML + environment loading through Dynaconf."""

    def _write(self, path: Path, data: dict[str, object]) -> Path:
        path.write_text(yaml.safe_dump(data))
        return path

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        from textchain.core.config import load_settings

        config_file = self._write(
            tmp_path / "settings.yaml",
            {
                "ledger": {"url": "sqlite:///runs.db"},
                "http": {"timeout_seconds": 15},
                "credentials": {"openai_api_key": "sk-from-file"},
            },
        )

        settings = load_settings(config_file)

        assert settings.ledger.url == "sqlite:///runs.db"
        assert settings.http.timeout_seconds == 15
        assert settings.credentials.openai_api_key == "sk-from-file"
        assert settings.credentials.groq_api_key == ""

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from textchain.core.config import load_settings

        config_file = self._write(
            tmp_path / "settings.yaml",
            {"credentials": {"openai_api_key": "sk-from-file", "groq_api_key": "gsk-file"}},
        )
        monkeypatch.setenv("TEXTCHAIN_CREDENTIALS__OPENAI_API_KEY", "sk-from-env")

        settings = load_settings(config_file)

        assert settings.credentials.openai_api_key == "sk-from-env"
        assert settings.credentials.groq_api_key == "gsk-file"

    def test_env_var_expansion_with_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from textchain.core.config import load_settings

        monkeypatch.setenv("TC_TEST_ANTHROPIC_KEY", "sk-ant-expanded")
        monkeypatch.delenv("TC_TEST_MISSING_VAR", raising=False)
        config_file = self._write(
            tmp_path / "settings.yaml",
            {
                "credentials": {"anthropic_api_key": "${TC_TEST_ANTHROPIC_KEY}"},
                "ledger": {"url": "${TC_TEST_MISSING_VAR:-sqlite:///fallback.db}"},
            },
        )

        settings = load_settings(config_file)

        assert settings.credentials.anthropic_api_key == "sk-ant-expanded"
        assert settings.ledger.url == "sqlite:///fallback.db"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        from textchain.core.config import load_settings

        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "nope.yaml")

    def test_invalid_value_raises_validation_error(self, tmp_path: Path) -> None:
        from textchain.core.config import load_settings

        config_file = self._write(tmp_path / "settings.yaml", {"http": {"timeout_seconds": -1}})

        with pytest.raises(ValidationError):
            load_settings(config_file)


class TestResolveConfig:
    """Secret redaction for logging."""

    def test_secrets_redacted(self) -> None:
        from textchain.core.config import ProviderCredentials, TextchainSettings, resolve_config

        settings = TextchainSettings(credentials=ProviderCredentials(openai_api_key="sk-secret"))

        resolved = resolve_config(settings)

        assert resolved["credentials"]["openai_api_key"] == "***"
        # Unset secrets stay empty so "not configured" remains visible
        assert resolved["credentials"]["groq_api_key"] == ""
        assert resolved["ledger"]["url"] == "sqlite:///./state/textchain.db"

    def test_expand_env_vars_keeps_unresolvable_reference(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from textchain.core.config import _expand_env_vars

        monkeypatch.delenv("TC_TEST_UNSET", raising=False)

        result = _expand_env_vars({"a": {"b": ["${TC_TEST_UNSET}"]}})

        assert result == {"a": {"b": ["${TC_TEST_UNSET}"]}}
