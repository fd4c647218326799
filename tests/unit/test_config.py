"""Unit tests for Settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.config.loader import load_config
from src.config.settings import Settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None, openai_api_key="")
        assert settings.relevance_threshold == 0.8
        assert settings.embedding_concurrency == 4
        assert settings.openai_text_model == "gpt-4o-mini"
        assert settings.ollama_embedding_model == "nomic-embed-text"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RELEVANCE_THRESHOLD", "0.65")
        monkeypatch.setenv("EMBEDDING_CONCURRENCY", "8")
        settings = Settings(_env_file=None)
        assert settings.relevance_threshold == 0.65
        assert settings.embedding_concurrency == 8

    def test_threshold_out_of_range_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, relevance_threshold=1.5)

    def test_available_providers(self) -> None:
        assert Settings(
            _env_file=None, openai_api_key="sk-test"
        ).get_available_llm_providers() == ["openai", "ollama"]
        assert Settings(
            _env_file=None, openai_api_key="", ollama_base_url=""
        ).get_available_llm_providers() == []


class TestLoadConfig:
    def test_merges_yaml_and_settings(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "app:\n  name: pagewise\n  version: 0.1.0\n"
            "retrieval:\n  relevance_threshold: 0.5\n"
        )
        settings = Settings(_env_file=None, openai_api_key="", relevance_threshold=0.9)

        config = load_config(str(config_file), settings=settings)

        assert config["app"]["name"] == "pagewise"
        assert config["app"]["port"] == settings.app_port
        # Settings win over the YAML base layer.
        assert config["retrieval"]["relevance_threshold"] == 0.9
        assert config["providers"]["available"] == ["ollama"]

    def test_missing_file_yields_settings_only(self, tmp_path: Path) -> None:
        settings = Settings(_env_file=None, openai_api_key="")
        config = load_config(str(tmp_path / "absent.yaml"), settings=settings)
        assert "name" not in config["app"]
        assert config["storage"]["database_path"] == settings.database_path
