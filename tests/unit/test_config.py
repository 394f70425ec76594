"""Tests for environment-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from checkmate.config import DEFAULT_STORAGE_PATH, Settings, load_settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = load_settings()

        assert settings.storage_backend == "file"
        assert settings.storage_path == DEFAULT_STORAGE_PATH
        assert settings.template_url is None
        assert settings.http_timeout is None
        assert settings.retention_days is None
        assert settings.retention_seconds is None

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("CHECKMATE_STORAGE_BACKEND", " SQLite ")
        monkeypatch.setenv("CHECKMATE_STORAGE_PATH", str(tmp_path / "state.db"))
        monkeypatch.setenv("CHECKMATE_TEMPLATE_URL", "https://example.com/t.yaml")
        monkeypatch.setenv("CHECKMATE_HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("CHECKMATE_RETENTION_DAYS", "30")
        monkeypatch.setenv("CHECKMATE_LOG_FORMAT", "json")

        settings = Settings.from_env()

        assert settings.storage_backend == "sqlite"
        assert settings.storage_path == tmp_path / "state.db"
        assert settings.template_url == "https://example.com/t.yaml"
        assert settings.http_timeout == 2.5
        assert settings.retention_days == 30
        assert settings.retention_seconds == 30 * 86400
        assert settings.log_format == "json"

    def test_empty_values_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHECKMATE_TEMPLATE_URL", "")
        monkeypatch.setenv("CHECKMATE_HTTP_TIMEOUT", "  ")

        settings = Settings.from_env()

        assert settings.template_url is None
        assert settings.http_timeout is None

    def test_bad_number(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHECKMATE_RETENTION_DAYS", "a month")

        with pytest.raises(ValueError, match="CHECKMATE_RETENTION_DAYS"):
            Settings.from_env()
