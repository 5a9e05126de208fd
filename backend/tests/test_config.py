"""Tests for environment-driven Settings."""

import pytest
from pydantic import ValidationError

from planetscope.config import Settings
from planetscope.transports.swapi import DEFAULT_BASE_URL


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.api_url == DEFAULT_BASE_URL
        assert settings.debounce_ms == 500
        assert settings.abort_superseded is True
        assert settings.http_timeout == 10.0
        assert settings.log_level == "INFO"

    def test_reads_environment(self):
        settings = Settings.from_env({
            "PLANETSCOPE_API_URL": "https://mirror.test/planets/",
            "PLANETSCOPE_DEBOUNCE_MS": "250",
            "PLANETSCOPE_ABORT_SUPERSEDED": "false",
            "PLANETSCOPE_HTTP_TIMEOUT": "2.5",
            "PLANETSCOPE_LOG_LEVEL": "debug",
        })
        assert settings.api_url == "https://mirror.test/planets/"
        assert settings.debounce_ms == 250
        assert settings.abort_superseded is False
        assert settings.http_timeout == 2.5
        assert settings.log_level == "DEBUG"

    def test_empty_values_keep_defaults(self):
        settings = Settings.from_env({"PLANETSCOPE_DEBOUNCE_MS": ""})
        assert settings.debounce_ms == 500

    def test_rejects_negative_debounce(self):
        with pytest.raises(ValidationError):
            Settings.from_env({"PLANETSCOPE_DEBOUNCE_MS": "-1"})

    def test_rejects_non_numeric_timeout(self):
        with pytest.raises(ValidationError):
            Settings.from_env({"PLANETSCOPE_HTTP_TIMEOUT": "soon"})

    def test_rejects_unknown_log_level(self):
        with pytest.raises(ValidationError):
            Settings.from_env({"PLANETSCOPE_LOG_LEVEL": "verbose"})

    def test_uses_process_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("PLANETSCOPE_DEBOUNCE_MS", "42")
        assert Settings.from_env().debounce_ms == 42
