"""Tests for dusted.settings module."""

import pytest
from pydantic import ValidationError

from dusted.settings import DustedSettings, get_settings


class TestDefaults:
    def test_log_level(self):
        assert DustedSettings().log_level == "INFO"

    def test_log_json_auto(self):
        assert DustedSettings().log_json is None

    def test_hcaptcha(self):
        s = DustedSettings()
        assert s.hcaptcha_endpoint == "https://hcaptcha.com/siteverify"
        assert s.hcaptcha_timeout == 10.0

    def test_google_cloud(self):
        s = DustedSettings()
        assert s.storage_timeout == 1.0
        assert s.mailer_publish_timeout == 30.0
        assert s.gcp_project is None


class TestEnvOverride:
    def test_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("DUSTED_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("DUSTED_GCP_PROJECT", "my-project")
        s = DustedSettings()
        assert s.log_level == "DEBUG"
        assert s.gcp_project == "my-project"

    def test_unprefixed_variables_ignored(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        assert DustedSettings().log_level == "INFO"

    def test_invalid_timeout(self, monkeypatch):
        monkeypatch.setenv("DUSTED_HCAPTCHA_TIMEOUT", "0")
        with pytest.raises(ValidationError):
            DustedSettings()


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("DUSTED_ENVIRONMENT", "production")
        assert get_settings().environment == "development"
        reloaded = get_settings(_force_reload=True)
        assert reloaded is not first
        assert reloaded.environment == "production"
