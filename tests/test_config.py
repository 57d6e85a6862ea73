"""
studiogate — Configuration Tests
=================================
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from studiogate.core.config import Environment, Settings, get_settings
from studiogate.core.exceptions import ConfigurationError


def test_defaults():
    settings = Settings()
    assert settings.app_name == "studiogate"
    assert settings.environment is Environment.DEVELOPMENT
    assert settings.log_level == "INFO"
    assert settings.log_format == "json"
    assert settings.default_primary_contact_when_unset is True
    assert settings.final_file_retention_days == 365


def test_only_consumed_fields_are_declared():
    assert set(Settings.model_fields) == {
        "app_name",
        "environment",
        "log_level",
        "log_format",
        "default_primary_contact_when_unset",
        "final_file_retention_days",
    }


def test_env_override(monkeypatch):
    monkeypatch.setenv("STUDIOGATE_ENVIRONMENT", "production")
    monkeypatch.setenv("STUDIOGATE_DEFAULT_PRIMARY_CONTACT_WHEN_UNSET", "0")
    monkeypatch.setenv("STUDIOGATE_FINAL_FILE_RETENTION_DAYS", "90")
    settings = Settings()
    assert settings.environment is Environment.PRODUCTION
    assert settings.default_primary_contact_when_unset is False
    assert settings.final_file_retention_days == 90


@pytest.mark.parametrize("name,value", [
    ("STUDIOGATE_LOG_FORMAT", "xml"),
    ("STUDIOGATE_LOG_LEVEL", "VERBOSE"),
    ("STUDIOGATE_FINAL_FILE_RETENTION_DAYS", "0"),
])
def test_invalid_values_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings()


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_cache_clear_rereads_environment(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("STUDIOGATE_APP_NAME", "portal-gate")
    assert get_settings().app_name == first.app_name
    get_settings.cache_clear()
    assert get_settings().app_name == "portal-gate"


def test_invalid_override_surfaces_as_configuration_error(monkeypatch):
    monkeypatch.setenv("STUDIOGATE_LOG_FORMAT", "xml")
    with pytest.raises(ConfigurationError) as exc_info:
        get_settings()
    assert exc_info.value.error_code == "CONFIGURATION_ERROR"
    assert isinstance(exc_info.value.__cause__, ValidationError)
