"""Unit tests for settings parsing and startup validation."""

import logging

import pytest
from pydantic import ValidationError

from medflow.config import LogFormat, get_settings
from medflow.main import validate_config_on_startup


@pytest.mark.unit
def test_defaults():
    settings = get_settings()

    assert settings.get_elevated_roles() == ["admin", "staff"]
    assert settings.SIGNED_URL_DEFAULT_EXPIRES == 3600
    assert settings.S3_UPDATE_URL_EXPIRES == 86400
    assert settings.FILE_RETENTION_DAYS == 7


@pytest.mark.unit
def test_log_level_and_format_from_strings(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_FORMAT", "CONSOLE")

    settings = get_settings()

    assert settings.LOG_LEVEL == logging.DEBUG
    assert settings.LOG_FORMAT == LogFormat.CONSOLE


@pytest.mark.unit
def test_invalid_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        get_settings()


@pytest.mark.unit
def test_elevated_roles_are_parsed(monkeypatch):
    monkeypatch.setenv("ELEVATED_ROLES", " Admin , reviewer,, ")
    assert get_settings().get_elevated_roles() == ["admin", "reviewer"]


@pytest.mark.unit
def test_active_database_url_prefers_unit_test_url(monkeypatch):
    monkeypatch.setenv("UNIT_TEST_DATABASE_URL", "sqlite:///unit.db")
    assert get_settings().get_active_database_url() == "sqlite:///unit.db"


@pytest.mark.unit
def test_startup_validation_accepts_defaults():
    validate_config_on_startup(get_settings())


@pytest.mark.unit
@pytest.mark.parametrize(
    "name, value",
    [
        ("ELEVATED_ROLES", " , "),
        ("SIGNED_URL_DEFAULT_EXPIRES", "0"),
        ("S3_UPDATE_URL_EXPIRES", "999999999"),
        ("FILE_RETENTION_DAYS", "-1"),
    ],
)
def test_startup_validation_rejects_bad_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(RuntimeError):
        validate_config_on_startup(get_settings())
