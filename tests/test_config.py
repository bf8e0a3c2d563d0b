"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

import logging

from jinoca.config import JinocaSettings, check_settings, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ("PORT", "OPENROUTER_API_KEY", "PUPPETEER_EXECUTABLE_PATH"):
        monkeypatch.delenv(key, raising=False)
    # Keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)


def test_defaults():
    settings = JinocaSettings()
    assert settings.port == 3000
    assert settings.history_limit == 10
    assert settings.request_timeout == 30.0
    assert settings.reconnect_delay == 5.0
    assert settings.image_api_url == "https://imgen.duck.mom/prompt/"
    assert settings.model == "cognitivecomputations/dolphin-mistral-24b-venice-edition:free"
    assert settings.openrouter_api_key is None


def test_unprefixed_deployment_names(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-123")
    settings = JinocaSettings()
    assert settings.port == 8080
    assert settings.openrouter_api_key == "sk-or-123"


def test_prefixed_names(monkeypatch):
    monkeypatch.setenv("JINOCA_HISTORY_LIMIT", "0")
    monkeypatch.setenv("JINOCA_MODEL", "other/model")
    settings = JinocaSettings()
    assert settings.history_limit == 0
    assert settings.model == "other/model"


def test_negative_history_rejected(monkeypatch):
    monkeypatch.setenv("JINOCA_HISTORY_LIMIT", "-1")
    with pytest.raises(ValidationError):
        JinocaSettings()


def test_load_settings_is_silent(caplog):
    with caplog.at_level(logging.DEBUG, logger="jinoca.config"):
        settings = load_settings()
    assert settings.openrouter_api_key is None
    assert caplog.records == []


def test_missing_key_warns(caplog):
    with caplog.at_level(logging.INFO, logger="jinoca.config"):
        check_settings(JinocaSettings())
    assert "No OpenRouter API key" in caplog.text


def test_configured_key_does_not_warn(caplog):
    with caplog.at_level(logging.INFO, logger="jinoca.config"):
        check_settings(JinocaSettings(openrouter_api_key="sk-or-123"))
    assert "No OpenRouter API key" not in caplog.text


def test_history_disabled_is_logged(caplog):
    with caplog.at_level(logging.INFO, logger="jinoca.config"):
        check_settings(JinocaSettings(openrouter_api_key="sk-or-123", history_limit=0))
    assert "history disabled" in caplog.text
