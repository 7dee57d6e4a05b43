from __future__ import annotations

import os

import pytest

from suzbot.errors import ConfigurationError
from suzbot.settings import IdentityStrategy, clear_environment, get_settings, reset_settings_cache


def _set_required_env(monkeypatch, **overrides):
    defaults = {
        "SUZ_AUTH_TOKEN": "secret-token",
        "SUZ_CHANNEL_ID": "1234567890",
        "SUZ_SLEEP_MINS": "10",
    }
    defaults.update(overrides)
    for key, value in defaults.items():
        monkeypatch.setenv(key, value)


def test_get_settings_reads_environment(monkeypatch):
    _set_required_env(monkeypatch)

    settings = get_settings()

    assert settings.auth_token.get_secret_value() == "secret-token"
    assert settings.channel_id == "1234567890"
    assert settings.poll_interval_minutes == 10
    assert settings.history_limit == 32
    assert settings.identity_strategy is IdentityStrategy.URL
    assert settings.listing_url == "https://suz.cvut.cz/cz/aktuality"
    assert "secret-token" not in repr(settings)


def test_identity_strategy_from_environment(monkeypatch):
    _set_required_env(monkeypatch, SUZ_IDENTITY_STRATEGY="date")

    assert get_settings().identity_strategy is IdentityStrategy.DATE


@pytest.mark.parametrize("missing", ["SUZ_AUTH_TOKEN", "SUZ_CHANNEL_ID", "SUZ_SLEEP_MINS"])
def test_missing_required_variable_is_fatal(monkeypatch, missing):
    _set_required_env(monkeypatch)
    monkeypatch.delenv(missing)

    with pytest.raises(ConfigurationError):
        get_settings()


@pytest.mark.parametrize("value", ["soon", "0", "-5", ""])
def test_malformed_poll_interval_is_fatal(monkeypatch, value):
    _set_required_env(monkeypatch, SUZ_SLEEP_MINS=value)

    with pytest.raises(ConfigurationError):
        get_settings()


def test_history_limit_upper_bound(monkeypatch):
    _set_required_env(monkeypatch, SUZ_HISTORY_LIMIT="101")

    with pytest.raises(ConfigurationError) as exc:
        get_settings()

    assert "SUZ_HISTORY_LIMIT" in str(exc.value)


def test_reset_settings_cache_reloads(monkeypatch):
    _set_required_env(monkeypatch, SUZ_SLEEP_MINS="3")
    first = get_settings()
    monkeypatch.setenv("SUZ_SLEEP_MINS", "7")

    assert get_settings() is first

    reset_settings_cache()
    assert get_settings().poll_interval_minutes == 7


def test_clear_environment_removes_only_bot_variables(monkeypatch):
    _set_required_env(monkeypatch)
    monkeypatch.setenv("UNRELATED_VAR", "keep")
    settings = get_settings()

    removed = clear_environment()

    assert set(removed) >= {"SUZ_AUTH_TOKEN", "SUZ_CHANNEL_ID", "SUZ_SLEEP_MINS"}
    assert "SUZ_AUTH_TOKEN" not in os.environ
    assert os.environ["UNRELATED_VAR"] == "keep"
    # the already built settings keep their values
    assert get_settings() is settings
    assert settings.auth_token.get_secret_value() == "secret-token"
