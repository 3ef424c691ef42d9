"""Tests for settings loading."""

import pytest

from avfeed.config import DEFAULT_BASE_URL, Settings, get_settings
from avfeed.providers.alphavantage_rest import AlphavantageConfigError


def test_defaults():
    """Unset fields take the documented defaults."""
    settings = Settings(alphavantage_api_key="demo-key")
    assert settings.alphavantage_base_url == DEFAULT_BASE_URL
    assert settings.poll_interval_seconds == 60.0
    assert settings.request_timeout_seconds is None
    assert settings.exchange_time_zone == "America/New_York"


def test_get_settings_overrides():
    """Keyword overrides win over defaults."""
    settings = get_settings(alphavantage_api_key="demo-key", poll_interval_seconds=5)
    assert settings.poll_interval_seconds == 5.0


def test_short_key_is_config_error():
    """Keys under five characters raise AlphavantageConfigError."""
    with pytest.raises(AlphavantageConfigError):
        get_settings(alphavantage_api_key="abcd")


def test_missing_key_is_config_error(monkeypatch):
    """A missing key raises AlphavantageConfigError."""
    monkeypatch.delenv("ALPHAVANTAGE_API_KEY", raising=False)
    with pytest.raises(AlphavantageConfigError):
        get_settings(_env_file=None)


def test_non_positive_interval_rejected():
    """The poll interval must be positive."""
    with pytest.raises(AlphavantageConfigError):
        get_settings(alphavantage_api_key="demo-key", poll_interval_seconds=0)


def test_key_read_from_environment(monkeypatch):
    """ALPHAVANTAGE_API_KEY is picked up from the environment."""
    monkeypatch.setenv("ALPHAVANTAGE_API_KEY", "from-env-key")
    assert get_settings().alphavantage_api_key == "from-env-key"


def test_get_symbols():
    """Ticker lists are trimmed, upper-cased and de-blanked."""
    settings = Settings(alphavantage_api_key="demo-key")
    assert settings.get_symbols(" spy, aapl,,MSFT ") == ["SPY", "AAPL", "MSFT"]
