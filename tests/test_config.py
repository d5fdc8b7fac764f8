"""Tests for search and storage settings."""

import pytest

from donotcontact import config
from donotcontact.errors import ConfigurationError


class TestSearchInterval:
    """Test the search spacing read from the environment."""

    def test_default_when_unset(self, monkeypatch):
        """An unset variable gives the default."""
        monkeypatch.delenv("SEARCH_MIN_INTERVAL_SECONDS", raising=False)
        assert config._get_interval("SEARCH_MIN_INTERVAL_SECONDS", 1.1, 1.1) == 1.1

    def test_larger_value_kept(self, monkeypatch):
        """Values above the floor are used as given."""
        monkeypatch.setenv("SEARCH_MIN_INTERVAL_SECONDS", "2.5")
        assert config._get_interval("SEARCH_MIN_INTERVAL_SECONDS", 1.1, 1.1) == 2.5

    def test_smaller_value_clamped(self, monkeypatch):
        """Values below the floor are raised to it."""
        monkeypatch.setenv("SEARCH_MIN_INTERVAL_SECONDS", "0.2")
        assert config._get_interval("SEARCH_MIN_INTERVAL_SECONDS", 1.1, 1.1) == 1.1

    def test_non_numeric_rejected(self, monkeypatch):
        """A non-numeric value raises ConfigurationError."""
        monkeypatch.setenv("SEARCH_MIN_INTERVAL_SECONDS", "fast")
        with pytest.raises(ConfigurationError, match="must be a number"):
            config._get_interval("SEARCH_MIN_INTERVAL_SECONDS", 1.1, 1.1)

    def test_module_setting_respects_floor(self):
        """The loaded search spacing is never below the floor."""
        assert config.SEARCH_MIN_INTERVAL_SECONDS >= config.SEARCH_INTERVAL_FLOOR_SECONDS


class TestRequireSearchKey:
    """Test the Brave API key check."""

    def test_missing_key(self, monkeypatch):
        """A missing key raises ConfigurationError."""
        monkeypatch.setattr(config, "BRAVE_API_KEY", "")
        with pytest.raises(ConfigurationError, match="BRAVE_API_KEY not set"):
            config.require_search_key()

    def test_present_key(self, monkeypatch):
        """A configured key is returned."""
        monkeypatch.setattr(config, "BRAVE_API_KEY", "abc123")
        assert config.require_search_key() == "abc123"
