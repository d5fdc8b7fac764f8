"""Tests for outreach configuration."""

import pytest

from donotcontact.errors import ConfigurationError
from donotcontact.outreach.config import build_config, load_identity, load_smtp_settings, validate_config


class TestBuildConfig:
    """Test reading settings from the environment."""

    def test_defaults(self):
        """An empty environment gives defaults."""
        cfg = build_config({})
        assert cfg['SMTP_PORT'] == 587
        assert cfg['SMTP_SECURE'] is False
        assert cfg['SEND_DELAY_SECONDS'] == 2.0

    @pytest.mark.parametrize("value", ["true", "1", "yes", "ssl", "TLS", "SSL/TLS"])
    def test_secure_truthy(self, value):
        """SMTP_SECURE accepts several spellings."""
        assert build_config({'SMTP_SECURE': value})['SMTP_SECURE'] is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "starttls", ""])
    def test_secure_falsy(self, value):
        """Anything else means STARTTLS."""
        assert build_config({'SMTP_SECURE': value})['SMTP_SECURE'] is False

    def test_bad_numbers_fall_back(self):
        """Unparseable numbers use the defaults."""
        cfg = build_config({'SMTP_PORT': 'abc', 'SEND_DELAY_SECONDS': 'soon'})
        assert cfg['SMTP_PORT'] == 587
        assert cfg['SEND_DELAY_SECONDS'] == 2.0


class TestValidateConfig:
    """Test configuration validation."""

    def test_valid(self, outreach_env):
        """A complete environment has no errors."""
        assert validate_config(build_config(outreach_env)) == []

    def test_missing_fields_all_reported(self):
        """Every missing variable is listed."""
        errors = validate_config(build_config({}))
        assert "DNC_FULL_NAME not set" in errors
        assert "SMTP_PASSWORD not set" in errors
        assert len(errors) == 10

    def test_bad_email(self, outreach_env):
        """A malformed identity email is reported."""
        outreach_env['DNC_EMAIL'] = 'not-an-email'
        errors = validate_config(build_config(outreach_env))
        assert errors == ["DNC_EMAIL is not a valid email address: not-an-email"]

    def test_bad_port(self, outreach_env):
        """Ports outside 1-65535 are reported."""
        outreach_env['SMTP_PORT'] = '70000'
        assert validate_config(build_config(outreach_env)) == ["SMTP_PORT is not a valid port: 70000"]


class TestLoaders:
    """Test building typed settings."""

    def test_identity(self, outreach_env):
        """Salutation defaults to the first name."""
        identity = load_identity(build_config(outreach_env))
        assert identity.full_name == "Jane Doe"
        assert identity.salutation == "Jane"
        assert identity.full_address == "1 Main St, Springfield, IL 62701"

    def test_explicit_salutation(self, outreach_env):
        """DNC_SALUTATION overrides the first name."""
        outreach_env['DNC_SALUTATION'] = 'JD'
        assert load_identity(build_config(outreach_env)).salutation == "JD"

    def test_smtp_settings(self, outreach_env):
        """Send-as falls back to the identity email."""
        cfg = build_config(outreach_env)
        settings = load_smtp_settings(cfg)
        identity = load_identity(cfg)
        assert settings.host == "smtp.example.com"
        assert settings.send_as is None
        assert settings.from_address(identity) == "jane@example.com"

    def test_send_as(self, outreach_env):
        """A send-as alias becomes the from address."""
        outreach_env['SMTP_SEND_AS'] = 'optout@janedoe.net'
        cfg = build_config(outreach_env)
        assert load_smtp_settings(cfg).from_address(load_identity(cfg)) == 'optout@janedoe.net'

    def test_missing_raises(self):
        """Incomplete settings raise ConfigurationError listing the problems."""
        with pytest.raises(ConfigurationError, match="SMTP_HOST not set"):
            load_smtp_settings(build_config({}))
