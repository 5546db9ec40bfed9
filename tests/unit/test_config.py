"""Unit tests for configuration validation rules."""

from dataclasses import replace
from pathlib import Path

import pytest

from mail_fetcher.exceptions import ConfigurationError
from mail_fetcher.lib.config import IMAPConfig, OAuthConfig


@pytest.mark.unit
class TestOAuthConfigValidation:
    """Test OAuthConfig.validate()."""

    def test_valid(self, oauth_config):
        oauth_config.validate()

    @pytest.mark.parametrize(
        "field_name,value",
        [
            ("auth_url", "not a url"),
            ("auth_url", "ftp://accounts.example.com/auth"),
            ("token_url", "https://"),
            ("redirect_url", "localhost:8080"),
            ("auth_url", 5),
            ("token_url", None),
        ],
    )
    def test_malformed_urls(self, oauth_config, field_name, value):
        """Test that malformed endpoint URLs are rejected."""
        config = replace(oauth_config, **{field_name: value})

        with pytest.raises(ConfigurationError, match=field_name):
            config.validate()

    def test_empty_scopes(self, oauth_config):
        with pytest.raises(ConfigurationError, match="scopes"):
            replace(oauth_config, scopes=()).validate()

    def test_scopes_must_be_list(self, sample_config_data):
        sample_config_data["scopes"] = "https://mail.google.com/"

        with pytest.raises(ConfigurationError, match="scopes"):
            OAuthConfig.from_dict(sample_config_data)

    def test_null_scopes_rejected(self, sample_config_data):
        sample_config_data["scopes"] = None

        with pytest.raises(ConfigurationError, match="scopes"):
            OAuthConfig.from_dict(sample_config_data)


@pytest.mark.unit
class TestIMAPConfigValidation:
    """Test IMAPConfig.validate()."""

    def test_valid(self, imap_config):
        imap_config.validate()

    def test_empty_identity_rejected(self, imap_config):
        """Test that an empty XOAUTH2 identity is a configuration error."""
        with pytest.raises(ConfigurationError, match="user_email"):
            replace(imap_config, user="").validate()

    def test_identity_must_be_address(self, imap_config):
        with pytest.raises(ConfigurationError, match="user_email"):
            replace(imap_config, user="owner").validate()

    @pytest.mark.parametrize("port", [0, 70000, "993", True])
    def test_invalid_port(self, imap_config, port):
        with pytest.raises(ConfigurationError, match="imap_port"):
            replace(imap_config, port=port).validate()

    def test_invalid_timeout(self, imap_config):
        with pytest.raises(ConfigurationError, match="imap_timeout"):
            replace(imap_config, timeout=0).validate()

    def test_timeout_parsed_from_file(self, sample_config_data):
        sample_config_data["imap_timeout"] = "30"

        assert IMAPConfig.from_dict(sample_config_data).timeout == 30.0


@pytest.mark.unit
class TestFetchConfigValidation:
    """Test FetchConfig.validate() and overrides."""

    @pytest.mark.parametrize("days", [-1, "7", 1.5, None, False])
    def test_invalid_days(self, fetch_config, days):
        with pytest.raises(ConfigurationError, match="days_to_fetch"):
            replace(fetch_config, days_to_fetch=days).validate()

    def test_zero_days_allowed(self, fetch_config):
        replace(fetch_config, days_to_fetch=0).validate()

    def test_with_overrides(self, fetch_config, tmp_path):
        """Test that command-line overrides return a new validated config."""
        updated = fetch_config.with_overrides(
            days_to_fetch=30, output_file=tmp_path / "other.mbox"
        )

        assert updated.days_to_fetch == 30
        assert updated.output_file == tmp_path / "other.mbox"
        assert fetch_config.days_to_fetch == 7

    def test_with_no_overrides(self, fetch_config):
        assert fetch_config.with_overrides() == fetch_config

    def test_empty_output_rejected(self, fetch_config):
        with pytest.raises(ConfigurationError, match="output_file"):
            replace(fetch_config, output_file=Path()).validate()
