"""Run configuration loaded from the JSON config file."""

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from mail_fetcher.exceptions import ConfigurationError
from mail_fetcher.lib.config.app_config import AppConfig
from mail_fetcher.lib.config.imap_config import IMAPConfig
from mail_fetcher.lib.config.oauth_config import OAuthConfig

DEFAULT_CONFIG_PATH = Path("config.json")

# Config file keys whose values must be JSON strings
STRING_KEYS = (
    "client_id",
    "client_secret",
    "auth_url",
    "token_url",
    "redirect_url",
    "imap_server",
    "user_email",
    "output_file",
)


@dataclass(frozen=True)
class FetchConfig:
    """Immutable configuration for one fetch run.

    Attributes:
        oauth: OAuth2 client and endpoint settings
        imap: IMAP server endpoint and XOAUTH2 identity
        days_to_fetch: Retention window; messages received on or after
            today minus this many days are fetched
        output_file: Path the raw messages are written to
        app: Logging settings
    """

    oauth: OAuthConfig
    imap: IMAPConfig
    days_to_fetch: int
    output_file: Path
    app: AppConfig = field(default_factory=AppConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "FetchConfig":
        """Build a config from the flat key/value layout of the config file."""
        if not isinstance(data, dict):
            raise ConfigurationError("Config file must contain a JSON object")

        for key in STRING_KEYS:
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ConfigurationError(
                    f"{key} must be a string, got {type(value).__name__}"
                )

        output_file = os.getenv("MAIL_FETCHER_OUTPUT_FILE", data.get("output_file", ""))
        try:
            imap = IMAPConfig.from_dict(data)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid IMAP settings: {e}") from e

        return cls(
            oauth=OAuthConfig.from_dict(data),
            imap=imap,
            days_to_fetch=data.get("days_to_fetch"),
            output_file=Path(output_file) if output_file else Path(),
            app=AppConfig.from_env(),
        )

    @classmethod
    def from_file(cls, path: Path = DEFAULT_CONFIG_PATH) -> "FetchConfig":
        """Load and validate config from a JSON file.

        Raises:
            ConfigurationError: File missing, unreadable, not JSON, or invalid
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Config file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Config file {path} is not valid JSON: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

        config = cls.from_dict(data)
        config.validate()
        return config

    def with_overrides(
        self,
        days_to_fetch: int | None = None,
        output_file: Path | None = None,
    ) -> "FetchConfig":
        """Return a copy with command-line overrides applied."""
        changes = {}
        if days_to_fetch is not None:
            changes["days_to_fetch"] = days_to_fetch
        if output_file is not None:
            changes["output_file"] = Path(output_file)
        config = replace(self, **changes)
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration."""
        self.oauth.validate()
        self.imap.validate()
        self.app.validate()

        if isinstance(self.days_to_fetch, bool) or not isinstance(self.days_to_fetch, int):
            raise ConfigurationError(
                f"days_to_fetch must be an integer, got {self.days_to_fetch!r}"
            )

        if self.days_to_fetch < 0:
            raise ConfigurationError("days_to_fetch must be non-negative")

        if self.output_file == Path():
            raise ConfigurationError("output_file is required")
