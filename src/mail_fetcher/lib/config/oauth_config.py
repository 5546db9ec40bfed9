"""OAuth2 provider configuration."""

import os
from dataclasses import dataclass, field
from urllib.parse import urlparse

from mail_fetcher.exceptions import ConfigurationError

DEFAULT_SCOPES = ("https://mail.google.com/",)


def _check_url(name: str, value: str) -> None:
    if not isinstance(value, str):
        raise ConfigurationError(f"{name} must be a string, got {type(value).__name__}")
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"{name} is not a valid http(s) URL: {value!r}")


@dataclass(frozen=True)
class OAuthConfig:
    """Configuration for the OAuth2 authorization-code grant."""

    client_id: str = ""
    client_secret: str = field(default="", repr=False)
    auth_url: str = ""
    token_url: str = ""
    redirect_url: str = ""
    scopes: tuple[str, ...] = DEFAULT_SCOPES

    @classmethod
    def from_dict(cls, data: dict) -> "OAuthConfig":
        """Create config from a parsed config file, with environment overrides."""
        scopes = data.get("scopes", DEFAULT_SCOPES)
        if not isinstance(scopes, (list, tuple)) or not all(isinstance(s, str) for s in scopes):
            raise ConfigurationError("scopes must be a list of strings")
        return cls(
            client_id=os.getenv("MAIL_FETCHER_CLIENT_ID", data.get("client_id", "")),
            client_secret=os.getenv(
                "MAIL_FETCHER_CLIENT_SECRET", data.get("client_secret", "")
            ),
            auth_url=data.get("auth_url", ""),
            token_url=data.get("token_url", ""),
            redirect_url=data.get("redirect_url", ""),
            scopes=tuple(scopes),
        )

    def validate(self) -> None:
        """Validate configuration."""
        if not self.client_id:
            raise ConfigurationError("client_id is required")

        if not self.client_secret:
            raise ConfigurationError("client_secret is required")

        _check_url("auth_url", self.auth_url)
        _check_url("token_url", self.token_url)
        _check_url("redirect_url", self.redirect_url)

        if not self.scopes:
            raise ConfigurationError("OAuth scopes cannot be empty")
