"""IMAP server configuration."""

import os
import re
from dataclasses import dataclass

from mail_fetcher.exceptions import ConfigurationError

# Email validation pattern (compiled once at module level)
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

# Sync with RFC 3501: INBOX is the only mailbox name every server must have
DEFAULT_MAILBOX = "INBOX"


@dataclass(frozen=True)
class IMAPConfig:
    """Configuration for the IMAP connection."""

    server: str = ""
    port: int = 993
    user: str = ""
    mailbox: str = DEFAULT_MAILBOX
    timeout: float | None = None  # seconds; None blocks indefinitely

    @classmethod
    def from_dict(cls, data: dict) -> "IMAPConfig":
        """Create config from a parsed config file, with environment overrides."""
        timeout = data.get("imap_timeout")
        return cls(
            server=data.get("imap_server", ""),
            port=data.get("imap_port", 993),
            user=os.getenv("MAIL_FETCHER_USER_EMAIL", data.get("user_email", "")),
            timeout=float(timeout) if timeout is not None else None,
        )

    def validate(self) -> None:
        """Validate configuration."""
        if not self.server:
            raise ConfigurationError("imap_server is required")

        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ConfigurationError(f"imap_port must be an integer, got {self.port!r}")

        if not 0 < self.port < 65536:
            raise ConfigurationError(f"imap_port out of range: {self.port}")

        # XOAUTH2 needs the mailbox owner's address as identity
        if not self.user:
            raise ConfigurationError(
                "user_email is required for XOAUTH2 authentication"
            )

        if not EMAIL_PATTERN.match(self.user):
            raise ConfigurationError(f"user_email is not a valid address: {self.user}")

        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError("imap_timeout must be positive")
