"""Protocol definitions for the pluggable pieces of a retrieval run.

Protocols use structural subtyping (PEP 544), so tests can pass simple fakes
for the IMAP client, the mailbox session and the code capture mechanism
without inheriting from anything.
"""

from datetime import date
from typing import Any, Protocol, runtime_checkable

from mail_fetcher.models.message import RawMessage

# ============================================================================
# Authorization Code Capture Protocol
# ============================================================================


@runtime_checkable
class CodeProvider(Protocol):
    """Produces an authorization code, given an authorization URL.

    The console implementation prints the URL and reads a pasted line; a
    local redirect listener could implement the same interface.

    Example:
        >>> class FixedCode:
        ...     def get_authorization_code(self, authorization_url):
        ...         return "4/0AX4XfWh"
        >>> provider: CodeProvider = FixedCode()
    """

    def get_authorization_code(self, authorization_url: str) -> str:
        """Return the code (or the full redirect URL) after user consent.

        Args:
            authorization_url: Provider consent URL to present to the user

        Returns:
            Authorization code, or the redirect URL containing it
        """
        ...


# ============================================================================
# IMAP Client Adapter Protocol
# ============================================================================


@runtime_checkable
class IMAPClientProtocol(Protocol):
    """Subset of the imapclient.IMAPClient interface used by MailboxSession.

    Methods:
        sasl_login: Authenticate with a SASL mechanism callback
        select_folder: Select a folder for operations
        search: Search for messages matching criteria
        fetch: Fetch message data
        logout: Close IMAP connection
    """

    def sasl_login(self, mech_name: str, mech_callable: Any) -> Any:
        """Authenticate using the named SASL mechanism."""
        ...

    def select_folder(self, folder: str, readonly: bool = False) -> dict[bytes, Any]:
        """Select folder and return its status (EXISTS, UIDVALIDITY, ...)."""
        ...

    def search(self, criteria: Any = "ALL", charset: str | None = None) -> list[int]:
        """Return message identifiers matching criteria."""
        ...

    def fetch(self, messages: Any, data: Any, modifiers: Any = None) -> dict[int, dict[bytes, Any]]:
        """Fetch data items for the given messages."""
        ...

    def logout(self) -> Any:
        """Log out and close the connection."""
        ...


# ============================================================================
# Mailbox Session Protocol
# ============================================================================


@runtime_checkable
class MailboxSessionProtocol(Protocol):
    """Interface the retrieval pipeline drives, implemented by MailboxSession.

    Sessions are context managers; leaving the ``with`` block closes them.
    """

    def connect(self) -> None:
        """Open the TLS connection."""
        ...

    def authenticate(self, identity: str, access_token: str) -> None:
        """Authenticate with XOAUTH2."""
        ...

    def select(self, mailbox: str = "INBOX") -> dict[str, Any]:
        """Select the mailbox and return its status."""
        ...

    def search_since(self, since: date) -> list[int]:
        """Return identifiers of messages received on or after ``since``."""
        ...

    def fetch(self, message_id: int) -> RawMessage:
        """Fetch the full raw message."""
        ...

    def close(self) -> None:
        """Log out and release the connection."""
        ...

    def __enter__(self) -> "MailboxSessionProtocol":
        ...

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        ...
