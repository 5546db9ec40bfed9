"""IMAP session over TLS with XOAUTH2 authentication.

AIDEV-NOTE: Library choice rationale
- imapclient>=3.0.0 selected for:
  - Pythonic API over imaplib with parsed SEARCH/FETCH responses
  - sasl_login() for arbitrary SASL mechanisms such as XOAUTH2
  - Built-in SSL/TLS support with a caller-supplied SSLContext

AIDEV-NOTE: Session lifecycle
- DISCONNECTED -> CONNECTED -> AUTHENTICATED -> SELECTED -> CLOSED
- No transitions back; a failed step leaves the state where it was
- close() may be called from any state and always ends in CLOSED
- Use as a context manager so LOGOUT is sent on every exit path
"""

import ssl
from datetime import date
from enum import Enum
from typing import Any, Callable, Optional

from imapclient import IMAPClient
from imapclient.exceptions import IMAPClientError

from mail_fetcher.email.fetcher import format_since_date
from mail_fetcher.exceptions import (
    ConfigurationError,
    FetchError,
    IMAPAuthenticationError,
    IMAPConnectionError,
    MailboxError,
    SearchError,
    SessionStateError,
)
from mail_fetcher.lib.config import DEFAULT_MAILBOX, IMAPConfig
from mail_fetcher.lib.logger import get_logger
from mail_fetcher.models.message import RawMessage

logger = get_logger(__name__)

XOAUTH2_MECHANISM = "XOAUTH2"


# ============================================================================
# Enums
# ============================================================================
class SessionState(Enum):
    """IMAP session lifecycle states."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    SELECTED = "selected"
    CLOSED = "closed"


# ============================================================================
# XOAUTH2 / TLS helpers
# ============================================================================
def build_xoauth2_payload(identity: str, access_token: str) -> str:
    """Build the SASL XOAUTH2 initial client response.

    Format: ``user=<identity>^Aauth=Bearer <token>^A^A`` where ``^A`` is
    the 0x01 control character.

    Args:
        identity: Mailbox owner's address
        access_token: OAuth2 bearer token

    Returns:
        Unencoded payload (imaplib base64-encodes it on the wire)

    Raises:
        ConfigurationError: identity is empty
        IMAPAuthenticationError: access token is empty
    """
    if not identity:
        raise ConfigurationError("XOAUTH2 identity (user_email) must not be empty")
    if not access_token:
        raise IMAPAuthenticationError("Cannot authenticate without an access token")
    return f"user={identity}\x01auth=Bearer {access_token}\x01\x01"


class _XOAuth2Responder:
    """SASL callback for XOAUTH2.

    The first challenge gets the payload. If the server rejects the token it
    sends a second challenge with a JSON error, which must be answered with
    an empty response before it issues the tagged NO (RFC 7628).
    """

    def __init__(self, payload: str):
        self._payload = payload
        self._sent = False

    def __call__(self, challenge: bytes) -> str | bytes:
        if self._sent:
            return b""
        self._sent = True
        return self._payload


def create_ssl_context() -> ssl.SSLContext:
    """Create the TLS context used for IMAP connections.

    Certificate verification and hostname checking are always on and
    TLS 1.2 is the minimum version.
    """
    ssl_context = ssl.create_default_context()
    ssl_context.check_hostname = True
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
    return ssl_context


# ============================================================================
# MailboxSession Class
# ============================================================================
class MailboxSession:
    """One IMAP session: connect, authenticate, select, search, fetch, logout.

    Attributes:
        state: Current SessionState
        selected_mailbox: Name of the selected mailbox, once selected
        mailbox_info: EXISTS/UIDVALIDITY reported by the select
    """

    def __init__(
        self,
        config: IMAPConfig,
        client_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        """Initialize an unconnected session.

        Args:
            config: IMAP server endpoint settings
            client_factory: Callable building the IMAP client (default:
                imapclient.IMAPClient); injected by tests
        """
        self._config = config
        self._client_factory = client_factory
        self._client: Any = None
        self.state = SessionState.DISCONNECTED
        self.selected_mailbox: str | None = None
        self.mailbox_info: dict[str, Any] = {}

    def __repr__(self) -> str:
        return (
            f"MailboxSession(server='{self._config.server}', "
            f"port={self._config.port}, state={self.state.value})"
        )

    def __enter__(self) -> "MailboxSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _require(self, expected: SessionState, operation: str) -> None:
        if self.state is not expected:
            raise SessionStateError(
                f"Cannot {operation} in state '{self.state.value}' "
                f"(requires '{expected.value}')"
            )

    def connect(self) -> None:
        """Open a TLS connection and read the server greeting.

        Raises:
            IMAPConnectionError: DNS, TCP, TLS or greeting failure
        """
        self._require(SessionState.DISCONNECTED, "connect")
        server, port = self._config.server, self._config.port
        factory = self._client_factory or IMAPClient

        logger.info(f"Connecting to {server}:{port} (TLS)")
        try:
            self._client = factory(
                server,
                port=port,
                ssl=True,
                ssl_context=create_ssl_context(),
                timeout=self._config.timeout,
            )
        except (OSError, IMAPClientError) as e:
            logger.error(f"Connection to {server}:{port} failed: {type(e).__name__}")
            raise IMAPConnectionError(f"Failed to connect to {server}:{port}: {e}") from e

        self.state = SessionState.CONNECTED
        logger.info(f"Connected to {server}:{port}")

    def authenticate(self, identity: str, access_token: str) -> None:
        """Authenticate with SASL XOAUTH2.

        Args:
            identity: Mailbox owner's address
            access_token: Bearer token from the OAuth2 exchange

        Raises:
            IMAPAuthenticationError: Server rejected the token
            IMAPConnectionError: Connection dropped during authentication
        """
        self._require(SessionState.CONNECTED, "authenticate")
        payload = build_xoauth2_payload(identity, access_token)

        try:
            self._client.sasl_login(XOAUTH2_MECHANISM, _XOAuth2Responder(payload))
        except IMAPClientError as e:
            logger.error(f"XOAUTH2 authentication rejected for {identity}")
            raise IMAPAuthenticationError(
                f"Server rejected XOAUTH2 authentication for {identity}. "
                f"The access token may be expired or lack the mail scope."
            ) from e
        except OSError as e:
            raise IMAPConnectionError(f"Connection lost during authentication: {e}") from e

        self.state = SessionState.AUTHENTICATED
        logger.info(f"Authenticated as {identity}")

    def select(self, mailbox: str = DEFAULT_MAILBOX) -> dict[str, Any]:
        """Select a mailbox read-only.

        Read-only selection keeps fetched messages from being marked \\Seen.

        Args:
            mailbox: Mailbox name (default: INBOX)

        Returns:
            Dict with ``exists`` (message count) and ``uidvalidity``

        Raises:
            MailboxError: Mailbox missing or access denied
        """
        self._require(SessionState.AUTHENTICATED, "select")

        try:
            response = self._client.select_folder(mailbox, readonly=True)
        except (IMAPClientError, OSError) as e:
            raise MailboxError(f"Cannot select mailbox '{mailbox}': {e}") from e

        self.mailbox_info = {
            "exists": response.get(b"EXISTS"),
            "uidvalidity": response.get(b"UIDVALIDITY"),
        }
        self.selected_mailbox = mailbox
        self.state = SessionState.SELECTED
        logger.info(
            f"Selected {mailbox}: {self.mailbox_info['exists']} messages, "
            f"uidvalidity={self.mailbox_info['uidvalidity']}"
        )
        return self.mailbox_info

    def search_since(self, since: date) -> list[int]:
        """Find messages with an internal date on or after ``since``.

        Args:
            since: Cutoff date

        Returns:
            Message identifiers in the order the server returned them

        Raises:
            SearchError: Server rejected the search or the connection failed
        """
        self._require(SessionState.SELECTED, "search")
        since_text = format_since_date(since)

        try:
            message_ids = self._client.search(["SINCE", since_text])
        except (IMAPClientError, OSError) as e:
            raise SearchError(f"SEARCH SINCE {since_text} failed: {e}") from e

        logger.info(f"SEARCH SINCE {since_text} matched {len(message_ids)} messages")
        return list(message_ids)

    def fetch(self, message_id: int) -> RawMessage:
        """Fetch the full RFC 822 message for one identifier.

        Args:
            message_id: Identifier from search_since()

        Returns:
            RawMessage with the unparsed message bytes

        Raises:
            FetchError: No body returned, or the fetch was interrupted
        """
        self._require(SessionState.SELECTED, "fetch")

        try:
            response = self._client.fetch([message_id], ["RFC822"])
        except (IMAPClientError, OSError) as e:
            raise FetchError(f"Fetch of message {message_id} failed: {e}", message_id) from e

        body = response.get(message_id, {}).get(b"RFC822")
        if body is None:
            raise FetchError(f"Message {message_id} did not have a body", message_id)

        return RawMessage(message_id=message_id, data=bytes(body))

    def close(self) -> None:
        """Log out and release the connection.

        Safe to call in any state and more than once; LOGOUT is sent at most
        once. Logout failures are logged, not raised, so they never mask
        the error that ended the run.
        """
        if self.state is SessionState.CLOSED:
            return

        client, self._client = self._client, None
        self.state = SessionState.CLOSED
        if client is None:
            return

        try:
            client.logout()
            logger.info(f"Logged out from {self._config.server}")
        except (IMAPClientError, OSError) as e:
            logger.warning(f"Error during logout: {e}")
