"""Exceptions raised while fetching mail.

Every failure is fatal for a run: nothing here is retried. Library
exceptions (imapclient, oauthlib, requests, OSError) are translated into
these types at the module that talks to the library.
"""


class MailFetcherError(Exception):
    """Base exception for all mail fetcher errors."""

    category = "Error"


class ConfigurationError(MailFetcherError):
    """Raised when configuration is missing, malformed or invalid."""

    category = "Configuration error"


class AuthExchangeError(MailFetcherError):
    """Raised when the OAuth2 authorization-code grant fails.

    This includes:
    - Network failure reaching the token endpoint
    - Provider error bodies (invalid_grant, invalid_client, ...)
    - Responses without an access token
    - Anti-forgery state mismatch
    """

    category = "Authorization failed"


class IMAPConnectionError(MailFetcherError):
    """Raised when the TLS connection to the IMAP server cannot be established.

    This includes:
    - DNS resolution failures
    - TCP connect failures
    - SSL/TLS handshake or certificate verification failures
    """

    category = "Connection failed"


class IMAPAuthenticationError(MailFetcherError):
    """Raised when the IMAP server rejects the XOAUTH2 exchange."""

    category = "IMAP authentication failed"


class MailboxError(MailFetcherError):
    """Raised when the mailbox cannot be selected."""

    category = "Mailbox error"


class SearchError(MailFetcherError):
    """Raised when the SEARCH command fails."""

    category = "Search failed"


class FetchError(MailFetcherError):
    """Raised when a message body is missing or its fetch is interrupted."""

    category = "Fetch failed"

    def __init__(self, message: str, message_id: int | None = None):
        super().__init__(message)
        self.message_id = message_id


class OutputError(MailFetcherError):
    """Raised when the output file cannot be created or written."""

    category = "Output error"


class SessionStateError(MailFetcherError):
    """Raised when a mailbox operation is called in the wrong session state."""

    category = "Session error"
