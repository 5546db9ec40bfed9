"""Authentication module: OAuth2 token exchange and XOAUTH2 IMAP sessions."""

from mail_fetcher.auth.imap import (
    MailboxSession,
    SessionState,
    build_xoauth2_payload,
)
from mail_fetcher.auth.oauth import (
    TokenExchanger,
    parse_authorization_response,
)
from mail_fetcher.auth.protocols import (
    CodeProvider,
    IMAPClientProtocol,
    MailboxSessionProtocol,
)

__all__ = [
    # OAuth2
    "TokenExchanger",
    "parse_authorization_response",
    # IMAP
    "MailboxSession",
    "SessionState",
    "build_xoauth2_payload",
    # Protocols
    "CodeProvider",
    "IMAPClientProtocol",
    "MailboxSessionProtocol",
]
