"""Mail Fetcher - download recent mailbox messages over IMAP with OAuth2."""

__version__ = "0.1.0"
