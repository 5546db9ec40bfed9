"""Configuration management for Mail Fetcher."""

from dotenv import load_dotenv

from mail_fetcher.lib.config.app_config import AppConfig
from mail_fetcher.lib.config.fetch_config import DEFAULT_CONFIG_PATH, FetchConfig
from mail_fetcher.lib.config.imap_config import DEFAULT_MAILBOX, IMAPConfig
from mail_fetcher.lib.config.oauth_config import DEFAULT_SCOPES, OAuthConfig

# Load environment variables from .env file
load_dotenv()

__all__ = [
    "AppConfig",
    "FetchConfig",
    "IMAPConfig",
    "OAuthConfig",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_MAILBOX",
    "DEFAULT_SCOPES",
]
