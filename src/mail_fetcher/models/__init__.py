"""Data models for Mail Fetcher."""

from mail_fetcher.models.authorization import AuthorizationRequest
from mail_fetcher.models.message import RawMessage
from mail_fetcher.models.run import RetrievalRun

__all__ = ["AuthorizationRequest", "RawMessage", "RetrievalRun"]
