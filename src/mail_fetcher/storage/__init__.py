"""Output storage for fetched messages."""

from mail_fetcher.storage.output import MESSAGE_SEPARATOR, OutputSink

__all__ = ["MESSAGE_SEPARATOR", "OutputSink"]
