"""Services orchestrating a retrieval run."""

from mail_fetcher.services.retrieval import RetrievalPipeline

__all__ = ["RetrievalPipeline"]
