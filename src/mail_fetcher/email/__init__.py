"""Message retrieval for Mail Fetcher."""
