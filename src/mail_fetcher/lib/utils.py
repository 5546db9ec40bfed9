"""Utility functions for Mail Fetcher."""

import time
from typing import Any, Optional

from mail_fetcher.lib.logger import get_logger

logger = get_logger(__name__)


def format_size(num_bytes: int) -> str:
    """Format a byte count for display (e.g. ``1.5 MB``)."""
    size = float(num_bytes)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


class Timer:
    """Simple context manager for timing operations."""

    def __init__(self, name: str = "Operation"):
        """
        Initialize timer.

        Args:
            name: Name of the operation being timed
        """
        self.name = name
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.elapsed: Optional[float] = None

    def __enter__(self) -> "Timer":
        """Start the timer."""
        self.start_time = time.time()
        return self

    def __exit__(self, *args: Any) -> None:
        """Stop the timer and log the duration."""
        self.end_time = time.time()
        if self.start_time is not None:
            self.elapsed = self.end_time - self.start_time
            logger.debug(f"{self.name} took {self.elapsed:.2f} seconds")
