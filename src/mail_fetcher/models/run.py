"""Retrieval run model."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Optional


@dataclass
class RetrievalRun:
    """
    Record of a single fetch run.

    Attributes:
        id: Unique run ID (UUID)
        output_path: File the messages are written to
        start_time: Run start timestamp
        end_time: Run completion timestamp (None while in progress)
        status: Current run status
        since_date: Cutoff used for the SINCE search (None until computed)
        message_ids: Identifiers returned by the search, in server order
        messages_written: Number of messages appended to the output file
        bytes_written: Total bytes appended, separators included
        error: Error description if the run failed
    """

    output_path: Path
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    status: str = "in_progress"
    since_date: Optional[date] = None
    message_ids: list[int] = field(default_factory=list)
    messages_written: int = 0
    bytes_written: int = 0
    error: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate run data."""
        valid_statuses = ("in_progress", "completed", "failed")
        if self.status not in valid_statuses:
            raise ValueError(f"Invalid status: {self.status}. Must be one of {valid_statuses}")

    @property
    def is_completed(self) -> bool:
        """Check if run is completed."""
        return self.status == "completed"

    @property
    def total_messages(self) -> int:
        """Number of messages matched by the search."""
        return len(self.message_ids)

    @property
    def duration_seconds(self) -> Optional[float]:
        """Calculate run duration in seconds."""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return (datetime.now() - self.start_time).total_seconds()

    def record_written(self, num_bytes: int) -> None:
        """Count one message appended to the output file."""
        if self.messages_written >= self.total_messages:
            raise ValueError("Messages written cannot exceed messages matched")
        self.messages_written += 1
        self.bytes_written += num_bytes

    def complete(self) -> None:
        """Mark run as completed."""
        self.status = "completed"
        self.end_time = datetime.now()

    def fail(self, error_message: str) -> None:
        """Mark run as failed."""
        self.status = "failed"
        self.error = error_message
        self.end_time = datetime.now()
