"""Append-only output file for raw messages.

Each message is written as its raw bytes followed by a blank line, in the
order the messages are handed in. The file is flushed after every message
so an interrupted run leaves complete message blocks behind it.
"""

import os
from pathlib import Path
from typing import BinaryIO, Optional

from mail_fetcher.exceptions import OutputError
from mail_fetcher.lib.logger import get_logger
from mail_fetcher.models.message import RawMessage

logger = get_logger(__name__)

MESSAGE_SEPARATOR = b"\n\n"


class OutputSink:
    """Append-only byte destination for fetched messages.

    Attributes:
        path: Output file path
        messages_written: Number of complete message blocks written
        bytes_written: Bytes written, separators included

    Security considerations:
    - The file holds full mail content, so it is created owner-only (0600)
    """

    def __init__(self, path: Path, mode: int = 0o600) -> None:
        """Initialize output sink.

        Args:
            path: File to create (or truncate) when opened
            mode: Permission bits for a newly created file
        """
        self.path = Path(path)
        self._mode = mode
        self._file: Optional[BinaryIO] = None
        self.messages_written = 0
        self.bytes_written = 0

    def __enter__(self) -> "OutputSink":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        """Check if the file is open for writing."""
        return self._file is not None

    def open(self) -> None:
        """Create or truncate the output file.

        Raises:
            OutputError: File or parent directory cannot be created
        """
        if self.is_open:
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, self._mode)
            self._file = os.fdopen(fd, "wb")
        except OSError as e:
            raise OutputError(f"Cannot create output file {self.path}: {e}") from e

        logger.info(f"Writing messages to {self.path}")

    def write_message(self, message: RawMessage) -> int:
        """Append one message followed by the blank-line separator.

        Args:
            message: Raw message to append

        Returns:
            Number of bytes written

        Raises:
            OutputError: Sink is not open, or the write failed
        """
        if not self.is_open:
            raise OutputError(f"Output file {self.path} is not open")

        try:
            self._file.write(message.data)
            self._file.write(MESSAGE_SEPARATOR)
            self._file.flush()
        except OSError as e:
            raise OutputError(
                f"Failed writing message {message.message_id} to {self.path}: {e}"
            ) from e

        written = message.size + len(MESSAGE_SEPARATOR)
        self.messages_written += 1
        self.bytes_written += written
        return written

    def close(self) -> None:
        """Close the output file. Safe to call more than once.

        Raises:
            OutputError: Final flush failed
        """
        if self._file is None:
            return

        file, self._file = self._file, None
        try:
            file.close()
        except OSError as e:
            raise OutputError(f"Failed closing output file {self.path}: {e}") from e

        logger.info(
            f"Closed {self.path}: {self.messages_written} messages, "
            f"{self.bytes_written} bytes"
        )
