"""Raw message model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RawMessage:
    """
    Unparsed RFC 822 message as returned by ``FETCH ... RFC822``.

    Attributes:
        message_id: Server-assigned identifier from the search result
        data: Full wire-format message (headers and body)
    """

    message_id: int
    data: bytes

    def __post_init__(self) -> None:
        """Validate message data."""
        if not isinstance(self.data, bytes):
            raise TypeError(f"Message data must be bytes, got {type(self.data).__name__}")

    @property
    def size(self) -> int:
        """Message size in bytes."""
        return len(self.data)

    def __repr__(self) -> str:
        """String representation without message content."""
        return f"RawMessage(message_id={self.message_id}, size={self.size})"
