"""Message retrieval helpers for the SINCE search and fetch loop."""

from collections.abc import Iterable, Iterator
from datetime import date, datetime, timedelta, timezone
from typing import TYPE_CHECKING

from imapclient.datetime_util import format_criteria_date

from mail_fetcher.exceptions import ConfigurationError
from mail_fetcher.lib.logger import get_logger
from mail_fetcher.models.message import RawMessage

if TYPE_CHECKING:
    from mail_fetcher.auth.protocols import MailboxSessionProtocol

logger = get_logger(__name__)


def compute_since_date(days: int, now: datetime | None = None) -> date:
    """
    Compute the cutoff date for a trailing retention window.

    Args:
        days: Window length in days (0 means today only)
        now: Reference time (default: current UTC time)

    Returns:
        Calendar date ``days`` days before ``now``

    Raises:
        ConfigurationError: days is negative
    """
    if days < 0:
        raise ConfigurationError(f"Retention window must be non-negative, got {days}")

    now = now or datetime.now(timezone.utc)
    return (now - timedelta(days=days)).date()


def format_since_date(since: date) -> str:
    """
    Format a date per the IMAP date grammar, e.g. ``05-Jan-2024``.

    Month abbreviations are English regardless of the process locale.
    """
    return format_criteria_date(since).decode("ascii")


def iter_raw_messages(
    session: "MailboxSessionProtocol", message_ids: Iterable[int]
) -> Iterator[RawMessage]:
    """
    Fetch messages one at a time, in the order given.

    The first failed fetch propagates and ends the iteration; no message
    is skipped.

    Args:
        session: Selected mailbox session
        message_ids: Identifiers from the search result

    Yields:
        RawMessage for each identifier
    """
    for message_id in message_ids:
        message = session.fetch(message_id)
        logger.debug(f"Fetched message {message_id} ({message.size} bytes)")
        yield message
