"""Retrieval pipeline orchestrating the OAuth2 exchange and the IMAP download."""

from datetime import datetime, timezone
from typing import Callable, Optional

from mail_fetcher.auth.imap import MailboxSession
from mail_fetcher.auth.oauth import TokenExchanger, parse_authorization_response
from mail_fetcher.auth.protocols import CodeProvider, MailboxSessionProtocol
from mail_fetcher.email.fetcher import compute_since_date, iter_raw_messages
from mail_fetcher.exceptions import MailFetcherError
from mail_fetcher.lib.config import FetchConfig, IMAPConfig
from mail_fetcher.lib.logger import get_structured_logger
from mail_fetcher.lib.utils import Timer
from mail_fetcher.models.run import RetrievalRun
from mail_fetcher.storage.output import OutputSink

logger = get_structured_logger(__name__)

SessionFactory = Callable[[IMAPConfig], MailboxSessionProtocol]


class RetrievalPipeline:
    """
    Orchestrates one fetch run.

    Steps run strictly in order: authorization URL -> code -> access token ->
    connect -> authenticate -> select -> search -> open output -> fetch and
    append each message -> logout. The first error aborts the run; messages
    already written stay in the output file.
    """

    def __init__(
        self,
        config: FetchConfig,
        code_provider: CodeProvider,
        exchanger: Optional[TokenExchanger] = None,
        session_factory: Optional[SessionFactory] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize retrieval pipeline.

        Args:
            config: Validated run configuration
            code_provider: Captures the authorization code from the user
            exchanger: Optional token exchanger (built from config if not provided)
            session_factory: Optional mailbox session factory (default: MailboxSession)
            clock: Optional source of the current time for the cutoff date
        """
        self.config = config
        self.code_provider = code_provider
        self.exchanger = exchanger or TokenExchanger(config.oauth)
        self.session_factory = session_factory or MailboxSession
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def obtain_access_token(self) -> str:
        """
        Run the authorization-code grant.

        Returns:
            Access token for XOAUTH2

        Raises:
            AuthExchangeError: Code missing, state mismatch, or grant rejected
        """
        request = self.exchanger.build_authorization_request()
        reply = self.code_provider.get_authorization_code(request.url)
        code, state = parse_authorization_response(reply)
        return self.exchanger.exchange_code(code, state=state)

    def run(self) -> RetrievalRun:
        """
        Execute the full run.

        Returns:
            Completed RetrievalRun

        Raises:
            MailFetcherError: Any step failed; the run record is marked failed
        """
        run = RetrievalRun(output_path=self.config.output_file)
        logger.set_context(run_id=run.id[:8])
        logger.info(
            "Starting retrieval run",
            server=self.config.imap.server,
            mailbox=self.config.imap.mailbox,
            days=self.config.days_to_fetch,
        )

        try:
            with Timer("Retrieval run"):
                access_token = self.obtain_access_token()
                self._download(access_token, run)
        except MailFetcherError as e:
            run.fail(str(e))
            logger.error(
                f"Retrieval run aborted: {e.category}",
                written=run.messages_written,
                matched=run.total_messages,
            )
            raise
        finally:
            logger.clear_context()

        run.complete()
        logger.info(
            "Retrieval run completed",
            written=run.messages_written,
            output=run.output_path,
        )
        return run

    def _download(self, access_token: str, run: RetrievalRun) -> None:
        """Open the mailbox session and copy every matching message to the output."""
        imap_config = self.config.imap

        with self.session_factory(imap_config) as session:
            session.connect()
            session.authenticate(imap_config.user, access_token)
            session.select(imap_config.mailbox)

            run.since_date = compute_since_date(self.config.days_to_fetch, self._clock())
            run.message_ids = session.search_since(run.since_date)
            logger.set_context(since=run.since_date.isoformat())

            # Output is opened only after a successful search
            with OutputSink(self.config.output_file) as sink:
                for message in iter_raw_messages(session, run.message_ids):
                    run.record_written(sink.write_message(message))
                    logger.log_fetch_progress(
                        message.message_id, run.messages_written, run.total_messages
                    )
