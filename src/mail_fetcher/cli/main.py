"""Mail Fetcher CLI interface."""

import sys
from pathlib import Path

import click

from mail_fetcher import __version__
from mail_fetcher.auth.oauth import TokenExchanger
from mail_fetcher.exceptions import MailFetcherError
from mail_fetcher.lib.config import DEFAULT_CONFIG_PATH, FetchConfig
from mail_fetcher.lib.logger import get_logger, setup_logger
from mail_fetcher.lib.utils import format_size
from mail_fetcher.services.retrieval import RetrievalPipeline

logger = get_logger(__name__)


class ConsoleCodeProvider:
    """Show the authorization URL and read the pasted code from the terminal."""

    def get_authorization_code(self, authorization_url: str) -> str:
        click.echo(f"Open this URL in your browser:\n{authorization_url}\n")
        click.echo("After authorization, enter the code from the redirect URL")
        click.echo("(pasting the whole redirect URL also works).")
        code = click.prompt("Authorization code", prompt_suffix=": ")
        return code.strip()


def _load_config(config_path: Path) -> FetchConfig:
    try:
        return FetchConfig.from_file(config_path)
    except MailFetcherError as e:
        click.echo(f"✗ {e.category}: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="mail-fetcher")
def cli():
    """Mail Fetcher - download recent mail over IMAP using OAuth2."""
    pass


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to the JSON config file",
)
@click.option(
    "--days",
    type=click.IntRange(min=0),
    default=None,
    help="Override days_to_fetch from the config file",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Override output_file from the config file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def fetch(config_path, days, output_path, verbose):
    """Authorize, then download recent INBOX messages to the output file."""
    if verbose:
        setup_logger(level="DEBUG")

    config = _load_config(config_path)

    try:
        config = config.with_overrides(days_to_fetch=days, output_file=output_path)
        pipeline = RetrievalPipeline(config, ConsoleCodeProvider())
        run = pipeline.run()
    except MailFetcherError as e:
        click.echo(f"✗ {e.category}: {e}", err=True)
        sys.exit(1)

    click.echo()
    click.echo(f"✓ Emails have been downloaded and saved to {run.output_path}")
    click.echo(
        f"  Messages: {run.messages_written} since {run.since_date:%d %b %Y} "
        f"({format_size(run.bytes_written)})"
    )
    click.echo(f"  Duration: {run.duration_seconds:.1f}s")


@cli.command("auth-url")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to the JSON config file",
)
def auth_url(config_path):
    """Print an authorization URL to check the OAuth2 client setup."""
    config = _load_config(config_path)

    try:
        request = TokenExchanger(config.oauth).build_authorization_request()
    except MailFetcherError as e:
        click.echo(f"✗ {e.category}: {e}", err=True)
        sys.exit(1)

    click.echo(request.url)


def main():
    """Main entry point for CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\n\nOperation cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
