import logging
import sys
from typing import Optional

import anyio
import click

from .config import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    ServerConfig,
)
from .server import PDFReaderServer
from .version import __version__

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str) -> None:
    """Send log records to stderr; stdout carries the MCP protocol."""
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


@click.command()
@click.option(
    "--max-redirects",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_REDIRECTS,
    envvar="PDF_READER_MAX_REDIRECTS",
    show_default=True,
    help="Maximum HTTP redirects followed per download",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_TIMEOUT,
    envvar="PDF_READER_TIMEOUT",
    show_default=True,
    help="Total timeout in seconds for each HTTP request",
)
@click.option(
    "--user-agent",
    default=DEFAULT_USER_AGENT,
    envvar="PDF_READER_USER_AGENT",
    help="User-Agent header used for downloads",
)
@click.option(
    "--proxy-url",
    default=None,
    envvar="PDF_READER_PROXY_URL",
    help="Proxy URL to use for downloads",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=DEFAULT_LOG_LEVEL,
    envvar="PDF_READER_LOG_LEVEL",
    show_default=True,
    help="Logging level for the stderr log",
)
@click.version_option(__version__)
def main(
    max_redirects: int,
    timeout: float,
    user_agent: str,
    proxy_url: Optional[str],
    log_level: str,
) -> None:
    """MCP PDF Reader - read, page through and search PDFs over stdio"""
    config = ServerConfig(
        max_redirects=max_redirects,
        timeout=timeout,
        user_agent=user_agent,
        proxy_url=proxy_url,
        log_level=log_level.upper(),
    )
    setup_logging(config.log_level)

    server = PDFReaderServer(config)
    anyio.run(server.run)


if __name__ == "__main__":
    main()
