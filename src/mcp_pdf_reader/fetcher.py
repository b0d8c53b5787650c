"""Fetch raw document bytes from a local path or an http(s) URL."""

import asyncio
import logging
import os
from pathlib import Path
from urllib.parse import urljoin

import aiohttp
from anyio import to_thread

from .config import ServerConfig
from .errors import DownloadError, TooManyRedirectsError

logger = logging.getLogger(__name__)

URL_PREFIXES = ("http://", "https://")
REDIRECT_STATUSES = (301, 302)
SUCCESS_STATUSES = (200, 202)


def is_url(source: str) -> bool:
    """Return True if the source identifier is an http(s) URL."""
    return source.startswith(URL_PREFIXES)


def resolve_source(source: str) -> str:
    """Normalize a source identifier for use as a cache key.

    URLs are returned verbatim, filesystem paths are made absolute.
    """
    if is_url(source):
        return source
    return os.path.abspath(source)


async def fetch_url(url: str, config: ServerConfig) -> bytes:
    """Download a document, following 301/302 redirects.

    Args:
        url: URL to fetch the document from
        config: Server configuration (timeout, user agent, proxy, redirect cap)

    Returns:
        Response body as bytes

    Raises:
        DownloadError: If the final response status is not 200 or 202, or the
            download does not finish within ``config.timeout``
        TooManyRedirectsError: If more than ``config.max_redirects`` hops are needed
        aiohttp.ClientError: On network level failures
    """
    timeout = aiohttp.ClientTimeout(total=config.timeout)
    headers = {"User-Agent": config.user_agent}

    try:
        async with aiohttp.ClientSession(timeout=timeout, headers=headers) as session:
            current = url
            for _ in range(config.max_redirects + 1):
                async with session.get(
                    current,
                    allow_redirects=False,
                    proxy=config.proxy_url,
                ) as response:
                    location = response.headers.get("Location")
                    if response.status in REDIRECT_STATUSES and location:
                        target = urljoin(current, location)
                        logger.debug("Redirect %s: %s -> %s", response.status, current, target)
                        current = target
                        continue

                    if response.status not in SUCCESS_STATUSES:
                        raise DownloadError(
                            f"Failed to download PDF: HTTP {response.status}",
                            status=response.status,
                        )

                    content = await response.read()
                    logger.debug("Downloaded %d bytes from %s", len(content), current)
                    return content
    except asyncio.TimeoutError as e:
        raise DownloadError(
            f"Failed to download PDF: timed out after {config.timeout:g}s fetching {url}"
        ) from e

    raise TooManyRedirectsError(
        f"Failed to download PDF: more than {config.max_redirects} redirects from {url}"
    )


async def read_local(path: str) -> bytes:
    """Read a local file fully, off the event loop.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    file_path = Path(path).resolve()
    return await to_thread.run_sync(file_path.read_bytes)


async def fetch_source(source: str, config: ServerConfig) -> bytes:
    """Return the raw bytes behind a source identifier."""
    if is_url(source):
        return await fetch_url(source, config)
    return await read_local(source)
