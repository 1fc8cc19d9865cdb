"""Synchronous HTTP client used by every remote call of the installer.

Wraps ``httpx.Client`` with the configured timeout and proxy, a stable
``User-Agent`` and DEBUG traces. The transport can be injected so tests can
serve canned responses through ``httpx.MockTransport``.

Typical usage::

    client = HttpClient(config.http)
    manifest = client.get_json("https://symfony.com/versions.json")
    with client.stream(archive_url) as response:
        for chunk in response.iter_bytes():
            ...
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx

from symfony_installer import __version__
from symfony_installer.config import HttpConfig

logger = logging.getLogger(__name__)

UNKNOWN_SIZE = sys.maxsize


class HttpClient:
    """Thin blocking client around ``httpx.Client``.

    Each public call opens a fresh ``httpx.Client`` so no connection state is
    shared between pipeline stages.
    """

    def __init__(
        self,
        config: HttpConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config or HttpConfig()
        self.transport = transport

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.Client:
        """Return a fresh ``httpx.Client`` configured with timeout and proxy."""
        kwargs: dict[str, Any] = {
            "timeout": httpx.Timeout(self.config.timeout, connect=self.config.connect_timeout),
            "follow_redirects": True,
            "trust_env": False,
            "headers": {"User-Agent": f"symfony-installer/{__version__}"},
        }
        if self.transport is not None:
            kwargs["transport"] = self.transport
        elif self.config.proxy:
            kwargs["proxy"] = self.config.proxy
        return httpx.Client(**kwargs)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, url: str) -> httpx.Response:
        """GET *url* and return the fully-read response.

        Raises:
            httpx.HTTPStatusError: On 4xx/5xx answers.
            httpx.HTTPError: On transport failures and timeouts.
        """
        logger.debug("GET %s", url)
        with self._client() as client:
            response = client.get(url)
            logger.debug("GET %s -> %s", url, response.status_code)
            response.raise_for_status()
            return response

    def get_text(self, url: str) -> str:
        """GET *url* and return the body as text."""
        return self.get(url).text

    def get_json(self, url: str) -> Any:
        """GET *url* and decode the JSON body.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        return self.get(url).json()

    def probe_size(self, url: str) -> int | None:
        """Return the size advertised for *url*, or ``None`` if it is unavailable.

        A HEAD request is tried first. Servers that reject HEAD get a streamed
        GET whose body is never read. An available resource without a
        ``Content-Length`` header reports ``UNKNOWN_SIZE`` so it ranks last.
        """
        try:
            with self._client() as client:
                response = client.head(url)
                if response.status_code == 405:
                    with client.stream("GET", url) as streamed:
                        return _advertised_size(streamed)
                return _advertised_size(response)
        except httpx.HTTPError as exc:
            logger.debug("Probe of %s failed: %s", url, exc)
            return None

    @contextmanager
    def stream(self, url: str) -> Iterator[httpx.Response]:
        """Open a streamed GET on *url*.

        The response status is checked before it is yielded, so callers only
        ever iterate over a successful body.

        Raises:
            httpx.HTTPStatusError: On 4xx/5xx answers.
            httpx.HTTPError: On transport failures and timeouts.
        """
        logger.debug("GET (stream) %s", url)
        with self._client() as client:
            with client.stream("GET", url) as response:
                logger.debug("GET (stream) %s -> %s", url, response.status_code)
                response.raise_for_status()
                yield response


def _advertised_size(response: httpx.Response) -> int | None:
    if response.status_code >= 400:
        return None
    length = response.headers.get("content-length")
    if length is None or not length.isdigit():
        return UNKNOWN_SIZE
    return int(length)
