"""Choose and download the smallest available project archive.

The download server publishes each release in several compressed formats.
Every candidate is probed for its size, the smallest one is streamed into
the hidden working directory and a Rich progress bar is shown for large
transfers.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx
from pydantic import BaseModel

from symfony_installer.errors import DownloadFailed, NoArchiveAvailable, VersionNotFound
from symfony_installer.http_client import HttpClient
from symfony_installer.utils import create_download_progress, format_size

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class DownloadedArchive(BaseModel):
    """An archive saved on disk, waiting to be extracted."""

    path: Path
    format: str
    size: int = 0

    @property
    def hidden_dir(self) -> Path:
        """The private directory holding the archive."""
        return self.path.parent


class ArchiveFetcher:
    """Downloads project archives.

    Attributes:
        http: Client used for probing and downloading.
        formats: Candidate archive extensions appended to the base URL.
        progress_threshold: Transfers smaller than this (bytes) show no bar.
        file_prefix: Stem of the saved archive (``symfony.zip``).
    """

    def __init__(
        self,
        http: HttpClient,
        *,
        formats: list[str] | tuple[str, ...] = ("zip", "tgz"),
        progress_threshold: int = 1024 * 1024,
        file_prefix: str = "symfony",
    ) -> None:
        self.http = http
        self.formats = list(formats)
        self.progress_threshold = progress_threshold
        self.file_prefix = file_prefix

    def choose(self, base_url: str) -> tuple[str, str]:
        """Return ``(url, format)`` of the smallest available candidate.

        Raises:
            NoArchiveAvailable: If no candidate answers with a usable size.
        """
        sizes: list[tuple[int, str, str]] = []
        for fmt in self.formats:
            url = f"{base_url}.{fmt}"
            size = self.http.probe_size(url)
            logger.debug("Candidate %s -> %s", url, size)
            if size is not None:
                sizes.append((size, url, fmt))

        if not sizes:
            raise NoArchiveAvailable(
                f"None of the archive formats ({', '.join(self.formats)}) could be found at\n"
                f"{base_url}\n"
                "Check that you are online and try executing this command again."
            )

        _, url, fmt = min(sizes, key=lambda item: item[0])
        return url, fmt

    def fetch(
        self,
        base_url: str,
        hidden_dir: Path,
        *,
        application: str = "Symfony",
        not_found_message: str | None = None,
    ) -> DownloadedArchive:
        """Download the preferred archive into *hidden_dir*.

        Args:
            base_url: Archive URL without extension.
            hidden_dir: Existing private directory that receives the file.
            application: Human-readable name used in error messages.
            not_found_message: When set, a 403/404 answer raises
                ``VersionNotFound`` with this text instead of ``DownloadFailed``.

        Raises:
            NoArchiveAvailable: No candidate format is available.
            VersionNotFound: The server answered 403/404 and
                *not_found_message* was given.
            DownloadFailed: Any other HTTP, network or write failure.
        """
        url, fmt = self.choose(base_url)
        destination = hidden_dir / f"{self.file_prefix}.{fmt}"

        try:
            downloaded = self._stream_to_file(url, destination)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if not_found_message is not None and status in (403, 404):
                raise VersionNotFound(not_found_message) from exc
            raise DownloadFailed(
                f"There was an error downloading {application} from symfony.com server:\n{exc}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DownloadFailed(
                f"There was an error downloading {application} from symfony.com server:\n{exc}"
            ) from exc
        except OSError as exc:
            raise DownloadFailed(
                f"{application} couldn't be saved to {destination}:\n{exc}"
            ) from exc

        logger.info("Downloaded %s (%s)", url, format_size(downloaded))
        return DownloadedArchive(path=destination, format=fmt, size=downloaded)

    def _stream_to_file(self, url: str, destination: Path) -> int:
        downloaded = 0
        with self.http.stream(url) as response, destination.open("wb") as fh:
            total = int(response.headers.get("content-length") or 0)
            # No bar for small files. Redirects are followed by httpx, so only
            # the final body is ever streamed here.
            if total < self.progress_threshold:
                for chunk in response.iter_bytes(CHUNK_SIZE):
                    fh.write(chunk)
                    downloaded += len(chunk)
                return downloaded

            with create_download_progress() as progress:
                task = progress.add_task("download", total=total)
                for chunk in response.iter_bytes(CHUNK_SIZE):
                    fh.write(chunk)
                    downloaded += len(chunk)
                    progress.update(task, completed=downloaded)
        return downloaded
