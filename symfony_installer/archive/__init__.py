"""Download and extraction of project archives."""

from symfony_installer.archive.extractor import ArchiveExtractor
from symfony_installer.archive.fetcher import ArchiveFetcher, DownloadedArchive

__all__ = [
    "ArchiveExtractor",
    "ArchiveFetcher",
    "DownloadedArchive",
]
