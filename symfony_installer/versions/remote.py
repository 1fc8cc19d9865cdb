"""Download the version manifest and roadmap entries from symfony.com."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from symfony_installer.config import Config
from symfony_installer.errors import ManifestUnavailable
from symfony_installer.http_client import HttpClient
from symfony_installer.versions.models import VersionManifest

logger = logging.getLogger(__name__)


def fetch_manifest(config: Config, http: HttpClient) -> VersionManifest:
    """Download and parse the version manifest.

    Raises:
        ManifestUnavailable: The manifest could not be fetched or decoded.
    """
    url = config.remotes.versions_url
    try:
        return VersionManifest.model_validate(http.get_json(url))
    except (httpx.HTTPError, ValueError) as exc:
        raise ManifestUnavailable(
            "There was a problem while downloading the list of Symfony versions from\n"
            "symfony.com. Check that you are online and the following URL is accessible:\n\n"
            f"{url}"
        ) from exc


def fetch_roadmap(config: Config, http: HttpClient, branch: str) -> dict[str, Any] | None:
    """Return the roadmap entry for *branch*, or ``None`` when unavailable."""
    url = f"{config.remotes.roadmap_url}?version={branch}"
    try:
        data = http.get_json(url)
    except (httpx.HTTPError, ValueError) as exc:
        logger.debug("Roadmap lookup %s failed: %s", url, exc)
        return None
    return data if isinstance(data, dict) else None
