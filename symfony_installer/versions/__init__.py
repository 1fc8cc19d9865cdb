"""Version tokens, the remote version manifest and version resolution.

Usage::

    from symfony_installer.versions import VersionManifest, VersionResolver

    manifest = VersionManifest.model_validate(raw_json)
    version = VersionResolver(manifest).resolve("3.4")
"""

from symfony_installer.versions.models import VersionManifest, VersionSpecifier
from symfony_installer.versions.remote import fetch_manifest, fetch_roadmap
from symfony_installer.versions.resolver import VersionResolver

__all__ = [
    "VersionManifest",
    "VersionResolver",
    "VersionSpecifier",
    "fetch_manifest",
    "fetch_roadmap",
]
