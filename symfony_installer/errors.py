"""Exceptions raised by the installer.

Every ``InstallerError`` carries a message that is printed verbatim to the
user, so it must name the version or path involved and, when a workaround
exists, spell out the command to run.
"""

from __future__ import annotations


class InstallerError(Exception):
    """Raised when an install step fails and the pipeline must stop."""


# ---------------------------------------------------------------------------
# Version resolution
# ---------------------------------------------------------------------------


class InvalidVersionSyntax(InstallerError):
    """The version token does not match the accepted grammar."""


class UnmaintainedBranch(InstallerError):
    """The version belongs to a branch that is missing or unmaintained."""


class VersionNotInstallable(InstallerError):
    """The version exists but this installer cannot install it."""


class ManifestUnavailable(InstallerError):
    """The remote version manifest could not be fetched or parsed."""


# ---------------------------------------------------------------------------
# Download
# ---------------------------------------------------------------------------


class NoArchiveAvailable(InstallerError):
    """None of the candidate archive formats could be resolved."""


class VersionNotFound(InstallerError):
    """The download server answered 403/404 for the requested version."""


class DownloadFailed(InstallerError):
    """Any other HTTP or network failure while downloading."""


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class ExtractionFailed(InstallerError):
    """Generic extraction failure, also used for soft failures."""


class CorruptArchive(ExtractionFailed):
    """The archive is structurally unreadable."""


class EmptyArchive(ExtractionFailed):
    """The archive has no entries."""


class TargetNotWritable(ExtractionFailed):
    """The destination cannot be written."""


# ---------------------------------------------------------------------------
# Project / misc
# ---------------------------------------------------------------------------


class ProjectExists(InstallerError):
    """The target directory already holds a non-empty project."""


class InsufficientPermissions(InstallerError):
    """The parent of the project directory is not writable."""


class SelfUpdateFailed(InstallerError):
    """The new installer build could not be downloaded or installed."""


class AbortError(KeyboardInterrupt):
    """Raised from the SIGINT handler to unwind the running pipeline.

    Deriving from ``KeyboardInterrupt`` keeps ``except Exception`` clauses
    along the way from swallowing it.
    """

    def __init__(self, message: str = "Aborting, cleaning up...") -> None:
        super().__init__(message)
