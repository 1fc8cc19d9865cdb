"""Extract a downloaded archive into the project directory.

Release archives wrap everything in one root folder (``Symfony/``). The
contents are unpacked into a staging directory next to the archive, the
wrapping folder is dropped and its children are moved into the target. The
staging directory lives inside the hidden working directory, so the final
move stays on the same file system.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import zipfile
import zlib
from pathlib import Path, PurePosixPath

from symfony_installer.archive.fetcher import DownloadedArchive
from symfony_installer.errors import (
    CorruptArchive,
    EmptyArchive,
    ExtractionFailed,
    TargetNotWritable,
)

logger = logging.getLogger(__name__)


class ArchiveExtractor:
    """Unpacks ZIP and TGZ archives without their root directory.

    Attributes:
        application: Human-readable name used in error messages.
        retry_command: Command the user can run again, quoted in messages.
        working_dir: Directory whose permissions the user should check.
    """

    def __init__(
        self,
        *,
        application: str = "Symfony",
        retry_command: str = "",
        working_dir: Path | None = None,
    ) -> None:
        self.application = application
        self.retry_command = retry_command
        self.working_dir = working_dir or Path.cwd()

    def extract(self, archive: DownloadedArchive, target: Path) -> Path:
        """Extract *archive* so its root folder's children land in *target*.

        Returns:
            The populated target directory.

        Raises:
            EmptyArchive: The file or the archive has no entries.
            CorruptArchive: The archive cannot be read or has unsafe members.
            TargetNotWritable: A permission error occurred while writing.
            ExtractionFailed: Any other failure, including an extraction that
                produced nothing.
        """
        staging = archive.hidden_dir / "extracted"
        try:
            if not archive.path.exists() or archive.path.stat().st_size == 0:
                raise EmptyArchive(self._message("the downloaded package is empty."))

            staging.mkdir(parents=True, exist_ok=True)
            if archive.format == "zip":
                self._extract_zip(archive.path, staging)
            else:
                self._extract_tar(archive.path, staging)

            root = _wrapping_root(staging)
            if root is None:
                raise ExtractionFailed(
                    f"{self.application} can't be installed because the downloaded package is corrupted\n"
                    "or because the uncompress commands of your operating system didn't work."
                )
            logger.debug("Moving contents of %s into %s", root, target)
            target.mkdir(parents=True, exist_ok=True)
            for item in sorted(root.iterdir()):
                shutil.move(str(item), str(target / item.name))
        except ExtractionFailed:
            raise
        except PermissionError as exc:
            raise TargetNotWritable(
                f"{self.application} can't be installed because the installer doesn't have enough\n"
                "permissions to uncompress and rename the package contents.\n"
                f"To solve this issue, check the permissions of the {self.working_dir} directory and\n"
                f"try executing this command again:\n{self.retry_command}"
            ) from exc
        except (zipfile.BadZipFile, tarfile.TarError, EOFError, zlib.error) as exc:
            raise CorruptArchive(self._message("the downloaded package is corrupted.")) from exc
        except Exception as exc:
            raise ExtractionFailed(
                f"{self.application} can't be installed because the downloaded package is corrupted\n"
                "or because the installer doesn't have enough permissions to uncompress and\n"
                "rename the package contents.\n"
                f"To solve this issue, check the permissions of the {self.working_dir} directory and\n"
                f"try executing this command again:\n{self.retry_command}"
            ) from exc
        finally:
            shutil.rmtree(staging, ignore_errors=True)

        return target

    # ------------------------------------------------------------------
    # Format handlers
    # ------------------------------------------------------------------

    def _extract_zip(self, path: Path, staging: Path) -> None:
        with zipfile.ZipFile(path) as zf:
            members = zf.infolist()
            if not members:
                raise EmptyArchive(self._message("the downloaded package is empty."))
            for info in members:
                self._check_member_name(info.filename)
            for info in members:
                extracted = Path(zf.extract(info, staging))
                mode = (info.external_attr >> 16) & 0o777
                if mode and not info.is_dir():
                    extracted.chmod(mode)

    def _extract_tar(self, path: Path, staging: Path) -> None:
        with tarfile.open(path, "r:*") as tf:
            members = tf.getmembers()
            if not members:
                raise EmptyArchive(self._message("the downloaded package is empty."))
            for member in members:
                self._check_member_name(member.name)
            # Link targets are vetted by the "data" filter where available.
            if hasattr(tarfile, "data_filter"):
                tf.extractall(staging, filter="data")
            else:
                tf.extractall(staging)

    def _check_member_name(self, name: str) -> None:
        pure = PurePosixPath(name.replace("\\", "/"))
        if pure.is_absolute() or ".." in pure.parts:
            raise CorruptArchive(
                self._message(f"the downloaded package contains an unsafe path ({name}).")
            )

    def _message(self, reason: str) -> str:
        return (
            f"{self.application} can't be installed because {reason}\n"
            f"To solve this issue, try executing this command again:\n{self.retry_command}"
        )


def _wrapping_root(staging: Path) -> Path | None:
    """Return the directory whose children form the project, or ``None`` if empty."""
    entries = list(staging.iterdir())
    if not entries:
        return None
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return staging
