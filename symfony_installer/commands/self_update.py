"""``symfony self-update``: replace the running installer with the latest build.

The installer is distributed as a single-file zipapp. The new build is
downloaded next to the current one, validated, and swapped in with a backup
that is restored if the swap fails.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
import zipfile
from pathlib import Path

import httpx

from symfony_installer import __version__
from symfony_installer.config import Config
from symfony_installer.errors import SelfUpdateFailed
from symfony_installer.http_client import HttpClient
from symfony_installer.utils import print_success, remove_path

logger = logging.getLogger(__name__)


class SelfUpdater:
    """Updates a zipapp build of the installer in place.

    Attributes:
        config: Global configuration (URLs and HTTP settings).
        executable: The file being replaced; defaults to ``sys.argv[0]``.
        local_version: Version of the running installer.
    """

    def __init__(
        self,
        config: Config,
        *,
        http: HttpClient | None = None,
        executable: Path | None = None,
        local_version: str = __version__,
    ) -> None:
        self.config = config
        self.http = http or HttpClient(config.http)
        self.executable = Path(executable or sys.argv[0]).resolve()
        self.local_version = local_version

    @property
    def temp_path(self) -> Path:
        return self.executable.with_name(f"{self.executable.stem}-tmp{self.executable.suffix}")

    @property
    def backup_path(self) -> Path:
        return self.executable.with_name(f"{self.executable.name}.bak")

    def remote_version(self) -> str | None:
        """Return the published version, or ``None`` if it cannot be read."""
        try:
            return self.http.get_text(self.config.remotes.installer_version_url).strip()
        except httpx.HTTPError as exc:
            logger.debug("Could not read the remote installer version: %s", exc)
            return None

    def is_up_to_date(self) -> bool:
        return self.remote_version() == self.local_version

    def update(self, *, force: bool = False) -> bool:
        """Install the latest build.

        Returns:
            ``False`` when the installer was already up to date.

        Raises:
            SelfUpdateFailed: The build could not be downloaded, is corrupted,
                or could not replace the current file.
        """
        if not force and self.is_up_to_date():
            return False

        if not zipfile.is_zipfile(self.executable):
            raise SelfUpdateFailed(
                f"{self.executable} is not a standalone installer build and cannot update itself.\n"
                "Upgrade it with your package manager instead, e.g.:\n\n"
                "pip install --upgrade symfony-installer"
            )

        self._download()
        self._validate()
        self._swap()
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _download(self) -> None:
        url = self.config.remotes.installer_url
        try:
            with self.http.stream(url) as response, self.temp_path.open("wb") as fh:
                for chunk in response.iter_bytes():
                    fh.write(chunk)
        except (httpx.HTTPError, OSError) as exc:
            remove_path(self.temp_path)
            raise SelfUpdateFailed(
                "The new version of the Symfony Installer couldn't be downloaded from the server."
            ) from exc

        umask = os.umask(0)
        os.umask(umask)
        self.temp_path.chmod(0o777 & ~umask)

    def _validate(self) -> None:
        reason: str | None = None
        try:
            with zipfile.ZipFile(self.temp_path) as zf:
                if "__main__.py" not in zf.namelist():
                    reason = "__main__.py is missing"
                elif zf.testzip() is not None:
                    reason = "a member failed its CRC check"
        except zipfile.BadZipFile as exc:
            reason = str(exc)

        if reason is not None:
            remove_path(self.temp_path)
            raise SelfUpdateFailed(
                f"The downloaded file is corrupted ({reason}).\n"
                "Please re-run the self-update command to try again."
            )

    def _swap(self) -> None:
        shutil.copy2(self.executable, self.backup_path)
        try:
            os.replace(self.temp_path, self.executable)
        except OSError as exc:
            os.replace(self.backup_path, self.executable)
            remove_path(self.temp_path)
            raise SelfUpdateFailed(
                f"The installer at {self.executable} couldn't be replaced ({exc}).\n"
                "The previous version has been restored."
            ) from exc
        remove_path(self.backup_path)


def run_self_update(
    config: Config,
    *,
    force: bool = False,
    http: HttpClient | None = None,
    executable: Path | None = None,
) -> int:
    updater = SelfUpdater(config, http=http, executable=executable)
    if updater.update(force=force):
        print_success("Symfony Installer was successfully updated.")
    else:
        print_success("Symfony Installer is already up to date.")
    return 0
