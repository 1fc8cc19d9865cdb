"""Post-extraction adjustments that turn the framework skeleton into a project.

Only the Composer rewrite is essential. Every other step is an enhancement
and degrades to a warning (shown in verbose mode) or to nothing at all when
the files are not writable.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from jinja2 import TemplateError

from symfony_installer.project.composer import ComposerManager, create_package_name, lookup_os_user
from symfony_installer.project.templates import TemplateRenderer
from symfony_installer.utils import generate_random_secret, is_writable, print_warning, remove_path

logger = logging.getLogger(__name__)

SECRET_PLACEHOLDER = "ThisTokenIsNotSoSecretChangeIt"

# Files that only make sense inside the framework's own repository.
FRAMEWORK_FILE_PATTERNS = ("LICENSE", "UPGRADE*.md", "CHANGELOG*.md")

# Files that may hold the placeholder secret, relative to the project root.
SECRET_FILES = ("app/config/parameters.yml", ".env")


class ProjectPatcher:
    """Applies the installer's changes to an extracted project.

    Attributes:
        project_dir: Root of the extracted project.
        project_name: Directory basename, used for the README and package name.
        verbose: Whether non-fatal warnings are printed.
    """

    def __init__(
        self,
        project_dir: Path,
        project_name: str,
        *,
        verbose: bool = False,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.project_dir = Path(project_dir)
        self.project_name = project_name
        self.verbose = verbose
        self.renderer = renderer or TemplateRenderer()
        self.composer = ComposerManager(self.project_dir)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def remove_framework_files(self) -> list[Path]:
        """Delete the framework's licence, upgrade notes and changelogs.

        Returns:
            The paths that were removed.
        """
        removed: list[Path] = []
        for pattern in FRAMEWORK_FILE_PATTERNS:
            for path in sorted(self.project_dir.glob(pattern)):
                remove_path(path)
                if not path.exists():
                    removed.append(path)
        logger.debug("Removed framework files: %s", [p.name for p in removed])
        return removed

    def dump_readme(self, created_on: datetime | None = None) -> Path | None:
        """Replace ``README.md`` with a short project-specific one."""
        moment = created_on or datetime.now()
        context = {
            "project_name": self.project_name,
            "created_on": _format_creation_date(moment),
        }
        return self._render_quietly("README.md.j2", self.project_dir / "README.md", context)

    def create_gitignore(self, version: str) -> Path | None:
        """Write a ``.gitignore`` matching the directory layout of *version*."""
        context = {"major": _major(version)}
        return self._render_quietly("gitignore.j2", self.project_dir / ".gitignore", context)

    def update_parameters(self) -> list[Path]:
        """Replace the placeholder ``secret`` with a random value.

        Returns:
            The files that were updated.
        """
        updated: list[Path] = []
        for relative in SECRET_FILES:
            path = self.project_dir / relative
            if not path.exists():
                continue
            if not is_writable(path):
                self._warn(
                    "The value of the secret configuration option cannot be updated because\n"
                    f" the {path} file is not writable."
                )
                continue
            contents = path.read_text(encoding="utf-8")
            if SECRET_PLACEHOLDER not in contents:
                continue
            path.write_text(
                contents.replace(SECRET_PLACEHOLDER, generate_random_secret()),
                encoding="utf-8",
            )
            updated.append(path)
        return updated

    def update_composer_config(self, owner: str | None = None) -> str | None:
        """Rename the Composer package and strip framework-only metadata.

        Args:
            owner: Vendor part of the package name. When ``None`` the current
                OS account is looked up.

        Returns:
            The new package name, or ``None`` when ``composer.json`` could not
            be updated.
        """
        if not is_writable(self.composer.json_path):
            self._warn(
                "Project name cannot be configured because\n"
                f" the {self.composer.json_path} file is not writable."
            )
            return None

        self.composer.initialize_project_config()

        package_name = create_package_name(self.project_name, owner or lookup_os_user())
        changes: dict = {
            "name": package_name,
            "license": "proprietary",
            "description": None,
        }
        if "extra" in self.composer.get_project_config():
            changes["extra"] = {"branch-alias": None}
        self.composer.update_project_config(changes)
        logger.info("Composer package renamed to %s", package_name)
        return package_name

    def installed_version(self, fallback: str) -> str:
        """Return the ``symfony/symfony`` version from ``composer.lock`` without its ``v``."""
        locked = self.composer.get_package_version("symfony/symfony")
        if not locked:
            return fallback
        return locked[1:] if locked.startswith("v") else locked

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _render_quietly(self, template: str, output: Path, context: dict) -> Path | None:
        try:
            return self.renderer.render_to_file(template, output, context)
        except (OSError, TemplateError) as exc:
            logger.debug("Could not write %s: %s", output, exc)
            return None

    def _warn(self, message: str) -> None:
        if self.verbose:
            print_warning(message)
        else:
            logger.debug(message)


def _major(version: str) -> int:
    head = version.split(".", 1)[0]
    return int(head) if head.isdigit() else 0


def _format_creation_date(moment: datetime) -> str:
    """Format like ``October 18, 2026, 3:05 pm``."""
    hour = moment.hour % 12 or 12
    meridiem = "am" if moment.hour < 12 else "pm"
    return f"{moment:%B} {moment.day}, {moment.year}, {hour}:{moment:%M} {meridiem}"
