"""Install pipeline orchestrator.

Runs the steps of an installation in order:

    1. CHECK      -- Target directory is empty and its parent writable
    2. RESOLVE    -- Version token resolved against the remote manifest
    3. DOWNLOAD   -- Smallest archive streamed into a hidden directory
    4. EXTRACT    -- Archive unpacked without its root folder
    5. PATCH      -- Framework files removed, README, secret, composer.json, .gitignore
    6. REQUIRE    -- Project requirements evaluated
    7. REPORT     -- Result and next steps printed

The first failing step stops the pipeline. The hidden download directory is
always removed, and a failed or aborted run also removes the project
directory it created.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from symfony_installer.archive import ArchiveExtractor, ArchiveFetcher, DownloadedArchive
from symfony_installer.config import Config
from symfony_installer.errors import (
    ExtractionFailed,
    InsufficientPermissions,
    ProjectExists,
)
from symfony_installer.http_client import HttpClient
from symfony_installer.project import ProjectPatcher, RequirementResult, RequirementsChecker
from symfony_installer.reporter import ResultReporter
from symfony_installer.utils import (
    console,
    create_hidden_directory,
    is_empty_directory,
    remove_path,
)
from symfony_installer.versions import VersionResolver, VersionSpecifier, fetch_manifest

logger = logging.getLogger(__name__)

Step = tuple[str, Callable[[], None]]


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class ProjectTarget(BaseModel):
    """Where the project goes and which version it gets."""

    model_config = ConfigDict(frozen=True)

    directory: Path
    name: str
    version: str = "latest"

    @classmethod
    def from_argument(cls, directory: str, working_dir: Path, version: str = "latest") -> "ProjectTarget":
        """Build a target from the raw ``<directory>`` CLI argument."""
        cleaned = directory.strip().rstrip("/\\") or directory.strip()
        path = Path(cleaned)
        if not path.is_absolute():
            path = working_dir / path
        return cls(directory=path, name=path.name, version=version.strip())

    def with_version(self, version: str) -> "ProjectTarget":
        return self.model_copy(update={"version": version})


class InstallState(BaseModel):
    """Mutable bookkeeping of one pipeline run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    target: ProjectTarget
    existed_before: bool = False
    hidden_dir: Path | None = None
    created_parents: list[Path] = Field(default_factory=list)
    archive: DownloadedArchive | None = None
    installed_version: str | None = None
    package_name: str | None = None
    requirements: RequirementResult = Field(default_factory=RequirementResult)
    completed: list[str] = Field(default_factory=list)
    success: bool = False


# ---------------------------------------------------------------------------
# InstallPipeline
# ---------------------------------------------------------------------------


class InstallPipeline:
    """Creates a new project from a versioned framework archive.

    Usage::

        target = ProjectTarget.from_argument("blog", config.working_dir, "3.4")
        state = InstallPipeline(config, target).run()
    """

    application = "Symfony"
    command_name = "new"

    def __init__(
        self,
        config: Config,
        target: ProjectTarget,
        *,
        http: HttpClient | None = None,
        reporter: ResultReporter | None = None,
    ) -> None:
        self.config = config
        self.target = target
        self.http = http or HttpClient(config.http)
        self.reporter = reporter or ResultReporter()
        self.state = InstallState(target=target)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def steps(self) -> list[Step]:
        return [
            ("check_project_name", self.check_project_name),
            ("check_permissions", self.check_permissions),
            ("resolve_version", self.resolve_version),
            ("download", self.download),
            ("extract", self.extract),
            ("remove_framework_files", self.remove_framework_files),
            ("dump_readme", self.dump_readme),
            ("update_parameters", self.update_parameters),
            ("update_composer", self.update_composer),
            ("create_gitignore", self.create_gitignore),
            ("check_requirements", self.check_requirements),
            ("report", self.report),
        ]

    def run(self) -> InstallState:
        """Execute every step in order.

        Returns:
            The final ``InstallState`` with ``success`` set.

        Raises:
            InstallerError: The first step that failed.
            AbortError: The user interrupted the run.
        """
        self.state.existed_before = self.target.directory.exists()
        succeeded = False
        try:
            for name, step in self.steps():
                logger.debug("Step %s", name)
                step()
                self.state.completed.append(name)
            succeeded = True
        finally:
            self.cleanup()
            if not succeeded:
                self.rollback()
        self.state.success = True
        return self.state

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def check_project_name(self) -> None:
        directory = self.target.directory
        if directory.is_dir() and not is_empty_directory(directory):
            raise ProjectExists(
                f"There is already a '{self.target.name}' project in this directory ({directory}).\n"
                "Change your project name or create it in another directory."
            )
        if directory.exists() and not directory.is_dir():
            raise ProjectExists(
                f"'{directory}' already exists and is not a directory.\n"
                "Change your project name or create it in another directory."
            )

    def check_permissions(self) -> None:
        parent = _nearest_existing(self.target.directory.parent)
        if not _is_writable_dir(parent):
            raise InsufficientPermissions(
                f"Installer does not have enough permissions to write to the \"{parent}\" directory."
            )

    def resolve_version(self) -> None:
        spec = VersionSpecifier.parse(self.target.version)
        resolver = VersionResolver(
            fetch_manifest(self.config, self.http),
            self.config.policy,
            command_hint=f"symfony {self.command_name} {self.target.name}",
            project_dir=str(self.target.directory),
        )
        version = resolver.resolve(spec)
        self.target = self.target.with_version(version)
        self.state.target = self.target
        logger.info("Installing Symfony %s", version)

    def download(self) -> None:
        console.print(f"\n Downloading {self.application}...\n")
        self.state.hidden_dir = create_hidden_directory(self._hidden_parent())
        self.state.archive = self._fetcher().fetch(
            self.archive_url(),
            self.state.hidden_dir,
            application=self.application,
            not_found_message=self.not_found_message(),
        )

    def extract(self) -> None:
        console.print(" Preparing project...\n")
        if self.state.archive is None:
            raise ExtractionFailed(f"There is no downloaded {self.application} archive to extract.")
        extractor = ArchiveExtractor(
            application=self.application,
            retry_command=self.retry_command(),
            working_dir=self.config.working_dir,
        )
        extractor.extract(self.state.archive, self.target.directory)

    def remove_framework_files(self) -> None:
        self._patcher().remove_framework_files()

    def dump_readme(self) -> None:
        self._patcher().dump_readme()

    def update_parameters(self) -> None:
        self._patcher().update_parameters()

    def update_composer(self) -> None:
        self.state.package_name = self._patcher().update_composer_config(self.config.username)

    def create_gitignore(self) -> None:
        self._patcher().create_gitignore(self.target.version)

    def check_requirements(self) -> None:
        self.state.installed_version = self._patcher().installed_version(self.target.version)
        checker = RequirementsChecker(self.target.directory)
        self.state.requirements = checker.check(self.state.installed_version)

    def report(self) -> None:
        self.reporter.report_new(
            self.target.name,
            self.target.directory,
            self.state.installed_version or self.target.version,
            self.state.requirements,
        )

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def cleanup(self) -> None:
        """Remove the hidden download directory."""
        if self.state.hidden_dir is not None:
            logger.debug("Removing %s", self.state.hidden_dir)
            remove_path(self.state.hidden_dir)
            self.state.hidden_dir = None

    def rollback(self) -> None:
        """Undo the changes a failed run made to the project directory and its new parents."""
        if "check_project_name" not in self.state.completed:
            return
        directory = self.target.directory
        if not self.state.existed_before:
            remove_path(directory)
        elif directory.is_dir():
            for child in directory.iterdir():
                remove_path(child)
        for parent in self.state.created_parents:
            try:
                parent.rmdir()
            except OSError as exc:
                logger.debug("Keeping %s: %s", parent, exc)
                break
        logger.debug("Rolled back %s", directory)

    # ------------------------------------------------------------------
    # Messages and URLs
    # ------------------------------------------------------------------

    def archive_url(self) -> str:
        return self.config.remotes.download_url.format(version=self.target.version)

    def retry_command(self) -> str:
        version = "" if self.target.version == "latest" else self.target.version
        return f"symfony {self.command_name} {self.target.name} {version}".rstrip()

    def not_found_message(self) -> str | None:
        return (
            f"The selected version ({self.target.version}) cannot be installed because it does not exist.\n"
            "Execute the following command to install the latest stable Symfony release:\n"
            f"symfony new {self.target.name}"
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _hidden_parent(self) -> Path:
        parent = self.target.directory.parent
        # Deepest first, so rollback can remove them in order.
        missing = parent
        while not missing.exists() and missing != missing.parent:
            self.state.created_parents.append(missing)
            missing = missing.parent
        parent.mkdir(parents=True, exist_ok=True)
        return parent

    def _fetcher(self) -> ArchiveFetcher:
        return ArchiveFetcher(
            self.http,
            formats=self.config.remotes.archive_formats,
            progress_threshold=self.config.progress_threshold,
            file_prefix="symfony",
        )

    def _patcher(self) -> ProjectPatcher:
        return ProjectPatcher(
            self.target.directory,
            self.target.name,
            verbose=self.config.is_verbose,
        )


class DemoPipeline(InstallPipeline):
    """Installs the demo application; no version resolution or Composer rename."""

    application = "Symfony Demo Application"
    command_name = "demo"

    def steps(self) -> list[Step]:
        return [
            ("check_project_name", self.check_project_name),
            ("check_permissions", self.check_permissions),
            ("download", self.download),
            ("extract", self.extract),
            ("update_parameters", self.update_parameters),
            ("create_gitignore", self.create_gitignore),
            ("check_requirements", self.check_requirements),
            ("report", self.report),
        ]

    def archive_url(self) -> str:
        return self.config.remotes.demo_url

    def retry_command(self) -> str:
        return "symfony demo"

    def not_found_message(self) -> str | None:
        return None

    def create_gitignore(self) -> None:
        self._patcher().create_gitignore(self._locked_version() or "2")

    def check_requirements(self) -> None:
        self.state.installed_version = self._locked_version() or ""
        checker = RequirementsChecker(self.target.directory)
        self.state.requirements = checker.check(self.state.installed_version)

    def report(self) -> None:
        self.reporter.report_demo(
            self.target.name,
            self.target.directory,
            self.state.installed_version or "",
            self.state.requirements,
        )

    def _locked_version(self) -> str | None:
        version = self._patcher().installed_version("")
        return version or None

    @staticmethod
    def next_directory(working_dir: Path, base: str = "symfony_demo") -> Path:
        """Return ``symfony_demo``, or ``symfony_demo_2``, ``_3``... when taken."""
        candidate = working_dir / base
        index = 1
        while candidate.exists():
            index += 1
            candidate = working_dir / f"{base}_{index}"
        return candidate


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _nearest_existing(path: Path) -> Path:
    while not path.exists() and path != path.parent:
        path = path.parent
    return path


def _is_writable_dir(path: Path) -> bool:
    return path.is_dir() and os.access(path, os.W_OK)

