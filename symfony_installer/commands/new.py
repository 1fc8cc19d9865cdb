"""``symfony new <directory> [version]``."""

from __future__ import annotations

from symfony_installer.config import Config
from symfony_installer.http_client import HttpClient
from symfony_installer.pipeline import InstallPipeline, ProjectTarget


def run_new(
    config: Config,
    directory: str,
    version: str = "latest",
    *,
    http: HttpClient | None = None,
) -> int:
    """Create a new project in *directory* with the requested *version*."""
    target = ProjectTarget.from_argument(directory, config.working_dir, version)
    InstallPipeline(config, target, http=http).run()
    return 0
