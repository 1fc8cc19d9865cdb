"""``symfony demo [directory]``."""

from __future__ import annotations

from symfony_installer.config import Config
from symfony_installer.http_client import HttpClient
from symfony_installer.pipeline import DemoPipeline, ProjectTarget


def run_demo(
    config: Config,
    directory: str | None = None,
    *,
    http: HttpClient | None = None,
) -> int:
    """Install the demo application.

    Without *directory* the first free ``symfony_demo``, ``symfony_demo_2``...
    in the working directory is used.
    """
    if directory:
        target = ProjectTarget.from_argument(directory, config.working_dir)
    else:
        path = DemoPipeline.next_directory(config.working_dir)
        target = ProjectTarget(directory=path, name=path.name)
    DemoPipeline(config, target, http=http).run()
    return 0
