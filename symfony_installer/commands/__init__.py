"""Implementations of the ``symfony`` sub-commands.

Each command function takes the global ``Config`` plus its own arguments and
returns the process exit code. Handled failures are raised as
``InstallerError`` and turned into messages by the CLI.
"""

from symfony_installer.commands.about import run_about
from symfony_installer.commands.demo import run_demo
from symfony_installer.commands.new import run_new
from symfony_installer.commands.self_update import SelfUpdater, run_self_update
from symfony_installer.commands.versions import run_available_versions, run_versions

__all__ = [
    "SelfUpdater",
    "run_about",
    "run_available_versions",
    "run_demo",
    "run_new",
    "run_self_update",
    "run_versions",
]
