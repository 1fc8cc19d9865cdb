"""Installation result messages.

Both the ``new`` and ``demo`` commands finish with the same structure: a
success (or partial success) headline, the list of unmet requirements when
there are any, and the next steps the user should take.
"""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape

from symfony_installer.project.requirements import RequirementResult
from symfony_installer.utils import console as default_console

DOCS_URL = "https://symfony.com/doc"
LOCAL_URL = "http://localhost:8000"


def _is_symfony3(version: str) -> bool:
    head = version.split(".", 1)[0]
    return head.isdigit() and int(head) >= 3


class ResultReporter:
    """Prints the final message of an installation.

    Attributes:
        console: Rich console receiving the output.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or default_console

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def report_new(
        self,
        project_name: str,
        project_dir: Path,
        version: str,
        result: RequirementResult,
    ) -> None:
        """Print the outcome of ``symfony new``."""
        if result.ok:
            self.console.print(
                f"\n [green]✔[/green]  Symfony {escape(version)} was "
                "[green]successfully installed[/green]. Now you can:\n"
            )
        else:
            self.console.print(
                f"\n [yellow]✕[/yellow]  Symfony {escape(version)} was "
                "[green]successfully installed[/green] but your system doesn't meet its\n"
                "     technical requirements! Fix the following issues before executing\n"
                "     your Symfony application:\n"
            )
            self._print_requirement_errors(project_name, version, result)

        console_cmd = self._console_command(version)
        self.console.print(
            f"    * Change your current directory to [yellow]{escape(str(project_dir))}[/yellow]\n\n"
            "    * Configure your application in [yellow]app/config/parameters.yml[/yellow] file.\n\n"
            "    * Run your application:\n"
            f"        1. Execute the [yellow]{console_cmd} server:run[/yellow] command.\n"
            f"        2. Browse to the [yellow]{LOCAL_URL}[/yellow] URL.\n\n"
            f"    * Read the documentation at [yellow]{DOCS_URL}[/yellow]\n"
        )

    def report_demo(
        self,
        project_name: str,
        project_dir: Path,
        version: str,
        result: RequirementResult,
    ) -> None:
        """Print the outcome of ``symfony demo``."""
        if result.ok:
            self.console.print(
                "\n [green]✔[/green]  Symfony Demo Application was "
                "[green]successfully installed[/green]. Now you can:\n"
            )
        else:
            self.console.print(
                "\n [yellow]✕[/yellow]  Symfony Demo Application was "
                "[green]successfully installed[/green] but your system doesn't meet the\n"
                "     technical requirements to run Symfony applications! Fix the following "
                "issues before executing it:\n"
            )
            self._print_requirement_errors(project_name, version, result)

        console_cmd = self._console_command(version)
        self.console.print(
            f"    1. Change your current directory to [yellow]{escape(str(project_dir))}[/yellow]\n\n"
            f"    2. Execute the [yellow]{console_cmd} server:run[/yellow] command to run the demo application.\n\n"
            f"    3. Browse to the [yellow]{LOCAL_URL}[/yellow] URL to see the demo application in action.\n"
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _print_requirement_errors(
        self, project_name: str, version: str, result: RequirementResult
    ) -> None:
        for message in result.errors:
            self.console.print(f" * {escape(message)}")

        check_script = "bin/symfony_requirements" if _is_symfony3(version) else "app/check.php"
        self.console.print(
            " After fixing these issues, re-check Symfony requirements executing this command:\n\n"
            f"   [yellow]php {escape(project_name)}/{check_script}[/yellow]\n\n"
            " Then, you can:\n"
        )

    @staticmethod
    def _console_command(version: str) -> str:
        return "php bin/console" if _is_symfony3(version) else "php app/console"
