"""``symfony about``."""

from __future__ import annotations

from rich.console import Console

from symfony_installer import __version__
from symfony_installer.utils import console as default_console


def run_about(console: Console | None = None) -> int:
    out = console or default_console
    out.print(f"\n[green]Symfony Installer[/green] [yellow]{__version__}[/yellow]")
    out.print("=====================")
    out.print(
        " The official Symfony installer to start new projects based on the "
        "Symfony full-stack framework.\n"
    )
    out.print("Available commands")
    out.print("------------------")
    out.print("   [green]new <dir-name>[/green]  Creates a new Symfony project in the given directory.")
    out.print("                   Example: [yellow]$ symfony new blog/[/yellow]\n")
    out.print("   [green]demo[/green]            Creates a demo Symfony project.")
    out.print("                   Example: [yellow]$ symfony demo[/yellow]\n")
    out.print("   [green]versions[/green]        Shows the long-term support, latest and development versions.\n")
    out.print("   [green]self-update[/green]     Updates the installer to the latest version.\n")
    return 0
