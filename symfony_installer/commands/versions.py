"""``symfony versions [version]`` and ``symfony available-versions``."""

from __future__ import annotations

import re
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from symfony_installer.config import Config
from symfony_installer.http_client import HttpClient
from symfony_installer.utils import console as default_console
from symfony_installer.utils import print_error
from symfony_installer.versions import VersionManifest, fetch_manifest, fetch_roadmap

VERSIONS_PER_LINE = 8

_BRANCH_PREFIX = re.compile(r"^(\d+)\.(\d+)")
_FULL_VERSION = re.compile(r"^\d+\.\d+\.\d+$")


# ---------------------------------------------------------------------------
# versions
# ---------------------------------------------------------------------------


def run_versions(
    config: Config,
    version: str | None = None,
    *,
    http: HttpClient | None = None,
    console: Console | None = None,
) -> int:
    """Show the alias table, or what is known about a single *version*."""
    http = http or HttpClient(config.http)
    out = console or default_console
    manifest = fetch_manifest(config, http)

    if not version:
        out.print(_alias_table(manifest, headers=False))
        return 0

    version = version.strip(".")
    out.print(f"Checking information about version [green]{escape(version)}[/green]\n")

    match = _BRANCH_PREFIX.match(version)
    branch = f"{match.group(1)}.{match.group(2)}" if match else version

    roadmap = fetch_roadmap(config, http, branch)
    if roadmap is not None and roadmap.get("error_message"):
        print_error(str(roadmap["error_message"]))
        return 1
    if roadmap is not None and not ("is_latest" in roadmap and "is_lts" in roadmap):
        roadmap = None

    if match:
        latest_patch = manifest.latest_patch(branch)
        if latest_patch:
            if roadmap:
                out.print(f"Released in: [green]{escape(str(roadmap.get('release_date')))}[/green].")
            out.print(f"The latest version for the {branch} branch is [green]{latest_patch}[/green]")
            if roadmap:
                out.print(f"Is in the latest branch: [green]{_bool(roadmap['is_latest'])}[/green].")
                out.print(f"Is long-term supported: [green]{_bool(roadmap['is_lts'])}[/green].")
        elif roadmap:
            release_date = escape(str(roadmap.get("release_date")))
            if roadmap.get("is_eomed"):
                out.print(f"Released in: [green]{release_date}[/green].")
            else:
                out.print(
                    "This version is not yet supported, though its release date is "
                    f"estimated in {release_date}."
                )
            out.print(
                "This version is not referenced in the active ones, you should check for "
                "[green]lts[/green], [green]latest[/green] or [green]dev[/green] version."
            )
        else:
            out.print("This version is not supported or does not exist.")

    if _FULL_VERSION.match(version):
        if version in manifest.non_installable:
            installable = "[red]false[/red]"
        elif version in manifest.installable:
            installable = "[green]true[/green]"
        else:
            installable = "unknown"
        out.print(f"Is considered as installable: {installable}")

    return 0


# ---------------------------------------------------------------------------
# available-versions
# ---------------------------------------------------------------------------


def run_available_versions(
    config: Config,
    *,
    http: HttpClient | None = None,
    console: Console | None = None,
) -> int:
    """Show the alias table and every installable version grouped by branch."""
    http = http or HttpClient(config.http)
    out = console or default_console
    manifest = fetch_manifest(config, http)

    out.print("[yellow]Available tags version[/yellow]")
    out.print(_alias_table(manifest, headers=True))

    out.print("[yellow]Available versions by branch[/yellow]")
    table = Table("Branches", "Available versions", show_lines=True)
    for branch, versions in manifest.installable_by_branch().items():
        styled = list(versions)
        styled[-1] = f"[green]{styled[-1]}[/green]"
        lines = [
            ", ".join(styled[i:i + VERSIONS_PER_LINE])
            for i in range(0, len(styled), VERSIONS_PER_LINE)
        ]
        table.add_row(f"[green]{branch}[/green]", ",\n".join(lines))
    out.print(table)
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _alias_table(manifest: VersionManifest, *, headers: bool) -> Table:
    table = Table(show_header=headers)
    table.add_column("Type")
    table.add_column("Version")
    table.add_row("[green]Long-term support (lts)[/green]", manifest.lts or "-")
    table.add_row("[green]Latest (latest)[/green]", manifest.latest or "-")
    table.add_row("[green]Development (dev)[/green]", manifest.dev or "-")
    return table


def _bool(value: Any) -> str:
    return "true" if value else "false"
