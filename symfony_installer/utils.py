"""Shared utility functions for the Symfony Installer.

Provides the Rich consoles and output helpers, logging setup, the download
progress bar, size formatting and a few file-system helpers used across the
pipeline.
"""

from __future__ import annotations

import hashlib
import logging
import os
import secrets
import shutil
import time
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, DownloadColumn, Progress, TaskProgressColumn

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message on stderr."""
    err_console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f" [yellow]\\[WARNING][/yellow] {escape(message)}")


def configure_logging(verbosity: int = 0) -> None:
    """Route stdlib logging through Rich on stderr.

    ``-v`` enables INFO, ``-vv`` and above enable DEBUG traces of HTTP and
    file-system operations.
    """
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, markup=False)],
        force=True,
    )
    # httpx logs every request at INFO; keep that for -vv only.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbosity > 1 else logging.WARNING)


def create_download_progress() -> Progress:
    """Create the Rich progress bar shown while an archive downloads.

    Returns:
        A ``Progress`` instance suitable for use as a context manager.
    """
    return Progress(
        DownloadColumn(binary_units=True),
        BarColumn(bar_width=60),
        TaskProgressColumn(),
        console=console,
        transient=False,
    )


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_size(num_bytes: int) -> str:
    """Format a byte count with binary multiples and two decimals.

    Examples::

        format_size(0)        -> "0.00 B"
        format_size(1536)     -> "1.50 KB"
        format_size(5242880)  -> "5.00 MB"
    """
    size = float(max(num_bytes, 0))
    unit = 0
    while size >= 1024 and unit < len(_SIZE_UNITS) - 1:
        size /= 1024
        unit += 1
    return f"{size:,.2f} {_SIZE_UNITS[unit]}"


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def is_empty_directory(path: Path) -> bool:
    """Return ``True`` if *path* is a directory with no entries, hidden ones included."""
    return path.is_dir() and next(path.iterdir(), None) is None


def is_writable(path: Path) -> bool:
    """Return ``True`` if *path* exists and the current user may write to it."""
    return path.exists() and os.access(path, os.W_OK)


def create_hidden_directory(parent: Path) -> Path:
    """Create a uniquely named hidden directory inside *parent*.

    The name mixes the current time with random hex so concurrent installs in
    the same parent never collide.
    """
    name = f".{int(time.time())}{secrets.token_hex(6)}"
    path = parent / name
    path.mkdir(parents=True)
    return path


def remove_path(path: Path | None) -> None:
    """Remove a file or directory tree if it exists; never raises."""
    if path is None:
        return
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
    except OSError as exc:
        logging.getLogger(__name__).debug("Could not remove %s: %s", path, exc)


def generate_random_secret() -> str:
    """Return a random 40-character hex value for the framework ``secret``."""
    return hashlib.sha1(secrets.token_bytes(23)).hexdigest()
