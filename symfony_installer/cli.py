"""Command-line entry point (``symfony`` / ``python -m symfony_installer``)."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from collections.abc import Sequence

from symfony_installer import __version__
from symfony_installer.commands import (
    run_about,
    run_available_versions,
    run_demo,
    run_new,
    run_self_update,
    run_versions,
)
from symfony_installer.config import Config
from symfony_installer.errors import AbortError, InstallerError
from symfony_installer.utils import configure_logging, err_console, print_error

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_UNEXPECTED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="symfony",
        description="Symfony Installer -- creates new Symfony projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  symfony new blog\n"
            "  symfony new blog 2.8\n"
            "  symfony new blog lts\n"
            "  symfony demo\n"
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Symfony Installer version {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for progress details, -vv for debug traces)",
    )

    sub = parser.add_subparsers(dest="command", metavar="<command>")

    new = sub.add_parser("new", help="Creates a new Symfony project.")
    new.add_argument("directory", help="Directory where the new project will be created")
    new.add_argument(
        "version",
        nargs="?",
        default="latest",
        help="The Symfony version to be installed (latest, lts, 3.4, 3.4.1, 4.0.0-RC1...)",
    )

    demo = sub.add_parser("demo", help="Creates a demo Symfony project.")
    demo.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Directory of the demo project (default: symfony_demo)",
    )

    update = sub.add_parser(
        "self-update",
        aliases=["selfupdate"],
        help="Update the installer to the latest version.",
    )
    update.add_argument(
        "--force",
        action="store_true",
        help="Download the latest build even if the versions match",
    )

    versions = sub.add_parser("versions", help="View information about Symfony versions.")
    versions.add_argument("version", nargs="?", default=None, help="The Symfony version to check")

    sub.add_parser("available-versions", help="Symfony available versions.")
    sub.add_parser("about", help="Symfony Installer help.")

    return parser


def _raise_abort(signum, frame) -> None:
    raise AbortError()


def dispatch(args: argparse.Namespace, config: Config) -> int:
    if args.command == "new":
        return run_new(config, args.directory, args.version)
    if args.command == "demo":
        return run_demo(config, args.directory)
    if args.command in ("self-update", "selfupdate"):
        return run_self_update(config, force=args.force)
    if args.command == "versions":
        return run_versions(config, args.version)
    if args.command == "available-versions":
        return run_available_versions(config)
    return run_about()


def run(argv: Sequence[str] | None = None) -> int:
    """Parse *argv*, run the command and return the exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = Config.from_env()
    except (OSError, ValueError) as exc:
        print_error(f"Invalid installer configuration: {exc}")
        return EXIT_FAILURE
    config.verbosity = args.verbose

    previous = signal.signal(signal.SIGINT, _raise_abort)
    try:
        return dispatch(args, config)
    except AbortError as exc:
        print_error(str(exc))
        return EXIT_FAILURE
    except InstallerError as exc:
        print_error(f"\n{exc}\n")
        return EXIT_FAILURE
    except Exception as exc:
        if config.is_verbose:
            err_console.print_exception()
        print_error(f"Unexpected error: {exc}")
        logger.debug("Unexpected error", exc_info=True)
        return EXIT_UNEXPECTED
    finally:
        signal.signal(signal.SIGINT, previous)


def main() -> None:
    """Console script entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
