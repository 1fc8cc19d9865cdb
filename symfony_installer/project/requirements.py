"""Check whether this machine can run the freshly installed project.

A project may describe its requirements in ``app/requirements.yml``
(2.x layout) or ``var/requirements.yml`` (3.x layout)::

    requirements:
      - check: php_version
        min: "5.5.9"
        test_message: PHP version must be at least 5.5.9
        help_text: Install PHP 5.5.9 or newer.
      - check: php_extension
        name: ctype
        test_message: ctype extension must be available
        help_text: Install and enable the ctype extension.
      - check: writable_directory
        path: var/cache
        test_message: var/cache/ directory must be writable
        help_text: Change the permissions of "var/cache/".

Each item names one of a fixed set of checks. Items marked
``optional: true`` are recommendations and are not evaluated. The PHP
checks run the ``php`` binary found on ``PATH``.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import textwrap
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

REQUIREMENTS_FILES = ("app/requirements.yml", "var/requirements.yml")

PHP_TIMEOUT = 10

# Width of the requirement block, including the three-character indent.
LINE_SIZE = 70


class RequirementResult(BaseModel):
    """Outcome of the requirements check.

    ``errors`` holds one formatted block per unmet requirement; an empty list
    means the installation is healthy.
    """

    errors: list[str] = Field(default_factory=list)
    source: Path | None = None

    @property
    def ok(self) -> bool:
        return not self.errors


def format_requirement_error(test_message: str, help_text: str, line_size: int = LINE_SIZE) -> str:
    """Format an unmet requirement the way the framework's ``check.php`` does.

    The test message wraps at ``line_size - 3`` with a three-space indent;
    the help text wraps at ``line_size - 5`` behind a ``   > `` marker.
    """
    message = "\n   ".join(_wordwrap(test_message, line_size - 3)) + "\n"
    message += "   > " + "\n   > ".join(_wordwrap(help_text, line_size - 5)) + "\n"
    return message


def _wordwrap(text: str, width: int) -> list[str]:
    """Wrap on spaces only and never split a word, keeping explicit newlines."""
    lines: list[str] = []
    for paragraph in text.split("\n"):
        wrapped = textwrap.wrap(
            paragraph,
            width,
            break_long_words=False,
            break_on_hyphens=False,
        )
        lines.extend(wrapped or [""])
    return lines


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

Check = Callable[["RequirementsChecker", Mapping[str, Any]], bool]


def _version_tuple(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in re.findall(r"\d+", version.split("-", 1)[0]))


def _check_php_version(checker: "RequirementsChecker", item: Mapping[str, Any]) -> bool:
    installed = checker.php_eval("echo PHP_VERSION;")
    if not installed:
        return False
    return _version_tuple(installed) >= _version_tuple(str(item.get("min", "0")))


def _check_php_extension(checker: "RequirementsChecker", item: Mapping[str, Any]) -> bool:
    loaded = checker.php_eval("echo extension_loaded($argv[1]) ? '1' : '0';", str(item["name"]))
    return loaded == "1"


def _check_php_ini(checker: "RequirementsChecker", item: Mapping[str, Any]) -> bool:
    value = checker.php_eval("echo ini_get($argv[1]);", str(item["setting"]))
    if value is None:
        return False
    if "expected" in item:
        return value == str(item["expected"])
    return value not in ("", "0", "Off", "off")


def _check_executable(checker: "RequirementsChecker", item: Mapping[str, Any]) -> bool:
    return shutil.which(str(item["name"])) is not None


def _check_writable_directory(checker: "RequirementsChecker", item: Mapping[str, Any]) -> bool:
    path = checker.project_dir / str(item["path"])
    return path.is_dir() and os.access(path, os.W_OK)


def _check_file_exists(checker: "RequirementsChecker", item: Mapping[str, Any]) -> bool:
    return (checker.project_dir / str(item["path"])).exists()


def _check_env_var(checker: "RequirementsChecker", item: Mapping[str, Any]) -> bool:
    return bool(checker.environ.get(str(item["name"])))


CHECKS: dict[str, Check] = {
    "php_version": _check_php_version,
    "php_extension": _check_php_extension,
    "php_ini": _check_php_ini,
    "executable": _check_executable,
    "writable_directory": _check_writable_directory,
    "file_exists": _check_file_exists,
    "env_var": _check_env_var,
}


# ---------------------------------------------------------------------------
# RequirementsChecker
# ---------------------------------------------------------------------------


class RequirementsChecker:
    """Evaluates a project's requirements description.

    Attributes:
        project_dir: Root of the installed project.
        php_binary: Name or path of the PHP interpreter.
        environ: Environment used by ``env_var`` checks.
    """

    def __init__(
        self,
        project_dir: Path,
        *,
        php_binary: str = "php",
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.project_dir = Path(project_dir)
        self.php_binary = php_binary
        self.environ = os.environ if environ is None else environ
        self._php_cache: dict[tuple[str, ...], str | None] = {}

    def find_requirements_file(self, version: str) -> Path | None:
        """Return the requirements description for *version*, if the project ships one.

        The file matching the major version's layout is tried first.
        """
        candidates = list(REQUIREMENTS_FILES)
        if version.split(".", 1)[0] not in ("", "0", "1", "2"):
            candidates.reverse()
        for relative in candidates:
            path = self.project_dir / relative
            if path.is_file():
                return path
        return None

    def check(self, version: str) -> RequirementResult:
        """Evaluate every mandatory requirement and collect the unmet ones.

        A description that cannot be read or has the wrong shape is reported
        as an unmet requirement instead of failing the install.
        """
        source = self.find_requirements_file(version)
        if source is None:
            logger.debug("No requirements description in %s", self.project_dir)
            return RequirementResult()

        try:
            document = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            return RequirementResult(
                errors=[_unreadable(source, str(exc))],
                source=source,
            )

        items = document.get("requirements") if isinstance(document, dict) else None
        if items is None and isinstance(document, dict):
            items = []
        if not isinstance(items, list):
            return RequirementResult(
                errors=[_unreadable(source, 'Expected a "requirements" list.')],
                source=source,
            )

        errors: list[str] = []
        for position, item in enumerate(items, start=1):
            if not isinstance(item, dict):
                errors.append(_unreadable(source, f"Requirement #{position} is not a mapping."))
                continue
            if item.get("optional"):
                continue
            if not self._is_fulfilled(item):
                errors.append(format_requirement_error(
                    str(item.get("test_message", "")),
                    str(item.get("help_text", "")),
                ))
        logger.info("%d unmet requirement(s) in %s", len(errors), source)
        return RequirementResult(errors=errors, source=source)

    def php_eval(self, code: str, *args: str) -> str | None:
        """Run ``php -r <code> -- <args>`` and return its trimmed output, or ``None``.

        Values taken from the requirements description are passed in *args*
        and read as ``$argv[1]``... so they never become PHP source.
        """
        key = (code, *args)
        if key in self._php_cache:
            return self._php_cache[key]

        output: str | None = None
        if shutil.which(self.php_binary):
            try:
                completed = subprocess.run(
                    [self.php_binary, "-r", code, "--", *args],
                    capture_output=True,
                    text=True,
                    timeout=PHP_TIMEOUT,
                    check=False,
                )
                if completed.returncode == 0:
                    output = completed.stdout.strip()
            except (OSError, subprocess.TimeoutExpired) as exc:
                logger.debug("php -r %r failed: %s", code, exc)
        self._php_cache[key] = output
        return output

    def _is_fulfilled(self, item: Mapping[str, Any]) -> bool:
        check = CHECKS.get(str(item.get("check")))
        if check is None:
            logger.debug("Unknown requirement check %r", item.get("check"))
            return False
        try:
            return check(self, item)
        except (KeyError, TypeError, ValueError, OSError) as exc:
            logger.debug("Requirement %r cannot be evaluated: %r", item.get("check"), exc)
            return False


def _unreadable(source: Path, reason: str) -> str:
    return format_requirement_error(
        f"The requirements description {source} cannot be read.",
        reason,
    )
