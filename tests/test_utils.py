"""Unit tests for shared utilities (symfony_installer.utils)."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import pytest

from symfony_installer.utils import (
    configure_logging,
    create_hidden_directory,
    format_size,
    generate_random_secret,
    is_empty_directory,
    is_writable,
    print_warning,
    remove_path,
)


# ---------------------------------------------------------------------------
# format_size
# ---------------------------------------------------------------------------


class TestFormatSize:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "num_bytes, expected",
        [
            (0, "0.00 B"),
            (512, "512.00 B"),
            (1536, "1.50 KB"),
            (5 * 1024 * 1024, "5.00 MB"),
            (-10, "0.00 B"),
        ],
    )
    def test_values(self, num_bytes, expected):
        assert format_size(num_bytes) == expected


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


class TestFileSystemHelpers:
    @pytest.mark.unit
    def test_is_empty_directory(self, tmp_path: Path):
        assert is_empty_directory(tmp_path) is True
        (tmp_path / ".hidden").write_text("x")
        assert is_empty_directory(tmp_path) is False

    @pytest.mark.unit
    def test_missing_directory_is_not_empty_directory(self, tmp_path: Path):
        assert is_empty_directory(tmp_path / "missing") is False

    @pytest.mark.unit
    def test_is_writable(self, tmp_path: Path):
        assert is_writable(tmp_path) is True
        assert is_writable(tmp_path / "missing") is False

    @pytest.mark.unit
    def test_create_hidden_directory(self, tmp_path: Path):
        first = create_hidden_directory(tmp_path)
        second = create_hidden_directory(tmp_path)
        assert first.is_dir() and second.is_dir()
        assert first != second
        assert first.name.startswith(".")
        assert first.parent == tmp_path

    @pytest.mark.unit
    def test_remove_path_file_and_tree(self, tmp_path: Path):
        file_path = tmp_path / "file.txt"
        file_path.write_text("x")
        tree = tmp_path / "tree" / "nested"
        tree.mkdir(parents=True)
        (tree / "a.txt").write_text("a")

        remove_path(file_path)
        remove_path(tmp_path / "tree")

        assert not file_path.exists()
        assert not (tmp_path / "tree").exists()

    @pytest.mark.unit
    def test_remove_path_tolerates_missing_and_none(self, tmp_path: Path):
        remove_path(tmp_path / "missing")
        remove_path(None)


# ---------------------------------------------------------------------------
# Secrets / output / logging
# ---------------------------------------------------------------------------


class TestSecret:
    @pytest.mark.unit
    def test_secret_is_sha1_hex(self):
        secret = generate_random_secret()
        assert re.fullmatch(r"[0-9a-f]{40}", secret)

    @pytest.mark.unit
    def test_secrets_differ(self):
        assert generate_random_secret() != generate_random_secret()


class TestOutput:
    @pytest.mark.unit
    def test_warning_keeps_brackets(self, capsys):
        print_warning("pattern [a-z] is literal")
        out = capsys.readouterr().out
        assert "[WARNING]" in out
        assert "pattern [a-z] is literal" in out


class TestConfigureLogging:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "verbosity, level",
        [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG)],
    )
    def test_levels(self, verbosity, level):
        configure_logging(verbosity)
        assert logging.getLogger().level == level

    @pytest.mark.unit
    def test_httpx_quiet_unless_very_verbose(self):
        configure_logging(1)
        assert logging.getLogger("httpx").level == logging.WARNING
        configure_logging(2)
        assert logging.getLogger("httpx").level == logging.DEBUG
