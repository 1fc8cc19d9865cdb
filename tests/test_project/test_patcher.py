"""Unit tests for ProjectPatcher (symfony_installer.project.patcher)."""

from __future__ import annotations

import json
import os
import re
from datetime import datetime
from pathlib import Path

import pytest

from symfony_installer.project.patcher import SECRET_PLACEHOLDER, ProjectPatcher

needs_permissions = pytest.mark.skipif(
    hasattr(os, "geteuid") and os.geteuid() == 0,
    reason="root ignores file permissions",
)


@pytest.fixture
def project(tmp_path: Path, archives) -> Path:
    root = tmp_path / "MyBlog"
    for name, content in archives.files().items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def patcher(project: Path) -> ProjectPatcher:
    return ProjectPatcher(project, project.name)


# ---------------------------------------------------------------------------
# Framework files / README / .gitignore
# ---------------------------------------------------------------------------


class TestCosmeticSteps:
    @pytest.mark.unit
    def test_remove_framework_files(self, patcher, project):
        removed = patcher.remove_framework_files()
        assert {p.name for p in removed} == {"LICENSE", "UPGRADE-2.8.md", "CHANGELOG-2.8.md"}
        assert not (project / "LICENSE").exists()
        assert (project / "composer.json").exists()

    @pytest.mark.unit
    def test_readme_is_replaced(self, patcher, project):
        patcher.dump_readme(datetime(2026, 10, 18, 15, 5))
        assert (project / "README.md").read_text(encoding="utf-8") == (
            "MyBlog\n"
            "======\n"
            "\n"
            "A Symfony project created on October 18, 2026, 3:05 pm.\n"
        )

    @pytest.mark.unit
    def test_readme_morning_time(self, patcher, project):
        patcher.dump_readme(datetime(2026, 1, 2, 0, 30))
        assert "January 2, 2026, 12:30 am." in (project / "README.md").read_text(encoding="utf-8")

    @pytest.mark.unit
    def test_gitignore_for_2x(self, patcher, project):
        patcher.create_gitignore("2.8.52")
        entries = (project / ".gitignore").read_text(encoding="utf-8").splitlines()
        assert "/app/cache/*" in entries
        assert "/vendor/" in entries
        assert "/var/" not in entries

    @pytest.mark.unit
    def test_gitignore_for_3x(self, patcher, project):
        patcher.create_gitignore("3.4.1")
        text = (project / ".gitignore").read_text(encoding="utf-8")
        entries = text.splitlines()
        assert "/var/" in entries
        assert "!var/sessions/.gitkeep" in entries
        assert "/app/cache/*" not in entries
        assert "" not in entries
        assert text.endswith("\n")

    @pytest.mark.unit
    def test_write_failure_is_ignored(self, tmp_path):
        patcher = ProjectPatcher(tmp_path / "missing", "missing")
        assert patcher.create_gitignore("3.4.1") is None
        assert patcher.dump_readme() is None


# ---------------------------------------------------------------------------
# Secret
# ---------------------------------------------------------------------------


class TestUpdateParameters:
    @pytest.mark.unit
    def test_placeholder_is_replaced(self, patcher, project):
        updated = patcher.update_parameters()
        text = (project / "app/config/parameters.yml").read_text(encoding="utf-8")
        assert updated == [project / "app/config/parameters.yml"]
        assert SECRET_PLACEHOLDER not in text
        assert re.search(r"secret: [0-9a-f]{40}\n", text)

    @pytest.mark.unit
    def test_dotenv_is_updated_too(self, patcher, project):
        (project / ".env").write_text(f"APP_SECRET={SECRET_PLACEHOLDER}\n", encoding="utf-8")
        patcher.update_parameters()
        assert SECRET_PLACEHOLDER not in (project / ".env").read_text(encoding="utf-8")

    @pytest.mark.unit
    def test_missing_file_is_skipped(self, patcher, project):
        (project / "app/config/parameters.yml").unlink()
        assert patcher.update_parameters() == []

    @pytest.mark.unit
    @needs_permissions
    def test_read_only_file_warns_in_verbose_mode(self, project, capsys):
        parameters = project / "app/config/parameters.yml"
        parameters.chmod(0o444)
        try:
            updated = ProjectPatcher(project, project.name, verbose=True).update_parameters()
        finally:
            parameters.chmod(0o644)
        assert updated == []
        assert "cannot be updated" in capsys.readouterr().out
        assert SECRET_PLACEHOLDER in parameters.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# composer.json
# ---------------------------------------------------------------------------


class TestUpdateComposerConfig:
    @pytest.mark.unit
    def test_rewrites_metadata(self, patcher, project):
        name = patcher.update_composer_config("JDoe")
        config = json.loads((project / "composer.json").read_text(encoding="utf-8"))

        assert name == "jdoe/my-blog"
        assert config["name"] == "jdoe/my-blog"
        assert config["license"] == "proprietary"
        assert "description" not in config
        assert "branch-alias" not in config["extra"]
        assert config["config"] == {"bin-dir": "bin"}

    @pytest.mark.unit
    def test_falls_back_to_os_user(self, patcher, monkeypatch):
        monkeypatch.setattr("symfony_installer.project.patcher.lookup_os_user", lambda: "osuser")
        assert patcher.update_composer_config(None) == "osuser/my-blog"

    @pytest.mark.unit
    def test_falls_back_to_project_name(self, patcher, monkeypatch):
        monkeypatch.setattr("symfony_installer.project.patcher.lookup_os_user", lambda: None)
        assert patcher.update_composer_config(None) == "my-blog/my-blog"

    @pytest.mark.unit
    def test_extra_is_not_created(self, patcher, project):
        data = json.loads((project / "composer.json").read_text(encoding="utf-8"))
        del data["extra"]
        (project / "composer.json").write_text(json.dumps(data), encoding="utf-8")

        patcher.update_composer_config("jdoe")
        assert "extra" not in json.loads((project / "composer.json").read_text(encoding="utf-8"))

    @pytest.mark.unit
    def test_missing_composer_json(self, patcher, project):
        (project / "composer.json").unlink()
        assert patcher.update_composer_config("jdoe") is None

    @pytest.mark.unit
    def test_installed_version_strips_v(self, patcher):
        assert patcher.installed_version("2.8") == "2.8.52"

    @pytest.mark.unit
    def test_installed_version_fallback(self, patcher, project):
        (project / "composer.lock").unlink()
        assert patcher.installed_version("3.4.1") == "3.4.1"
