"""Shared pytest fixtures for the Symfony Installer test suite.

Provides reusable fixtures for:
- A ``Config`` rooted in a temporary working directory
- A fake download server served through ``httpx.MockTransport``
- Project archives (ZIP and TGZ) shaped like the framework releases
- A sample version manifest
"""

from __future__ import annotations

import io
import json
import tarfile
import zipfile
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import httpx
import pytest

from symfony_installer.config import Config
from symfony_installer.http_client import HttpClient


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config whose working directory is a fresh temp dir."""
    return Config(working_dir=tmp_path, username="jdoe")


# ---------------------------------------------------------------------------
# Fake HTTP server
# ---------------------------------------------------------------------------


class FakeServer:
    """Serves canned responses keyed by full URL and records every request."""

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, bytes, dict[str, str]]] = {}
        self.requests: list[tuple[str, str]] = []
        self.on_get: dict[str, Any] = {}

    def add(
        self,
        url: str,
        body: bytes | str | dict | list = b"",
        *,
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.routes[url] = (status, body, headers or {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append((request.method, url))
        if request.method == "GET" and url in self.on_get:
            self.on_get[url]()
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, content=b"Not Found")
        status, body, headers = route
        if request.method == "HEAD":
            return httpx.Response(status, headers={"content-length": str(len(body)), **headers})
        return httpx.Response(status, content=body, headers=headers)

    def client(self) -> HttpClient:
        return HttpClient(transport=httpx.MockTransport(self.handler))

    def gets(self) -> list[str]:
        return [url for method, url in self.requests if method == "GET"]


@pytest.fixture
def server() -> FakeServer:
    """An empty fake server; tests register the URLs they need."""
    return FakeServer()


# ---------------------------------------------------------------------------
# Version manifest
# ---------------------------------------------------------------------------


@pytest.fixture
def manifest_data() -> dict[str, Any]:
    return {
        "lts": "2.8.52",
        "latest": "3.4.1",
        "dev": "4.0.0-BETA1",
        "2.3": "2.3.42",
        "2.7": "2.7.12",
        "2.8": "2.8.52",
        "3.4": "3.4.1",
        "installable": [
            "2.3.21", "2.3.42",
            "2.7.0", "2.7.12",
            "2.8.0", "2.8.51", "2.8.52",
            "3.4.0", "3.4.1",
        ],
        "non_installable": ["2.8.1", "4.0.0-RC1"],
    }


# ---------------------------------------------------------------------------
# Project archives
# ---------------------------------------------------------------------------


COMPOSER_JSON: dict[str, Any] = {
    "name": "symfony/framework-standard-edition",
    "license": "MIT",
    "type": "project",
    "description": "The \"Symfony Standard Edition\" distribution",
    "autoload": {"psr-4": {"": "src/"}},
    "require": {"php": ">=5.3.9", "symfony/symfony": "2.8.*"},
    "config": {"platform": {"php": "5.3.9"}, "bin-dir": "bin"},
    "extra": {
        "symfony-app-dir": "app",
        "branch-alias": {"dev-master": "2.8-dev"},
    },
}

COMPOSER_LOCK: dict[str, Any] = {
    "hash": "0" * 32,
    "content-hash": "1" * 32,
    "packages": [
        {"name": "doctrine/orm", "version": "v2.5.14"},
        {"name": "symfony/symfony", "version": "v2.8.52"},
    ],
}

PARAMETERS_YML = "parameters:\n    secret: ThisTokenIsNotSoSecretChangeIt\n"


def project_files(extra: dict[str, str] | None = None) -> dict[str, str]:
    """Files of a minimal framework release, relative to the archive root."""
    files = {
        "composer.json": json.dumps(COMPOSER_JSON, indent=4) + "\n",
        "composer.lock": json.dumps(COMPOSER_LOCK, indent=4) + "\n",
        "app/config/parameters.yml": PARAMETERS_YML,
        "app/AppKernel.php": "<?php\n",
        "web/app.php": "<?php\n",
        "LICENSE": "MIT\n",
        "UPGRADE-2.8.md": "upgrade notes\n",
        "CHANGELOG-2.8.md": "changes\n",
        "README.md": "Symfony Standard Edition\n",
    }
    files.update(extra or {})
    return files


def build_zip(files: dict[str, str], root: str | None = "Symfony") -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            arcname = f"{root}/{name}" if root else name
            zf.writestr(arcname, content)
    return buffer.getvalue()


def build_tgz(files: dict[str, str], root: str | None = "Symfony") -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tf:
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{root}/{name}" if root else name)
            info.size = len(data)
            info.mode = 0o644
            tf.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


@pytest.fixture
def zip_archive() -> bytes:
    return build_zip(project_files())


@pytest.fixture
def tgz_archive() -> bytes:
    return build_tgz(project_files())


@pytest.fixture
def archives() -> SimpleNamespace:
    """Archive builders: ``archives.zip(files)``, ``archives.tgz(files)``, ``archives.files()``."""
    return SimpleNamespace(zip=build_zip, tgz=build_tgz, files=project_files)
