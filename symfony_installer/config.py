"""Symfony Installer configuration.

Centralised, typed configuration for every command. All settings use
Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables. Ambient process state
(working directory, user name, proxy) is captured here once and then threaded
through the pipeline instead of being looked up where it is used.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field


class HttpConfig(BaseModel):
    """Transport settings shared by every remote call."""

    timeout: float = Field(default=60.0, ge=1, description="Per-request timeout in seconds")
    connect_timeout: float = Field(default=10.0, ge=1)
    proxy: str | None = Field(default=None, description="Upstream proxy URL")


class RemoteConfig(BaseModel):
    """Remote endpoints used by the installer."""

    versions_url: str = Field(default="https://symfony.com/versions.json")
    roadmap_url: str = Field(default="https://symfony.com/roadmap.json")
    download_url: str = Field(
        default="https://symfony.com/download?v=Symfony_Standard_Vendors_{version}",
        description="Archive URL template; the archive extension is appended",
    )
    demo_url: str = Field(default="https://symfony.com/download?v=Symfony_Demo")
    installer_version_url: str = Field(default="https://get.symfony.com/symfony.version")
    installer_url: str = Field(default="https://symfony.com/installer")
    archive_formats: list[str] = Field(default=["zip", "tgz"], min_length=1)


class VersionPolicy(BaseModel):
    """Versions this installer refuses to install.

    The rules changed release over release, so they are data rather than
    code. Floors are inclusive: ``{"2.3": "2.3.21"}`` allows 2.3.21 and later.
    """

    unmaintained_branches: list[str] = Field(default=["2.0", "2.1", "2.2", "2.4"])
    minimum_patch: dict[str, str] = Field(default={"2.3": "2.3.21", "2.5": "2.5.6"})


class Config(BaseModel):
    """Global installer configuration.

    Instances are created once by the CLI entry point and passed to the
    command being run.
    """

    working_dir: Path = Field(default_factory=Path.cwd)
    username: str | None = Field(default=None, description="Owner used in the Composer package name")
    verbosity: int = Field(default=0, ge=0)
    progress_threshold: int = Field(
        default=1024 * 1024, ge=0, description="Downloads smaller than this show no progress bar"
    )
    http: HttpConfig = Field(default_factory=HttpConfig)
    remotes: RemoteConfig = Field(default_factory=RemoteConfig)
    policy: VersionPolicy = Field(default_factory=VersionPolicy)

    @property
    def is_verbose(self) -> bool:
        return self.verbosity > 0

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file.

        Returns:
            The path where the file was written.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            SYMFONY_INSTALLER_CONFIG (JSON file used as the base config),
            SYMFONY_INSTALLER_TIMEOUT, http_proxy / HTTP_PROXY, USERNAME.

        ``http_proxy`` wins over ``HTTP_PROXY`` when both are set.
        """
        env = os.environ if environ is None else environ

        config_file = env.get("SYMFONY_INSTALLER_CONFIG")
        config = cls.load(Path(config_file)) if config_file else cls()

        if env.get("SYMFONY_INSTALLER_TIMEOUT"):
            config.http.timeout = float(env["SYMFONY_INSTALLER_TIMEOUT"])

        proxy = env.get("http_proxy") or env.get("HTTP_PROXY")
        if proxy:
            config.http.proxy = proxy

        if env.get("USERNAME"):
            config.username = env["USERNAME"]

        return config
