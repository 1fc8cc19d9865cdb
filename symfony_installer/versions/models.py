"""Data models for version tokens and the remote version manifest."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from symfony_installer.errors import InvalidVersionSyntax

ALIASES = ("latest", "lts")

VERSION_PATTERN = re.compile(
    r"^(?P<major>\d+)\.(?P<minor>\d+)(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<suffix>dev|beta\d*|rc\d*))?$",
    re.IGNORECASE,
)
BRANCH_PATTERN = re.compile(r"^\d+\.\d+$")

# Stability order used by Composer/PHP ``version_compare``.
_STABILITY_RANK = {"dev": 0, "beta": 1, "rc": 2}
_STABLE_RANK = 3


class VersionSpecifier(BaseModel):
    """A parsed version token as typed by the user.

    Exactly one of ``alias`` or ``major``/``minor`` is set. The unstable
    suffix is stored already normalized for the download server, which is
    case-sensitive: ``beta``/``rc`` are upper-cased, ``dev`` lower-cased.
    """

    model_config = ConfigDict(frozen=True)

    raw: str
    alias: str | None = None
    major: int | None = None
    minor: int | None = None
    patch: int | None = None
    suffix: str | None = None

    @classmethod
    def parse(cls, token: str) -> "VersionSpecifier":
        """Parse *token* or raise ``InvalidVersionSyntax``."""
        raw = token.strip()
        if raw in ALIASES:
            return cls(raw=raw, alias=raw)

        match = VERSION_PATTERN.match(raw)
        if match is None:
            raise InvalidVersionSyntax(
                f"The Symfony version \"{raw}\" is not valid.\n"
                "Use \"latest\", \"lts\", a branch (e.g. 3.4) or a full version "
                "(e.g. 3.4.1, 3.4.0-RC1, 3.4.0-BETA2)."
            )

        patch = match.group("patch")
        return cls(
            raw=raw,
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(patch) if patch is not None else None,
            suffix=_normalize_suffix(match.group("suffix")),
        )

    @property
    def is_alias(self) -> bool:
        return self.alias is not None

    @property
    def is_branch(self) -> bool:
        """``MAJOR.MINOR`` without patch or suffix."""
        return not self.is_alias and self.patch is None and self.suffix is None

    @property
    def is_unstable(self) -> bool:
        return self.suffix is not None

    @property
    def branch(self) -> str | None:
        if self.is_alias:
            return None
        return f"{self.major}.{self.minor}"

    def normalized(self) -> str:
        """Return the token as the download server expects it."""
        if self.is_alias:
            return self.raw
        text = f"{self.major}.{self.minor}"
        if self.patch is not None:
            text += f".{self.patch}"
        if self.suffix is not None:
            text += f"-{self.suffix}"
        return text

    def sort_key(self) -> tuple[int, int, int, int, int]:
        """Ordering key matching PHP ``version_compare`` for these forms."""
        if self.is_alias:
            raise ValueError(f"Alias {self.raw!r} has no ordering")
        rank, number = _STABLE_RANK, 0
        if self.suffix:
            stability = re.match(r"[a-z]+", self.suffix.lower()).group(0)
            rank = _STABILITY_RANK[stability]
            digits = self.suffix[len(stability):]
            number = int(digits) if digits else 0
        return (self.major or 0, self.minor or 0, self.patch or 0, rank, number)


def _normalize_suffix(suffix: str | None) -> str | None:
    if suffix is None:
        return None
    if suffix.lower() == "dev":
        return "dev"
    return suffix.upper()


class VersionManifest(BaseModel):
    """The remote JSON document describing installable versions.

    The wire format mixes aliases, lists and branch entries at the top level::

        {"lts": "2.8.52", "latest": "3.4.1", "dev": "4.0.0-BETA1",
         "installable": [...], "non_installable": [...],
         "2.8": "2.8.52", "3.4": "3.4.1"}

    Branch entries (``"X.Y": "X.Y.Z"``) are gathered into ``branches``.
    """

    latest: str | None = None
    lts: str | None = None
    dev: str | None = None
    installable: list[str] = Field(default_factory=list)
    non_installable: list[str] = Field(default_factory=list)
    branches: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_branches(cls, data: Any) -> Any:
        if isinstance(data, dict) and "branches" not in data:
            data = dict(data)
            data["branches"] = {
                key: value
                for key, value in data.items()
                if BRANCH_PATTERN.match(str(key)) and isinstance(value, str)
            }
        return data

    def alias(self, name: str) -> str | None:
        """Return the concrete version behind ``latest``/``lts``/``dev``."""
        return getattr(self, name, None) if name in ("latest", "lts", "dev") else None

    def latest_patch(self, branch: str) -> str | None:
        return self.branches.get(branch)

    def installable_by_branch(self) -> dict[str, list[str]]:
        """Group installable versions by ``MAJOR.MINOR``, keeping manifest order."""
        grouped: dict[str, list[str]] = {}
        for version in self.installable:
            parts = version.split(".")
            if len(parts) < 2:
                continue
            grouped.setdefault(f"{parts[0]}.{parts[1]}", []).append(version)
        return grouped
