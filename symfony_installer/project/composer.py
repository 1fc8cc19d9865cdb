"""Read and rewrite the Composer files of a freshly extracted project.

``composer.lock`` records hashes of ``composer.json``. Editing the manifest
without refreshing them makes Composer report the lock file as out of date,
so every save recomputes them exactly the way Composer's ``Locker`` does:
an md5 over PHP's ``json_encode`` output of a key-sorted subset of the
manifest.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import re
import unicodedata
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Keys Composer feeds into ``content-hash`` (plus ``config.platform``).
CONTENT_HASH_KEYS = (
    "name",
    "version",
    "require",
    "require-dev",
    "conflict",
    "replace",
    "provide",
    "minimum-stability",
    "prefer-stable",
    "repositories",
    "extra",
)

# Letters NFKD cannot decompose into an ASCII base letter.
_TRANSLITERATIONS = str.maketrans({
    "æ": "a", "Æ": "A",
    "œ": "o", "Œ": "O",
    "ø": "o", "Ø": "O",
    "ß": "s",
    "ł": "l", "Ł": "L",
    "đ": "d", "Đ": "D",
    "ð": "d", "Ð": "D",
    "þ": "t", "Þ": "T",
})

_CAMEL_BOUNDARY = re.compile(r"(?:([a-z])([A-Z])|([A-Z])([A-Z][a-z]))")
_INVALID_PACKAGE_CHARS = re.compile(r"[^A-Za-z0-9_./-]+")


# ---------------------------------------------------------------------------
# Package names
# ---------------------------------------------------------------------------


def transliterate(text: str) -> str:
    """Fold accented letters to their ASCII base letter (``"Áéîøū"`` -> ``"Aeiou"``)."""
    decomposed = unicodedata.normalize("NFKD", text.translate(_TRANSLITERATIONS))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def fix_package_name(name: str) -> str:
    """Transform *name* into characters Composer accepts in package names."""
    return _INVALID_PACKAGE_CHARS.sub("", transliterate(name)).lower()


def normalize_project_name(name: str) -> str:
    """Normalize a directory name into the project half of a package name.

    Examples::

        normalize_project_name("FooBar")   -> "foo-bar"
        normalize_project_name("Áéîøū")    -> "aeiou"
        normalize_project_name("foo-bar")  -> "foo-bar"
    """
    return fix_package_name(_CAMEL_BOUNDARY.sub(r"\1\3-\2\4", transliterate(name)))


def lookup_os_user() -> str | None:
    """Return the login name of the current OS account, if it can be found."""
    try:
        import pwd
    except ImportError:  # not available on Windows
        return None
    try:
        return pwd.getpwuid(os.getuid()).pw_name
    except KeyError:
        return None


def create_package_name(project_name: str, owner: str | None) -> str:
    """Build a ``vendor/project`` Composer name.

    The vendor is *owner* when it normalizes to something non-empty;
    otherwise the project name is used on both sides because package names
    must always contain a slash.
    """
    project = normalize_project_name(project_name)
    vendor = fix_package_name(owner) if owner else ""
    if not vendor:
        vendor = project
    return f"{vendor}/{project}"


# ---------------------------------------------------------------------------
# PHP-compatible JSON
# ---------------------------------------------------------------------------


def _php_value(value: Any) -> Any:
    """Reshape decoded JSON the way PHP's ``json_decode(..., true)`` sees it.

    PHP decodes objects into arrays, so ``{}`` comes back out as ``[]`` and
    objects keyed ``"0".."n-1"`` become lists.
    """
    if isinstance(value, dict):
        if list(value.keys()) == [str(i) for i in range(len(value))]:
            return [_php_value(v) for v in value.values()]
        return {k: _php_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_php_value(v) for v in value]
    return value


def php_json_encode(value: Any) -> str:
    """Encode *value* byte-for-byte like PHP's ``json_encode`` with default flags."""
    encoded = json.dumps(_php_value(value), separators=(",", ":"), ensure_ascii=True)
    return encoded.replace("/", "\\/")


def dump_pretty_json(value: Any) -> str:
    """Encode like ``JSON_PRETTY_PRINT | JSON_UNESCAPED_SLASHES`` plus a final newline."""
    return json.dumps(value, indent=4, ensure_ascii=True) + "\n"


def content_hash(composer_json: str) -> str:
    """Return Composer's ``content-hash`` for the given ``composer.json`` text."""
    config = json.loads(composer_json)
    relevant: dict[str, Any] = {key: config[key] for key in CONTENT_HASH_KEYS if key in config}
    composer_config = config.get("config")
    if isinstance(composer_config, dict) and composer_config.get("platform") is not None:
        relevant["config"] = {"platform": composer_config["platform"]}
    ordered = {key: relevant[key] for key in sorted(relevant)}
    return hashlib.md5(php_json_encode(ordered).encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# ComposerManager
# ---------------------------------------------------------------------------


class ComposerManager:
    """Edits ``composer.json`` and keeps ``composer.lock`` in sync.

    Attributes:
        project_dir: Root of the project holding the Composer files.
    """

    def __init__(self, project_dir: Path) -> None:
        self.project_dir = Path(project_dir)

    @property
    def json_path(self) -> Path:
        return self.project_dir / "composer.json"

    @property
    def lock_path(self) -> Path:
        return self.project_dir / "composer.lock"

    def get_project_config(self) -> dict[str, Any]:
        """Return the decoded ``composer.json``, or ``{}`` when it is missing or read-only."""
        if not self.json_path.exists() or not os.access(self.json_path, os.W_OK):
            return {}
        return json.loads(self.json_path.read_text(encoding="utf-8"))

    def initialize_project_config(self) -> None:
        """Drop the ``config.platform.php`` pin so the project follows the local PHP."""
        config = self.get_project_config()
        if not config:
            return
        platform = config.get("config", {}).get("platform", {})
        if "php" in platform:
            del platform["php"]
            if not platform:
                del config["config"]["platform"]
            if not config["config"]:
                del config["config"]
        self.save_project_config(config)

    def update_project_config(self, new_config: dict[str, Any]) -> None:
        """Merge *new_config* recursively; ``None`` values delete keys."""
        merged = _merge_recursive(self.get_project_config(), new_config)
        self.save_project_config(merged)

    def save_project_config(self, config: dict[str, Any]) -> None:
        """Write ``composer.json`` and refresh the lock file hashes."""
        self.json_path.write_text(dump_pretty_json(config), encoding="utf-8")
        logger.debug("Wrote %s", self.json_path)
        self.sync_lock_file()

    def sync_lock_file(self) -> None:
        """Refresh ``hash`` and ``content-hash`` in ``composer.lock``, if present."""
        if not self.lock_path.exists():
            return
        composer_json = self.json_path.read_text(encoding="utf-8")
        lock = json.loads(self.lock_path.read_text(encoding="utf-8"))

        if "hash" in lock:
            lock["hash"] = hashlib.md5(composer_json.encode("utf-8")).hexdigest()
        if "content-hash" in lock:
            lock["content-hash"] = content_hash(composer_json)

        self.lock_path.write_text(dump_pretty_json(lock), encoding="utf-8")
        logger.debug("Synchronized %s", self.lock_path)

    def get_package_version(self, package_name: str) -> str | None:
        """Return the locked version of *package_name*, or ``None``."""
        if not self.lock_path.exists():
            return None
        lock = json.loads(self.lock_path.read_text(encoding="utf-8"))
        for package in lock.get("packages", []):
            if package.get("name") == package_name:
                return package.get("version")
        return None


def _merge_recursive(base: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in changes.items():
        if value is None:
            merged.pop(key, None)
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_recursive(merged[key], value)
        else:
            merged[key] = value
    return merged
