"""Unit tests for version tokens and the manifest model (symfony_installer.versions.models)."""

from __future__ import annotations

import pytest

from symfony_installer.errors import InvalidVersionSyntax
from symfony_installer.versions.models import VersionManifest, VersionSpecifier


# ---------------------------------------------------------------------------
# VersionSpecifier.parse
# ---------------------------------------------------------------------------


class TestParse:
    @pytest.mark.unit
    @pytest.mark.parametrize("alias", ["latest", "lts"])
    def test_aliases(self, alias):
        spec = VersionSpecifier.parse(alias)
        assert spec.is_alias
        assert spec.branch is None
        assert spec.normalized() == alias

    @pytest.mark.unit
    def test_branch(self):
        spec = VersionSpecifier.parse("2.7")
        assert spec.is_branch
        assert spec.branch == "2.7"
        assert spec.patch is None

    @pytest.mark.unit
    def test_full_version(self):
        spec = VersionSpecifier.parse("3.4.1")
        assert (spec.major, spec.minor, spec.patch) == (3, 4, 1)
        assert not spec.is_branch
        assert not spec.is_unstable

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "token, normalized",
        [
            ("4.0.0-rc1", "4.0.0-RC1"),
            ("4.0.0-Beta2", "4.0.0-BETA2"),
            ("4.0.0-BETA", "4.0.0-BETA"),
            ("4.1-DEV", "4.1-dev"),
        ],
    )
    def test_suffix_normalization(self, token, normalized):
        spec = VersionSpecifier.parse(token)
        assert spec.is_unstable
        assert spec.normalized() == normalized

    @pytest.mark.unit
    def test_surrounding_whitespace_is_ignored(self):
        assert VersionSpecifier.parse(" 3.4 ").normalized() == "3.4"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "token",
        ["", "3", "v3.4.1", "3.4.1.2", "3.4.x", "latest-stable", "3.4.1-alpha1", "3.4.1-"],
    )
    def test_invalid_tokens(self, token):
        with pytest.raises(InvalidVersionSyntax) as exc_info:
            VersionSpecifier.parse(token)
        assert "is not valid" in str(exc_info.value)

    @pytest.mark.unit
    def test_specifier_is_frozen(self):
        spec = VersionSpecifier.parse("3.4.1")
        with pytest.raises(Exception):
            spec.patch = 2


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


class TestSortKey:
    @pytest.mark.unit
    def test_patch_ordering(self):
        older = VersionSpecifier.parse("2.3.20").sort_key()
        floor = VersionSpecifier.parse("2.3.21").sort_key()
        assert older < floor

    @pytest.mark.unit
    def test_stability_ordering(self):
        keys = [
            VersionSpecifier.parse(v).sort_key()
            for v in ("4.0.0-dev", "4.0.0-BETA1", "4.0.0-BETA2", "4.0.0-RC1", "4.0.0")
        ]
        assert keys == sorted(keys)

    @pytest.mark.unit
    def test_alias_has_no_ordering(self):
        with pytest.raises(ValueError):
            VersionSpecifier.parse("latest").sort_key()


# ---------------------------------------------------------------------------
# VersionManifest
# ---------------------------------------------------------------------------


class TestVersionManifest:
    @pytest.mark.unit
    def test_branches_are_collected(self, manifest_data):
        manifest = VersionManifest.model_validate(manifest_data)
        assert manifest.branches["2.7"] == "2.7.12"
        assert "installable" not in manifest.branches
        assert "latest" not in manifest.branches

    @pytest.mark.unit
    def test_aliases(self, manifest_data):
        manifest = VersionManifest.model_validate(manifest_data)
        assert manifest.alias("latest") == "3.4.1"
        assert manifest.alias("lts") == "2.8.52"
        assert manifest.alias("dev") == "4.0.0-BETA1"
        assert manifest.alias("nightly") is None

    @pytest.mark.unit
    def test_latest_patch(self, manifest_data):
        manifest = VersionManifest.model_validate(manifest_data)
        assert manifest.latest_patch("3.4") == "3.4.1"
        assert manifest.latest_patch("2.4") is None

    @pytest.mark.unit
    def test_installable_by_branch_keeps_order(self, manifest_data):
        grouped = VersionManifest.model_validate(manifest_data).installable_by_branch()
        assert list(grouped) == ["2.3", "2.7", "2.8", "3.4"]
        assert grouped["2.8"] == ["2.8.0", "2.8.51", "2.8.52"]

    @pytest.mark.unit
    def test_minimal_document(self):
        manifest = VersionManifest.model_validate({"latest": "3.4.1"})
        assert manifest.installable == []
        assert manifest.branches == {}
