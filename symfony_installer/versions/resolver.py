"""Resolve a user-supplied version token to a concrete installable version.

Resolution is a pure function of the token, the remote manifest and the
configured ``VersionPolicy``. The only side effect is a warning printed for
unstable versions.
"""

from __future__ import annotations

import logging

from symfony_installer.config import VersionPolicy
from symfony_installer.errors import UnmaintainedBranch, VersionNotInstallable
from symfony_installer.utils import print_warning
from symfony_installer.versions.models import VersionManifest, VersionSpecifier

logger = logging.getLogger(__name__)


class VersionResolver:
    """Turns a ``VersionSpecifier`` into the version that will be downloaded.

    Attributes:
        manifest: The version manifest fetched for this invocation.
        policy: Branches and patch floors this installer refuses.
        command_hint: Command prefix used in suggestions, e.g. ``"symfony new blog"``.
        project_dir: Directory used in the manual ``composer`` fallback.
    """

    def __init__(
        self,
        manifest: VersionManifest,
        policy: VersionPolicy | None = None,
        *,
        command_hint: str = "symfony new <directory>",
        project_dir: str = "<directory>",
    ) -> None:
        self.manifest = manifest
        self.policy = policy or VersionPolicy()
        self.command_hint = command_hint
        self.project_dir = project_dir

    def resolve(self, token: str | VersionSpecifier) -> str:
        """Return the concrete version for *token*.

        Raises:
            InvalidVersionSyntax: The token does not match the grammar.
            UnmaintainedBranch: The branch is unknown to the manifest or
                listed as unmaintained.
            VersionNotInstallable: The version is below a patch floor or
                not installable according to the manifest.
        """
        spec = token if isinstance(token, VersionSpecifier) else VersionSpecifier.parse(token)

        if spec.is_alias:
            concrete = self.manifest.alias(spec.alias)
            if not concrete:
                raise VersionNotInstallable(
                    f"The version manifest does not define a \"{spec.alias}\" version.\n"
                    "To solve this issue, try executing this command again later."
                )
            logger.debug("Alias %s resolved to %s", spec.alias, concrete)
            spec = VersionSpecifier.parse(concrete)

        elif spec.is_branch:
            concrete = self.manifest.latest_patch(spec.branch)
            if not concrete:
                raise UnmaintainedBranch(
                    f"The selected branch ({spec.branch}) does not exist, or is not maintained.\n"
                    "To solve this issue, install Symfony with the latest stable release:\n\n"
                    f"{self.command_hint} latest"
                )
            logger.debug("Branch %s resolved to %s", spec.branch, concrete)
            spec = VersionSpecifier.parse(concrete)

        version = spec.normalized()
        self._check_policy(spec, version)
        self._check_manifest(spec, version)

        if spec.is_unstable:
            print_warning(
                f"Version {version} is not stable. Don't use it in production applications."
            )
        return version

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def _check_policy(self, spec: VersionSpecifier, version: str) -> None:
        if spec.branch in self.policy.unmaintained_branches:
            raise UnmaintainedBranch(
                f"The selected version ({version}) cannot be installed because it belongs\n"
                "to an unmaintained Symfony branch which is not compatible with this installer.\n"
                "To solve this issue install Symfony manually executing the following command:\n\n"
                f"{self._composer_command(version)}"
            )

        floor = self.policy.minimum_patch.get(spec.branch)
        if floor and spec.sort_key() < VersionSpecifier.parse(floor).sort_key():
            raise VersionNotInstallable(
                f"The selected version ({version}) cannot be installed because this installer\n"
                f"is compatible with Symfony {spec.branch} versions starting from {floor}.\n"
                "To solve this issue install Symfony manually executing the following command:\n\n"
                f"{self._composer_command(version)}"
            )

    def _check_manifest(self, spec: VersionSpecifier, version: str) -> None:
        listed = version in self.manifest.installable
        excluded = version in self.manifest.non_installable
        if excluded or (not listed and not spec.is_unstable):
            raise VersionNotInstallable(
                f"The selected version ({version}) cannot be installed because it is not\n"
                "compatible with this installer or because it hasn't been published as a\n"
                "package yet. To solve this issue install Symfony manually executing\n"
                "the following command:\n\n"
                f"{self._composer_command(version)}"
            )

    def _composer_command(self, version: str) -> str:
        return (
            "composer create-project symfony/framework-standard-edition "
            f"{self.project_dir} {version}"
        )
