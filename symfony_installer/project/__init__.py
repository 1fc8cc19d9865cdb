"""Adjustments applied to a freshly extracted project."""

from symfony_installer.project.composer import ComposerManager
from symfony_installer.project.patcher import ProjectPatcher
from symfony_installer.project.requirements import RequirementResult, RequirementsChecker
from symfony_installer.project.templates import TemplateRenderer

__all__ = [
    "ComposerManager",
    "ProjectPatcher",
    "RequirementResult",
    "RequirementsChecker",
    "TemplateRenderer",
]
