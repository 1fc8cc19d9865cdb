"""Console reports printed at the end of an installation."""

from symfony_installer.reporter.result import ResultReporter

__all__ = ["ResultReporter"]
