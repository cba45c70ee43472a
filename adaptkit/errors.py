"""adaptkit exception hierarchy.

Every failure the adapt pipeline can raise derives from ``AdaptError`` so the
CLI can report it uniformly. Nothing here is retried: all of these are
structural failures.
"""

from __future__ import annotations


class AdaptError(Exception):
    """Base exception for all adaptkit failures."""


class ConfigError(AdaptError):
    """Raised for invalid configuration or project descriptor data."""


class ResolutionError(AdaptError):
    """Raised when a glob set that must match something matches nothing."""

    def __init__(self, base_dir: str, globs: list[str]) -> None:
        self.base_dir = base_dir
        self.globs = list(globs)
        super().__init__(f"No files in {base_dir} match {', '.join(globs)}")


class TransformError(AdaptError):
    """A content transform failed for one file.

    Carries the offending file and the name of the stage that failed.
    """

    def __init__(self, message: str, *, path: str = "", stage: str = "") -> None:
        self.message = message
        self.path = path
        self.stage = stage
        super().__init__(message)

    def __str__(self) -> str:
        where = self.path or "<content>"
        if self.stage:
            return f"{where}: [{self.stage}] {self.message}"
        return f"{where}: {self.message}"

    def located(self, *, path: str, stage: str) -> TransformError:
        """Fill in path/stage if the raising transform did not know them."""
        if not self.path:
            self.path = path
        if not self.stage:
            self.stage = stage
        return self


class PipelineCompositionError(AdaptError):
    """Raised when transform stages with incompatible content kinds are chained."""


class AdaptIOError(AdaptError):
    """Wraps a filesystem failure with the path involved."""

    def __init__(self, path: str, cause: OSError) -> None:
        self.path = path
        super().__init__(f"I/O error on {path}: {cause}")
        self.__cause__ = cause


class TemplateDataError(AdaptError):
    """Raised when adapter template data is incomplete or invalid."""
