# palette_post/errors.py
from __future__ import annotations

"""
Error taxonomy. Every failure aborts the run; nothing here is retried.
"""

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class PipelineError(Exception):
    """Base class for run-aborting failures."""


class ConfigurationError(PipelineError, ValueError):
    """A setting is missing, malformed, or inconsistent with another one."""


class FrameValidationError(PipelineError, ValueError):
    """Frames of one animation disagree (e.g. different bounds)."""


class InputLoadError(PipelineError):
    """An input image could not be read or decoded."""

    def __init__(self, path: PathLike, cause: Optional[BaseException] = None):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"error loading '{self.path}': {cause}")


class OutputIOError(PipelineError, OSError):
    """Opening or writing a destination failed."""

    def __init__(self, path: PathLike, cause: Optional[BaseException] = None):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"'{self.path}': {cause}")

    def __str__(self) -> str:
        return f"'{self.path}': {self.cause}"


class EncodingError(PipelineError):
    """A format encoder rejected a frame."""

    def __init__(
        self, fmt: str, path: PathLike, cause: Optional[BaseException] = None
    ):
        self.format = fmt
        self.path = str(path)
        self.cause = cause
        super().__init__(f"error writing {fmt.upper()} to '{self.path}': {cause}")


__all__ = [
    "PipelineError",
    "ConfigurationError",
    "FrameValidationError",
    "InputLoadError",
    "OutputIOError",
    "EncodingError",
]
