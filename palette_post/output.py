# palette_post/output.py
from __future__ import annotations

"""
Output addressing.

Exports:
  STREAM_TOKEN                      # "-" means the process's stdout
  OutputTarget                      # stream | file | directory, resolved once
  resolve_output_target(out) -> OutputTarget
  destination_for(target, input_name, fmt) -> Path | None
  open_destination(path, no_overwrite) -> context manager yielding a binary stream
                                    # path None is stdout

Notes:
  - Exclusive opens ("xb") fail on existing files; the caller aborts the run
    and leaves anything already written in place.
  - Nothing here deletes partial output.
"""

import sys
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Literal, Optional

from .errors import OutputIOError

STREAM_TOKEN = "-"
STREAM_NAME = "stdout"

TargetKind = Literal["stream", "file", "directory"]


@dataclass(frozen=True)
class OutputTarget:
    kind: TargetKind
    path: Optional[Path] = None

    @property
    def is_stream(self) -> bool:
        return self.kind == "stream"

    @property
    def is_directory(self) -> bool:
        return self.kind == "directory"

    def describe(self) -> str:
        return STREAM_NAME if self.path is None else str(self.path)


def resolve_output_target(out: str) -> OutputTarget:
    """'-' -> stream; an existing directory -> directory; anything else -> file."""
    if out == STREAM_TOKEN:
        return OutputTarget("stream")
    path = Path(out)
    if path.is_dir():
        return OutputTarget("directory", path)
    return OutputTarget("file", path)


def input_stem(input_name: str) -> str:
    """Base name of an input with its last extension removed."""
    name = Path(input_name).name
    suffix = Path(name).suffix
    return name[: -len(suffix)] if suffix else name


def destination_for(target: OutputTarget, input_name: str, fmt: str) -> Optional[Path]:
    """
    Per-input destination in independent mode.

    Returns None for the stream target. A directory target yields
    <dir>/<input stem>.<fmt>; a file target is used literally.
    """
    if target.is_stream:
        return None
    assert target.path is not None
    if target.is_directory:
        return target.path / f"{input_stem(input_name)}.{fmt}"
    return target.path


@contextmanager
def open_destination(path: Optional[Path], no_overwrite: bool) -> Iterator[BinaryIO]:
    """
    Open a destination for binary writing.

    path=None means stdout, which is flushed but never closed.
    """
    if path is None:
        stream = sys.stdout.buffer
        try:
            yield stream
        finally:
            stream.flush()
        return

    mode = "xb" if no_overwrite else "wb"
    try:
        fh = open(path, mode)
    except OSError as e:
        raise OutputIOError(path, e) from e
    with fh:
        yield fh


__all__ = [
    "STREAM_TOKEN",
    "STREAM_NAME",
    "TargetKind",
    "OutputTarget",
    "resolve_output_target",
    "input_stem",
    "destination_for",
    "open_destination",
]
