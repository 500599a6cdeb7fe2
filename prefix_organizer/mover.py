"""Safe single-file relocation: atomic rename with a copy-then-delete fallback."""
from __future__ import annotations

import os
import shutil
from pathlib import Path

_DIRECTORY_MODE = 0o755
_CHUNK_SIZE = 64 * 1024


class RelocateError(Exception):
    """Base class for failures while relocating one file."""

    reason = "failed to relocate file"

    def __init__(self, source: Path, destination: Path, detail: str | None = None) -> None:
        self.source = Path(source)
        self.destination = Path(destination)
        self.detail = detail
        message = f"{self.reason}: {self.destination}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DirectoryCreateError(RelocateError):
    reason = "failed to create destination directory"


class DestinationExistsError(RelocateError):
    reason = "destination file already exists"


class DestinationCheckError(RelocateError):
    reason = "failed to check destination"


class CopyError(RelocateError):
    reason = "failed to copy file"


class CleanupError(RelocateError):
    reason = "failed to remove source file"


def relocate(source: str | Path, destination: str | Path) -> None:
    """Move *source* to *destination* without ever overwriting.

    A failed copy can leave a partially written file at *destination*; it is
    not removed.
    """

    source = Path(source)
    destination = Path(destination)

    try:
        destination.parent.mkdir(mode=_DIRECTORY_MODE, parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreateError(source, destination, str(exc)) from exc

    try:
        occupied = destination.exists() or destination.is_symlink()
    except OSError as exc:
        raise DestinationCheckError(source, destination, str(exc)) from exc
    if occupied:
        raise DestinationExistsError(source, destination)

    try:
        os.rename(source, destination)
    except OSError:
        pass
    else:
        return

    try:
        _copy_file(source, destination)
    except OSError as exc:
        raise CopyError(source, destination, str(exc)) from exc

    try:
        source.unlink()
    except OSError as exc:
        raise CleanupError(source, destination, str(exc)) from exc


def _copy_file(source: Path, destination: Path) -> None:
    # "xb" refuses to clobber a file that appeared after the existence check.
    with source.open("rb") as reader, destination.open("xb") as writer:
        shutil.copyfileobj(reader, writer, _CHUNK_SIZE)
    shutil.copymode(source, destination)


__all__ = [
    "CleanupError",
    "CopyError",
    "DestinationCheckError",
    "DestinationExistsError",
    "DirectoryCreateError",
    "RelocateError",
    "relocate",
]
