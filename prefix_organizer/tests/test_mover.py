from __future__ import annotations

import errno
import os
import stat
from pathlib import Path

import pytest

from prefix_organizer import mover
from prefix_organizer.mover import (
    CleanupError,
    CopyError,
    DestinationCheckError,
    DestinationExistsError,
    DirectoryCreateError,
    relocate,
)


def _cross_device_rename(src, dst):  # noqa: ARG001
    raise OSError(errno.EXDEV, "Invalid cross-device link")


def test_relocate_creates_missing_directories(tmp_path: Path) -> None:
    source = tmp_path / "dump" / "report.pdf"
    source.parent.mkdir()
    source.write_text("pdf", encoding="utf-8")
    destination = tmp_path / "out" / "nested" / "report.pdf"

    relocate(source, destination)

    assert destination.read_text(encoding="utf-8") == "pdf"
    assert not source.exists()


def test_relocate_refuses_to_overwrite(tmp_path: Path) -> None:
    source = tmp_path / "a.txt"
    source.write_text("new", encoding="utf-8")
    destination = tmp_path / "out" / "a.txt"
    destination.parent.mkdir()
    destination.write_text("old", encoding="utf-8")

    with pytest.raises(DestinationExistsError) as excinfo:
        relocate(source, destination)

    assert excinfo.value.source == source
    assert source.read_text(encoding="utf-8") == "new"
    assert destination.read_text(encoding="utf-8") == "old"


def test_relocate_falls_back_to_copy_across_devices(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(mover.os, "rename", _cross_device_rename)
    source = tmp_path / "script.sh"
    source.write_bytes(b"#!/bin/sh\necho hi\n" * 10000)
    source.chmod(0o750)
    destination = tmp_path / "bin" / "script.sh"

    relocate(source, destination)

    assert not source.exists()
    assert destination.read_bytes() == b"#!/bin/sh\necho hi\n" * 10000
    assert stat.S_IMODE(destination.stat().st_mode) == 0o750


def test_copy_failure_raises_copy_error(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(mover.os, "rename", _cross_device_rename)
    source = tmp_path / "missing.txt"
    destination = tmp_path / "out" / "missing.txt"

    with pytest.raises(CopyError):
        relocate(source, destination)


def test_copy_failure_leaves_partial_destination(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(mover.os, "rename", _cross_device_rename)

    def broken_copy(reader, writer, length=0):  # noqa: ARG001
        writer.write(reader.read(3))
        raise OSError(errno.ENOSPC, "No space left on device")

    monkeypatch.setattr(mover.shutil, "copyfileobj", broken_copy)
    source = tmp_path / "big.bin"
    source.write_bytes(b"abcdef")
    destination = tmp_path / "out" / "big.bin"

    with pytest.raises(CopyError):
        relocate(source, destination)

    assert source.exists()
    assert destination.read_bytes() == b"abc"


def test_cleanup_failure_raises_cleanup_error(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(mover.os, "rename", _cross_device_rename)
    source = tmp_path / "keep.txt"
    source.write_text("data", encoding="utf-8")
    destination = tmp_path / "out" / "keep.txt"

    def refuse_unlink(self, missing_ok=False):  # noqa: ARG001
        raise PermissionError(errno.EACCES, "Permission denied")

    monkeypatch.setattr(mover.Path, "unlink", refuse_unlink)

    with pytest.raises(CleanupError):
        relocate(source, destination)

    assert destination.read_text(encoding="utf-8") == "data"


def test_directory_create_failure(tmp_path: Path) -> None:
    source = tmp_path / "a.txt"
    source.write_text("data", encoding="utf-8")
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(DirectoryCreateError):
        relocate(source, blocker / "sub" / "a.txt")

    assert source.exists()


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_dangling_symlink_counts_as_existing(tmp_path: Path) -> None:
    source = tmp_path / "a.txt"
    source.write_text("data", encoding="utf-8")
    destination = tmp_path / "out" / "a.txt"
    destination.parent.mkdir()
    destination.symlink_to(tmp_path / "nowhere")

    with pytest.raises(DestinationExistsError):
        relocate(source, destination)


def test_destination_check_failure_raises_relocate_error(tmp_path: Path, monkeypatch) -> None:
    source = tmp_path / "a.txt"
    source.write_text("data", encoding="utf-8")
    destination = tmp_path / "out" / "a.txt"
    real_exists = mover.Path.exists

    def exists(self, *args, **kwargs):
        if self == destination:
            raise OSError(errno.ENAMETOOLONG, "File name too long", str(self))
        return real_exists(self, *args, **kwargs)

    monkeypatch.setattr(mover.Path, "exists", exists)

    with pytest.raises(DestinationCheckError) as excinfo:
        relocate(source, destination)

    assert isinstance(excinfo.value.__cause__, OSError)
    assert source.read_text(encoding="utf-8") == "data"
