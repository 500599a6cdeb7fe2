"""Organize pass: classify dump-directory files and relocate them.

Entries are taken in filename order. Directories, including symlinks that
point at directories, are left alone and not counted.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from .config import Config
from .logger import get_logger, log_event
from .matcher import first_match
from .models import OrganizeOutcome, PlannedMove
from .mover import RelocateError, relocate


class DirectoryListError(Exception):
    """Raised when the dump directory cannot be listed; aborts one pass."""

    def __init__(self, directory: Path, detail: str) -> None:
        self.directory = directory
        super().__init__(f"failed to read dump directory {directory}: {detail}")


def _list_entries(directory: Path) -> list[Path]:
    try:
        return sorted(directory.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise DirectoryListError(directory, str(exc)) from exc


def organize(config: Config, logger: logging.Logger | None = None) -> OrganizeOutcome:
    """Relocate every matching file of the dump directory once.

    Each file gets at most one relocation attempt, at the first destination
    whose rule matches. Failures are logged and counted as skipped; they never
    stop the remaining files.
    """

    logger = logger or get_logger()
    outcome = OrganizeOutcome()

    for source in _list_entries(config.dump_directory):
        filename = source.name
        try:
            if source.is_dir():
                continue
        except OSError as exc:
            log_event(
                logger,
                level=logging.ERROR,
                action="organize.stat_error",
                message=f"Error reading {filename}: {exc}",
            )
            outcome.skipped += 1
            continue

        destination = first_match(filename, config.destinations)
        if destination is None:
            log_event(
                logger,
                level=logging.INFO,
                action="organize.no_match",
                message=f"No match found for: {filename}",
            )
            outcome.skipped += 1
            continue

        target = destination.path / filename
        log_event(
            logger,
            level=logging.INFO,
            action="move.start",
            message=f"Moving: {source} -> {target}",
        )
        try:
            relocate(source, target)
        except RelocateError as exc:
            log_event(
                logger,
                level=logging.ERROR,
                action="move.error",
                message=f"Error moving {filename}: {exc}",
                extra={"error": type(exc).__name__},
            )
            outcome.skipped += 1
        else:
            log_event(
                logger,
                level=logging.INFO,
                action="move.success",
                message=f"Success: {filename}",
            )
            outcome.moved += 1

    return outcome


def run_organize_pass(config: Config, logger: logging.Logger | None = None) -> OrganizeOutcome | None:
    """Run :func:`organize` and log its summary.

    A dump directory that cannot be listed is logged and yields ``None``; the
    next pass will list it again.
    """

    logger = logger or get_logger()
    try:
        outcome = organize(config, logger)
    except DirectoryListError as exc:
        log_event(
            logger,
            level=logging.ERROR,
            action="organize.list_error",
            message=str(exc),
        )
        return None

    log_event(
        logger,
        level=logging.INFO,
        action="organize.summary",
        message=f"Summary: {outcome.summary()}",
        extra={"moved": outcome.moved, "skipped": outcome.skipped},
    )
    return outcome


def plan_moves(config: Config) -> list[PlannedMove]:
    """Preview the pass :func:`organize` would perform, without touching files."""

    plan: list[PlannedMove] = []
    for source in _list_entries(config.dump_directory):
        try:
            if source.is_dir():
                continue
        except OSError:
            continue
        destination = first_match(source.name, config.destinations)
        if destination is None:
            plan.append(PlannedMove(source=source, destination=None))
            continue
        target = destination.path / source.name
        try:
            conflict = target.exists() or target.is_symlink()
        except OSError:
            # an unreadable destination is reported as a conflict
            conflict = True
        plan.append(PlannedMove(source=source, destination=target, conflict=conflict))
    return plan


def render_plan_json(entries: Iterable[PlannedMove], *, indent: int = 2) -> str:
    return json.dumps([entry.to_dict() for entry in entries], indent=indent)


__all__ = [
    "DirectoryListError",
    "organize",
    "plan_moves",
    "render_plan_json",
    "run_organize_pass",
]
