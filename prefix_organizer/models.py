"""Result containers shared across prefix-organizer modules."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class OrganizeOutcome:
    """Tally produced by a single organize pass."""

    moved: int = 0
    skipped: int = 0

    def summary(self) -> str:
        return f"{self.moved} files moved, {self.skipped} files skipped"


@dataclass(slots=True)
class PlannedMove:
    """Dry-run entry; ``destination`` is ``None`` when no rule matched."""

    source: Path
    destination: Path | None
    conflict: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "source": str(self.source),
            "destination": str(self.destination) if self.destination else None,
            "conflict": self.conflict,
        }


__all__ = ["OrganizeOutcome", "PlannedMove"]
