"""Change events as seen by the watch loop."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class EventType(str, Enum):
    """Change kinds that restart the debounce countdown.

    Values are the notification source's own event names.
    """

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    MOVED = "moved"

    @classmethod
    def from_kind(cls, kind: str) -> EventType | None:
        """Map a raw event name; access-only notifications map to ``None``."""

        if kind == "closed":
            # close after write
            return cls.MODIFIED
        try:
            return cls(kind)
        except ValueError:
            return None


@dataclass(slots=True)
class FileSystemEvent:
    """One change reported under the dump directory."""

    path: Path
    event_type: EventType
    is_directory: bool = False
    dest_path: Path | None = None
    received_at: float = field(default_factory=time.monotonic)

    def describe(self) -> str:
        kind = "directory" if self.is_directory else "file"
        if self.dest_path is not None:
            return f"{self.event_type.value} {kind} {self.path} -> {self.dest_path}"
        return f"{self.event_type.value} {kind} {self.path}"


__all__ = ["EventType", "FileSystemEvent"]
