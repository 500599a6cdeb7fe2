"""Notification source backed by the ``watchdog`` observer."""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from watchdog.events import FileSystemEvent as WatchdogEvent
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .types import EventType, FileSystemEvent

if TYPE_CHECKING:  # pragma: no cover
    from .loop import WatchLoop


class WatcherBackend:
    """Base protocol for notification backends feeding a :class:`WatchLoop`."""

    def start(self) -> None:  # pragma: no cover - exercised in integration
        raise NotImplementedError

    def stop(self) -> None:  # pragma: no cover - exercised in integration
        raise NotImplementedError


def normalize_event(event: WatchdogEvent) -> FileSystemEvent | None:
    """Translate a watchdog event; access-only notifications yield ``None``."""

    event_type = EventType.from_kind(event.event_type)
    if event_type is None:
        return None
    dest_path = getattr(event, "dest_path", "") or None
    return FileSystemEvent(
        path=Path(_as_str(event.src_path)),
        event_type=event_type,
        is_directory=bool(event.is_directory),
        dest_path=Path(_as_str(dest_path)) if dest_path else None,
    )


def _as_str(raw: str | bytes) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="surrogateescape")
    return raw


class _DumpDirectoryHandler(FileSystemEventHandler):
    def __init__(self, loop: "WatchLoop") -> None:
        super().__init__()
        self._loop = loop

    def on_any_event(self, event: WatchdogEvent) -> None:
        try:
            normalized = normalize_event(event)
        except Exception as exc:
            self._loop.report_error(exc)
            return
        if normalized is not None:
            self._loop.publish(normalized)


class WatchdogBackend(WatcherBackend):
    """Watch the dump directory (non-recursively) with a watchdog observer."""

    def __init__(self, loop: "WatchLoop", *, observer_factory: Callable[[], Any] = Observer) -> None:
        self._loop = loop
        self._observer = observer_factory()
        self._handler = _DumpDirectoryHandler(loop)

    def start(self) -> None:
        self._observer.schedule(
            self._handler,
            str(self._loop.config.dump_directory),
            recursive=False,
        )
        self._observer.start()

    def stop(self) -> None:
        self._observer.stop()
        if self._observer.is_alive():
            self._observer.join()


__all__ = ["WatchdogBackend", "WatcherBackend", "normalize_event"]
