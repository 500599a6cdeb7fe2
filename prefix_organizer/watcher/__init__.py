"""Watcher subsystem for prefix-organizer."""
from .backend import WatchdogBackend, WatcherBackend, normalize_event
from .debouncer import DEFAULT_DEBOUNCE_SECONDS, Debouncer, DebouncerState
from .loop import WatchLoop
from .types import EventType, FileSystemEvent

__all__ = [
    "DEFAULT_DEBOUNCE_SECONDS",
    "Debouncer",
    "DebouncerState",
    "EventType",
    "FileSystemEvent",
    "WatchLoop",
    "WatchdogBackend",
    "WatcherBackend",
    "normalize_event",
]
