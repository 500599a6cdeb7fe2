"""prefix-organizer package exports."""

from .cli import main as cli_main
from .config import Config, ConfigError, Destination, load_config
from .matcher import matches
from .mover import relocate
from .organizer import organize
from .watcher import Debouncer, WatchLoop

__all__ = [
    "cli_main",
    "Config",
    "ConfigError",
    "Debouncer",
    "Destination",
    "load_config",
    "matches",
    "organize",
    "relocate",
    "WatchLoop",
]
