"""Configuration loading and validation for prefix-organizer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_CONFIG_TEMPLATE = """\
dump_directory: ""

destinations:
  - path: ""
    prefix: ""
    # suffix: ""
"""


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded or is invalid."""


@dataclass(frozen=True)
class Destination:
    """A target directory and the filename pattern that routes files to it.

    An empty ``prefix`` or ``suffix`` means the condition is not set.
    """

    path: Path
    prefix: str = ""
    suffix: str = ""


@dataclass(frozen=True)
class Config:
    """Validated, immutable configuration handed to the organizer."""

    dump_directory: Path
    destinations: tuple[Destination, ...]


def default_config_path() -> Path:
    return Path.home() / ".config" / "prefix" / "prefix.yaml"


def write_default_config(path: Path) -> bool:
    """Write the default template to *path*.

    Returns ``False`` when a file already exists there; it is never overwritten.
    """

    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    return True


def load_config(path: str | Path | None = None, *, create_missing: bool = False) -> Config:
    """Read and validate the YAML configuration at *path*.

    With ``create_missing`` a missing file is replaced by the default template,
    and a :class:`ConfigError` still asks the user to fill it in.
    """

    config_path = Path(path).expanduser() if path else default_config_path()

    if not config_path.exists():
        if create_missing:
            write_default_config(config_path)
            raise ConfigError(
                f"Created default config file at {config_path}. "
                "Please edit it and restart the program."
            )
        raise ConfigError(f"Config file not found: {config_path}")
    if not config_path.is_file():
        raise ConfigError(f"Config path is not a file: {config_path}")

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML in {config_path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {config_path}: {exc}") from exc

    if raw is None:
        raise ConfigError(f"Config file is empty: {config_path}")
    if not isinstance(raw, Mapping):
        raise ConfigError(f"Config root must be a mapping, got {type(raw).__name__}")

    return validate_config(raw)


def validate_config(raw: Mapping[str, Any]) -> Config:
    """Build a :class:`Config` from parsed YAML, enforcing the strict rules."""

    dump_directory = _as_text(raw.get("dump_directory"), "dump_directory")
    if not dump_directory:
        raise ConfigError("dump_directory is empty in config file")

    raw_destinations = raw.get("destinations") or []
    if not isinstance(raw_destinations, list):
        raise ConfigError("destinations must be a list")
    if not raw_destinations:
        raise ConfigError("no destinations configured")

    destinations: list[Destination] = []
    for index, entry in enumerate(raw_destinations):
        if not isinstance(entry, Mapping):
            raise ConfigError(f"destination[{index}] must be a mapping")
        dest_path = _as_text(entry.get("path"), f"destination[{index}].path")
        prefix = _as_text(entry.get("prefix"), f"destination[{index}].prefix")
        suffix = _as_text(entry.get("suffix"), f"destination[{index}].suffix")
        if not dest_path:
            raise ConfigError(f"destination[{index}] has empty path")
        if not prefix and not suffix:
            raise ConfigError(f"destination[{index}] must have at least prefix or suffix")
        destinations.append(
            Destination(path=Path(dest_path).expanduser(), prefix=prefix, suffix=suffix)
        )

    return Config(
        dump_directory=Path(dump_directory).expanduser(),
        destinations=tuple(destinations),
    )


def ensure_dump_directory(config: Config) -> None:
    if not config.dump_directory.exists():
        raise ConfigError(f"Dump directory does not exist: {config.dump_directory}")
    if not config.dump_directory.is_dir():
        raise ConfigError(f"Dump directory is not a directory: {config.dump_directory}")


def _as_text(value: Any, field_name: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value)
    raise ConfigError(f"{field_name} must be a string")


__all__ = [
    "Config",
    "ConfigError",
    "DEFAULT_CONFIG_TEMPLATE",
    "Destination",
    "default_config_path",
    "ensure_dump_directory",
    "load_config",
    "validate_config",
    "write_default_config",
]
