"""Command line interface for prefix-organizer."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import (
    Config,
    ConfigError,
    default_config_path,
    ensure_dump_directory,
    load_config,
    write_default_config,
)
from .logger import configure_logging, default_log_path, log_event
from .organizer import DirectoryListError, plan_moves, render_plan_json, run_organize_pass
from .watcher import DEFAULT_DEBOUNCE_SECONDS, WatchLoop


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "handler"):
        parser.print_help()
        return 1
    return args.handler(args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prefix-organizer",
        description="Move files from a dump directory by filename prefix/suffix rules",
    )
    subparsers = parser.add_subparsers(dest="command")

    watch = subparsers.add_parser("watch", help="Watch the dump directory and organize on changes")
    _add_config_argument(watch)
    log_target = watch.add_mutually_exclusive_group()
    log_target.add_argument("--log-file", type=Path, help="Log file (default ~/.config/prefix/app.log)")
    log_target.add_argument("--stderr", action="store_true", help="Log to stderr instead of a file")
    watch.add_argument(
        "--debounce",
        type=_non_negative_seconds,
        default=DEFAULT_DEBOUNCE_SECONDS,
        help="Seconds of quiet before an organize pass runs",
    )
    watch.add_argument("--verbose", action="store_true")
    watch.set_defaults(handler=_handle_watch)

    organize = subparsers.add_parser("organize", help="Run a single organize pass")
    _add_config_argument(organize)
    organize.add_argument("--log-file", type=Path)
    organize.add_argument("--dry-run", action="store_true", help="Print the planned moves as JSON")
    organize.add_argument("--output", type=Path, help="Write the dry-run plan to a file")
    organize.set_defaults(handler=_handle_organize)

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_sub = config_parser.add_subparsers(dest="config_command")

    config_init = config_sub.add_parser("init", help="Create the default config file")
    _add_config_argument(config_init)
    config_init.set_defaults(handler=_handle_config_init)

    config_validate = config_sub.add_parser("validate", help="Validate the config file")
    _add_config_argument(config_validate)
    config_validate.set_defaults(handler=_handle_config_validate)

    return parser


def _non_negative_seconds(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number of seconds: {raw!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"debounce must not be negative: {raw}")
    return value


def _add_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Config file (default {default_config_path()})",
    )


def _load_startup_config(path: Path | None, logger: logging.Logger, *, create_missing: bool) -> Config | None:
    try:
        config = load_config(path, create_missing=create_missing)
        ensure_dump_directory(config)
    except ConfigError as exc:
        log_event(logger, level=logging.ERROR, action="config.error", message=str(exc))
        print(f"Failed to load config: {exc}", file=sys.stderr)
        return None
    return config


def _handle_watch(args: argparse.Namespace) -> int:
    level = logging.DEBUG if args.verbose else logging.INFO
    if args.stderr:
        logger = configure_logging(level=level)
    else:
        logger = configure_logging(args.log_file or default_log_path(), level=level)

    log_event(logger, level=logging.INFO, action="startup", message="File organizer starting...")
    config = _load_startup_config(args.config, logger, create_missing=True)
    if config is None:
        return 1

    log_event(
        logger,
        level=logging.INFO,
        action="config.loaded",
        message=f"Dump directory: {config.dump_directory}",
    )
    log_event(
        logger,
        level=logging.INFO,
        action="config.loaded",
        message=f"Processing {len(config.destinations)} destination rules",
    )

    loop = WatchLoop(config, debounce_window=args.debounce, logger=logger)
    return loop.run_until_signal()


def _handle_organize(args: argparse.Namespace) -> int:
    logger = configure_logging(args.log_file)
    config = _load_startup_config(args.config, logger, create_missing=False)
    if config is None:
        return 1

    if not args.dry_run:
        outcome = run_organize_pass(config, logger)
        if outcome is None:
            return 1
        print(outcome.summary())
        return 0

    try:
        plan = plan_moves(config)
    except DirectoryListError as exc:
        print(f"Dry run failed: {exc}", file=sys.stderr)
        return 1
    rendered = render_plan_json(plan)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(rendered + "\n", encoding="utf-8")
        print(f"Plan written to {args.output}")
    else:
        print(rendered)
    return 0


def _handle_config_init(args: argparse.Namespace) -> int:
    path = args.config or default_config_path()
    if not write_default_config(path):
        print(f"Config file already exists: {path}", file=sys.stderr)
        return 1
    print(f"Created default config file at {path}. Add the dump directory and destinations.")
    return 0


def _handle_config_validate(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(f"Validation failed: {exc}", file=sys.stderr)
        return 1
    print(f"Config is valid: {len(config.destinations)} destination rules.")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
