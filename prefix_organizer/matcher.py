"""Filename matching against destination rules."""
from __future__ import annotations

from typing import Iterable

from .config import Destination


def matches(filename: str, destination: Destination) -> bool:
    """Return whether *filename* satisfies the rule of *destination*.

    When both ``prefix`` and ``suffix`` are set, both must hold. A destination
    with neither set never matches.
    """

    prefix, suffix = destination.prefix, destination.suffix
    if prefix and suffix:
        return filename.startswith(prefix) and filename.endswith(suffix)
    if prefix:
        return filename.startswith(prefix)
    if suffix:
        return filename.endswith(suffix)
    return False


def first_match(filename: str, destinations: Iterable[Destination]) -> Destination | None:
    for destination in destinations:
        if matches(filename, destination):
            return destination
    return None


__all__ = ["first_match", "matches"]
