"""Restartable timer that coalesces bursts of triggers into one action."""
from __future__ import annotations

import logging
import threading
from enum import Enum, auto
from functools import partial
from typing import Any, Callable

from ..logger import get_logger, log_event

DEFAULT_DEBOUNCE_SECONDS = 5.0

TimerFactory = Callable[[float, Callable[[], None]], Any]


class DebouncerState(Enum):
    IDLE = auto()
    ARMED = auto()
    CLOSED = auto()


class Debouncer:
    """Run *action* once the triggers have been quiet for *window* seconds.

    Every :meth:`trigger` cancels the pending timer and arms a new one, so the
    deadline is always the last trigger plus the window. The pending slot is
    only read or replaced while holding ``_lock``, both from the trigger path
    and from the timer thread when it fires.

    ``timer_factory`` is called as ``factory(interval, function)`` and must
    return an object with ``start()`` and ``cancel()``, like
    :class:`threading.Timer`.
    """

    def __init__(
        self,
        action: Callable[[], object],
        window: float = DEFAULT_DEBOUNCE_SECONDS,
        *,
        timer_factory: TimerFactory | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if window < 0:
            raise ValueError("Debounce window must not be negative")

        self.action = action
        self.window = window
        self._timer_factory = timer_factory or threading.Timer
        self.logger = logger or get_logger()

        self._lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._timer: Any | None = None
        self._generation = 0
        self._closed = False

    @property
    def state(self) -> DebouncerState:
        with self._lock:
            if self._closed:
                return DebouncerState.CLOSED
            return DebouncerState.ARMED if self._timer is not None else DebouncerState.IDLE

    @property
    def pending(self) -> bool:
        return self.state is DebouncerState.ARMED

    def trigger(self) -> bool:
        """(Re)start the countdown. Returns ``False`` once shut down."""

        with self._lock:
            if self._closed:
                return False
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = self._timer_factory(self.window, partial(self._fire, self._generation))
            timer.daemon = True
            self._timer = timer
            timer.start()
        log_event(
            self.logger,
            level=logging.DEBUG,
            action="debounce.armed",
            message=f"Organize pass scheduled in {self.window:g}s",
        )
        return True

    def shutdown(self, *, wait: bool = True) -> None:
        """Cancel any pending action and refuse further triggers.

        With *wait*, block until an action already running has returned.
        """

        with self._lock:
            if self._closed:
                return
            self._closed = True
            timer, self._timer = self._timer, None
            if timer is not None:
                timer.cancel()
        if timer is not None:
            log_event(
                self.logger,
                level=logging.INFO,
                action="debounce.cancelled",
                message="Stopped file organization timer",
            )
        if wait:
            with self._run_lock:
                pass

    def _fire(self, generation: int) -> None:
        with self._run_lock:
            with self._lock:
                # A newer trigger or a shutdown superseded this timer.
                if self._closed or generation != self._generation:
                    return
                self._timer = None
            log_event(
                self.logger,
                level=logging.INFO,
                action="debounce.fired",
                message="Timer expired, organizing files...",
            )
            try:
                self.action()
            except Exception as exc:
                log_event(
                    self.logger,
                    level=logging.ERROR,
                    action="debounce.action_error",
                    message="Debounced action raised an exception",
                    extra={"error": repr(exc)},
                )


__all__ = ["DEFAULT_DEBOUNCE_SECONDS", "Debouncer", "DebouncerState", "TimerFactory"]
