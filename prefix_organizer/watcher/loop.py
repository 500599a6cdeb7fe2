"""Watch loop bridging filesystem notifications into debounced organize passes."""
from __future__ import annotations

import logging
import signal
import threading
from queue import Queue
from typing import Callable, Sequence

from ..config import Config
from ..logger import flush_logging, get_logger, log_event
from ..organizer import run_organize_pass
from .backend import WatchdogBackend, WatcherBackend
from .debouncer import DEFAULT_DEBOUNCE_SECONDS, Debouncer, TimerFactory
from .types import FileSystemEvent

BackendFactory = Callable[["WatchLoop"], WatcherBackend | None]


class _BackendError:
    __slots__ = ("error",)

    def __init__(self, error: BaseException) -> None:
        self.error = error


_Sentinel = object()


class WatchLoop:
    """Run an organize pass at startup and after every quiet debounce window.

    A single listener thread consumes the event queue fed by the notification
    backend. Every event, whatever its kind, restarts the debounce countdown;
    backend errors are logged and the loop keeps going.
    """

    def __init__(
        self,
        config: Config,
        *,
        debounce_window: float = DEFAULT_DEBOUNCE_SECONDS,
        backend_factory: BackendFactory | None = None,
        logger: logging.Logger | None = None,
        organize_pass: Callable[[Config, logging.Logger], object] | None = None,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or get_logger()
        self._organize_pass = organize_pass or run_organize_pass
        self._backend_factory = backend_factory or WatchdogBackend
        self.debouncer = Debouncer(
            self.run_pass,
            debounce_window,
            timer_factory=timer_factory,
            logger=self.logger,
        )
        self._queue: Queue[FileSystemEvent | _BackendError | object] = Queue()
        self._stop_event = threading.Event()
        self._worker: threading.Thread | None = None
        self._backend: WatcherBackend | None = None
        self._lock = threading.Lock()

    def run_pass(self) -> None:
        self._organize_pass(self.config, self.logger)

    def start(self) -> None:
        """Organize existing files, then begin listening for changes."""

        with self._lock:
            if self._worker and self._worker.is_alive():
                return

            log_event(
                self.logger,
                level=logging.INFO,
                action="organize.prescan",
                message="Organizing existing files...",
            )
            try:
                self.run_pass()
            except Exception as exc:
                log_event(
                    self.logger,
                    level=logging.ERROR,
                    action="organize.prescan_error",
                    message="Initial organize pass raised an exception",
                    extra={"error": repr(exc)},
                )

            self._stop_event.clear()
            self._worker = threading.Thread(target=self._run, name="WatchLoop", daemon=True)
            self._worker.start()

            self._backend = self._backend_factory(self)
            if self._backend:
                self._backend.start()
                log_event(
                    self.logger,
                    level=logging.INFO,
                    action="watch.started",
                    message=f"Watching {self.config.dump_directory}",
                )
            else:
                log_event(
                    self.logger,
                    level=logging.INFO,
                    action="watch.backend_disabled",
                    message="No notification backend; only published events are processed",
                )

    def publish(self, event: FileSystemEvent) -> None:
        """Submit a filesystem *event* from the notification source."""

        self._queue.put(event)

    def report_error(self, error: BaseException) -> None:
        """Submit an error raised by the notification source."""

        self._queue.put(_BackendError(error))

    def request_stop(self) -> None:
        self._stop_event.set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._stop_event.wait(timeout)

    def stop(self) -> None:
        """Stop listening, cancel any pending pass and wait for a running one."""

        with self._lock:
            self._stop_event.set()
            if self._backend:
                try:
                    self._backend.stop()
                finally:
                    self._backend = None

            self._queue.put(_Sentinel)
            worker = self._worker
            if worker and worker.is_alive():
                worker.join()
            self._worker = None

            self.debouncer.shutdown()

    def run_until_signal(
        self,
        signals: Sequence[signal.Signals] = (signal.SIGINT, signal.SIGTERM),
    ) -> int:
        """Start, block until a termination signal arrives, then shut down."""

        def _handle_signal(signum: int, _frame: object) -> None:
            log_event(
                self.logger,
                level=logging.INFO,
                action="shutdown.signal",
                message=f"Received signal: {signal.Signals(signum).name}. Shutting down gracefully...",
            )
            self.request_stop()

        previous = {sig: signal.signal(sig, _handle_signal) for sig in signals}
        try:
            self.start()
            log_event(
                self.logger,
                level=logging.INFO,
                action="startup.ready",
                message="File organizer started. Press Ctrl+C to stop.",
            )
            # A bounded wait keeps the main thread responsive to signals.
            while not self.wait(1.0):
                pass
        finally:
            self.stop()
            for sig, handler in previous.items():
                signal.signal(sig, handler)
            log_event(
                self.logger,
                level=logging.INFO,
                action="shutdown.complete",
                message="File organizer stopped",
            )
            flush_logging(self.logger)
        return 0

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _Sentinel:
                break
            if isinstance(item, _BackendError):
                log_event(
                    self.logger,
                    level=logging.ERROR,
                    action="watch.error",
                    message=f"Error: {item.error}",
                    extra={"error": repr(item.error)},
                )
                continue
            if isinstance(item, FileSystemEvent):
                log_event(
                    self.logger,
                    level=logging.INFO,
                    action="watch.event",
                    message=item.describe(),
                )
                self.debouncer.trigger()


__all__ = ["BackendFactory", "WatchLoop"]
