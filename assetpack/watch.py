"""Watch mode: rebuild when source files change.

The scheduler moves between three states:

    IDLE --change--> PENDING_REBUILD --timer--> REBUILDING --done--> IDLE

Changes seen while a rebuild is pending are coalesced into it. Changes
seen while rebuilding mark the run dirty, and exactly one more rebuild is
scheduled when it finishes. A rebuild never starts sooner than the quiet
interval after the previous one started, so at most one is ever in flight.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from assetpack.types import WatchState

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".js", ".css")
DEFAULT_QUIET_INTERVAL = 1.0
DEFAULT_SETTLE_DELAY = 1.0


class WatchScheduler:
    """Rate-limited, non-overlapping rebuild trigger.

    Args:
        rebuild: Called on a timer thread to perform one full build.
        quiet_interval: Minimum seconds between the starts of two rebuilds.
        settle_delay: Minimum seconds between a change and the rebuild it
            triggers, so editors can release their file handles.
        extensions: File extensions that trigger rebuilds (case-insensitive).
        clock: Monotonic time source.
        timer_factory: ``threading.Timer``-compatible factory.
    """

    def __init__(
        self,
        rebuild: Callable[[], Any],
        quiet_interval: float = DEFAULT_QUIET_INTERVAL,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: Callable[..., Any] = threading.Timer,
    ) -> None:
        self._rebuild = rebuild
        self.quiet_interval = quiet_interval
        self.settle_delay = settle_delay
        self.extensions = frozenset(e.lower() for e in extensions)
        self._clock = clock
        self._timer_factory = timer_factory

        self._lock = threading.Lock()
        self._idle = threading.Event()
        self._idle.set()
        self._state = WatchState.IDLE
        self._dirty = False
        self._last_trigger: float | None = None
        self._timer: Any = None
        self.rebuild_count = 0

    @property
    def state(self) -> WatchState:
        return self._state

    def is_watched(self, path: str | Path) -> bool:
        """Whether a change to ``path`` should trigger a rebuild."""
        return Path(path).suffix.lower() in self.extensions

    def notify(self, path: str | Path) -> bool:
        """Record a change to ``path``.

        Returns:
            True if the change was accepted (watched extension).
        """
        if not self.is_watched(path):
            return False

        with self._lock:
            if self._state == WatchState.REBUILDING:
                self._dirty = True
            elif self._state == WatchState.IDLE:
                logger.debug("Change detected: %s", path)
                self._schedule()
        return True

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no rebuild is pending or running."""
        return self._idle.wait(timeout)

    def stop(self) -> None:
        """Cancel a pending rebuild; a running one is left to finish."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._state == WatchState.PENDING_REBUILD:
                self._state = WatchState.IDLE
                self._idle.set()

    def _schedule(self) -> None:
        # Caller holds the lock.
        delay = self.settle_delay
        if self._last_trigger is not None:
            delay = max(delay, self._last_trigger + self.quiet_interval - self._clock())

        self._state = WatchState.PENDING_REBUILD
        self._idle.clear()
        timer = self._timer_factory(delay, self._fire)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _fire(self) -> None:
        with self._lock:
            if self._state != WatchState.PENDING_REBUILD:
                return
            self._state = WatchState.REBUILDING
            self._last_trigger = self._clock()
            self._timer = None

        try:
            self._rebuild()
        finally:
            with self._lock:
                self.rebuild_count += 1
                if self._dirty:
                    self._dirty = False
                    self._schedule()
                else:
                    self._state = WatchState.IDLE
                    self._idle.set()


class SourceChangeHandler(FileSystemEventHandler):
    """Forwards file changes under the source root to a WatchScheduler."""

    def __init__(self, scheduler: WatchScheduler) -> None:
        super().__init__()
        self.scheduler = scheduler

    def _forward(self, path: str | bytes) -> None:
        self.scheduler.notify(os.fsdecode(path))

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.dest_path)


def watch_forever(
    scheduler: WatchScheduler,
    source_root: Path,
    observer_factory: Callable[[], Any] = Observer,
    poll_interval: float = 1.0,
) -> None:
    """Observe ``source_root`` recursively until interrupted.

    Raises:
        KeyboardInterrupt: Propagated so the caller decides how to exit.
    """
    observer = observer_factory()
    observer.schedule(SourceChangeHandler(scheduler), str(source_root), recursive=True)
    observer.start()
    logger.debug("Watching %s for %s", source_root, sorted(scheduler.extensions))

    try:
        while observer.is_alive():
            observer.join(poll_interval)
    finally:
        scheduler.stop()
        observer.stop()
        observer.join()


__all__ = [
    "DEFAULT_EXTENSIONS",
    "DEFAULT_QUIET_INTERVAL",
    "DEFAULT_SETTLE_DELAY",
    "SourceChangeHandler",
    "WatchScheduler",
    "watch_forever",
]
