"""File-system notifier built on watchdog.

Watches every package directory (non-recursively) and publishes changed file
paths to an event queue. Failures after setup are published to a separate
error queue so a consumer can treat them as fatal.
"""

from __future__ import annotations

import fnmatch
import os
import queue
import threading
from collections.abc import Callable, Iterable
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from depwatch.constants import DEFAULT_IGNORE_PATTERNS
from depwatch.exceptions import WatchError
from depwatch.logging import get_logger

logger = get_logger(__name__)

# Deletions and opens carry no new content
CHANGE_EVENT_TYPES = frozenset({"created", "modified", "moved", "closed"})


class ChangeHandler(FileSystemEventHandler):
    """Translates watchdog events into changed file paths."""

    def __init__(self, events: queue.Queue[str], ignore_patterns: Iterable[str] = DEFAULT_IGNORE_PATTERNS) -> None:
        super().__init__()
        self.events = events
        self.ignore_patterns = tuple(ignore_patterns)

    def is_ignored(self, path: str) -> bool:
        name = os.path.basename(path)
        return any(fnmatch.fnmatch(name, pattern) for pattern in self.ignore_patterns)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in CHANGE_EVENT_TYPES:
            return

        raw = event.dest_path if event.event_type == "moved" else event.src_path
        path = os.fsdecode(raw) if raw else ""
        if not path or self.is_ignored(path):
            return

        logger.debug(f"{event.event_type}: {path}")
        self.events.put(path)


class Watcher:
    """Watches package directories and exposes event and error queues."""

    def __init__(
        self,
        ignore_patterns: Iterable[str] = DEFAULT_IGNORE_PATTERNS,
        supervise_interval: float = 1.0,
        observer_factory: Callable[[], Any] = Observer,
    ) -> None:
        """Initialize watcher.

        Args:
            ignore_patterns: fnmatch patterns for file names to drop
            supervise_interval: Seconds between observer health checks
            observer_factory: Creates the watchdog observer
        """
        self.events: queue.Queue[str] = queue.Queue()
        self.errors: queue.Queue[WatchError] = queue.Queue()
        self.handler = ChangeHandler(self.events, ignore_patterns)
        self.supervise_interval = supervise_interval
        self._observer_factory = observer_factory
        self._observer: Any = None
        self._stopping = threading.Event()
        self._supervisor: threading.Thread | None = None
        self.directories: list[str] = []

    def start(self, directories: Iterable[str]) -> None:
        """Schedule a watch on every directory and start observing.

        Raises:
            WatchError: If any watch cannot be established
        """
        observer = self._observer_factory()
        for directory in directories:
            try:
                observer.schedule(self.handler, directory, recursive=False)
            except OSError as e:
                raise WatchError(f"Failed to set up watch on {directory}", path=directory) from e
            self.directories.append(directory)

        try:
            observer.start()
        except OSError as e:
            raise WatchError("Failed to start filesystem watcher", details={"error": str(e)}) from e

        self._observer = observer
        self._stopping.clear()
        self._supervisor = threading.Thread(target=self._supervise, name="depwatch-supervisor", daemon=True)
        self._supervisor.start()
        logger.debug(f"Watching {len(self.directories)} directories")

    def stop(self) -> None:
        """Stop observing and wait for the watchdog threads to exit."""
        self._stopping.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None
        if self._supervisor is not None:
            self._supervisor.join(timeout=2.0)
            self._supervisor = None

    def _supervise(self) -> None:
        """Report an observer or emitter thread that exits on its own."""
        while not self._stopping.wait(self.supervise_interval):
            observer = self._observer
            if observer is None or self._stopping.is_set():
                return
            if not observer.is_alive():
                self.errors.put(WatchError("Filesystem observer stopped unexpectedly"))
                return
            for emitter in list(getattr(observer, "emitters", ())):
                if not emitter.is_alive():
                    path = getattr(getattr(emitter, "watch", None), "path", None)
                    self.errors.put(WatchError("Watch on directory stopped unexpectedly", path=path))
                    return
