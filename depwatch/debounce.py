"""Quiet-period batching of file change notifications."""

from __future__ import annotations

import queue
import threading

from depwatch.constants import DEFAULT_POLL_INTERVAL_SECONDS
from depwatch.logging import get_logger

logger = get_logger(__name__)


def collect(events: queue.Queue[str], quiet_window: float, first: str | None = None) -> list[str]:
    """Collect one batch of events.

    Blocks until an event arrives (unless ``first`` is given), then keeps
    absorbing events until ``quiet_window`` seconds pass with no new arrival.
    The window restarts on every event, so a steady burst extends the batch.

    Args:
        events: Event queue fed by the notifier
        quiet_window: Seconds of inactivity that close the batch
        first: An already-received first event

    Returns:
        All events of the batch in arrival order (never empty)
    """
    batch = [events.get() if first is None else first]
    while True:
        try:
            batch.append(events.get(timeout=quiet_window))
        except queue.Empty:
            return batch


class DebounceCollector:
    """Repeatedly collects batches from an event queue until stopped."""

    def __init__(
        self,
        events: queue.Queue[str],
        quiet_window: float,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        """Initialize collector.

        Args:
            events: Event queue fed by the notifier
            quiet_window: Seconds of inactivity that close a batch
            poll_interval: How often the idle wait checks the stop flag
        """
        self.events = events
        self.quiet_window = quiet_window
        self.poll_interval = poll_interval

    def wait_first(self, stop: threading.Event | None = None) -> str | None:
        """Block until an event arrives; None once ``stop`` is set."""
        while stop is None or not stop.is_set():
            try:
                return self.events.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
        return None

    def next_batch(self, stop: threading.Event | None = None) -> list[str] | None:
        """Wait for and return the next batch, or None once ``stop`` is set."""
        first = self.wait_first(stop)
        if first is None:
            return None
        batch = collect(self.events, self.quiet_window, first=first)
        logger.debug(f"Collected batch of {len(batch)} event(s)")
        return batch
