"""Dispatch loop: debounce -> resolve -> run -> report, one batch at a time."""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from rich.console import Console
from rich.markup import escape

from depwatch.constants import BatchOutcome
from depwatch.debounce import DebounceCollector
from depwatch.exceptions import DepwatchError, WatchError
from depwatch.logging import clear_batch_context, get_logger, set_batch_context
from depwatch.package import PackageSnapshot
from depwatch.resolver import resolve
from depwatch.revdeps import ReverseIndex
from depwatch.runner import RunResult

logger = get_logger(__name__)


class Runner(Protocol):
    def run(self, targets: list[str]) -> RunResult: ...


@dataclass
class BatchReport:
    """What happened to one batch of changes."""

    changed: list[str]
    targets: list[str] = field(default_factory=list)
    outcome: BatchOutcome = BatchOutcome.NO_TESTS
    run: RunResult | None = None
    error: str | None = None


def describe_batch(batch: list[str]) -> str:
    """One-line summary of a batch, e.g. "a.go changed (and 2 others)"."""
    others = len(batch) - 1
    if others > 0:
        return f"{batch[0]} changed (and {others} others)"
    return f"{batch[0]} changed"


class Dispatcher:
    """Drives batches from the collector through resolution to the runner.

    Batches are handled strictly one after another; a new batch does not
    start collecting until the previous test run has finished.
    """

    def __init__(
        self,
        snapshot: PackageSnapshot,
        reverse_index: ReverseIndex,
        collector: DebounceCollector,
        runner: Runner,
        console: Console | None = None,
    ) -> None:
        self.snapshot = snapshot
        self.reverse_index = reverse_index
        self.collector = collector
        self.runner = runner
        self.console = console or Console()
        self.batches_handled = 0
        self._stop = threading.Event()
        self._fatal: WatchError | None = None

    def handle_batch(self, batch: list[str]) -> BatchReport:
        """Resolve and run one batch, reporting exactly one outcome.

        Test failures and executor errors are reported and swallowed; the
        loop keeps watching.
        """
        self.batches_handled += 1
        set_batch_context(batch=self.batches_handled)
        report = BatchReport(changed=list(batch))
        try:
            self.console.print(describe_batch(batch), markup=False, highlight=False)

            report.targets = sorted(resolve(batch, self.snapshot, self.reverse_index))
            if not report.targets:
                self.console.print("No affected tests to run")
                return report

            count = len(report.targets)
            noun = "package" if count == 1 else "packages"
            self.console.print(f"Running tests in {count} {noun}...")
            logger.debug("Resolved targets", extra={"targets": report.targets})

            try:
                report.run = self.runner.run(report.targets)
            except DepwatchError as e:
                logger.error(f"Test executor failed: {e}")
                report.outcome = BatchOutcome.FAILED
                report.error = e.message
                self.console.print(f"[red]Tests failed:[/red] {escape(e.message)}")
                return report

            if report.run.success:
                report.outcome = BatchOutcome.PASSED
                self.console.print("[green]Tests passed[/green]")
            else:
                report.outcome = BatchOutcome.FAILED
                report.error = f"exit status {report.run.exit_code}"
                self.console.print(f"[red]Tests failed:[/red] {report.error}")
            return report
        finally:
            self.console.print()
            clear_batch_context()

    def abort(self, error: WatchError) -> None:
        """Stop the loop because the watch is broken; ``run`` re-raises ``error``."""
        if self._fatal is None:
            self._fatal = error
        self._stop.set()

    def shutdown(self) -> None:
        """Stop the loop after the current batch."""
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def run(self) -> None:
        """Handle batches until shut down.

        Raises:
            WatchError: If ``abort`` was called
        """
        while not self._stop.is_set():
            batch = self.collector.next_batch(self._stop)
            # An abort during collection discards the batch
            if batch is None or self._fatal is not None:
                break
            self.handle_batch(batch)

        if self._fatal is not None:
            raise self._fatal


def drain_errors(errors: queue.Queue[WatchError], on_error: Callable[[WatchError], None]) -> threading.Thread:
    """Start a daemon thread that forwards the first watcher error.

    Args:
        errors: Watcher error queue
        on_error: Called with the error, normally ``Dispatcher.abort``

    Returns:
        The started thread
    """

    def _drain() -> None:
        error = errors.get()
        logger.error(f"Error watching directories: {error}")
        on_error(error)

    thread = threading.Thread(target=_drain, name="depwatch-errors", daemon=True)
    thread.start()
    return thread
