"""Tests for the dispatch loop."""

import io
import queue
import sys
import threading
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from depwatch.config import RunnerConfig
from depwatch.constants import BatchOutcome
from depwatch.debounce import DebounceCollector
from depwatch.dispatch import Dispatcher, describe_batch, drain_errors
from depwatch.exceptions import ExecutionError, WatchError
from depwatch.package import PackageSnapshot
from depwatch.revdeps import ReverseIndex
from depwatch.runner import PackageRunner
from tests.helpers.packages import import_path, source_path
from tests.mocks.mock_runner import FakeRunner


@pytest.fixture
def events() -> "queue.Queue[str]":
    return queue.Queue()


@pytest.fixture
def make_dispatcher(
    example_snapshot: PackageSnapshot,
    example_index: ReverseIndex,
    events: "queue.Queue[str]",
    console_output: tuple[Console, io.StringIO],
):
    console, _ = console_output

    def _make(runner: FakeRunner) -> Dispatcher:
        collector = DebounceCollector(events, quiet_window=0.05, poll_interval=0.01)
        return Dispatcher(example_snapshot, example_index, collector, runner, console=console)

    return _make


class TestDescribeBatch:
    """Tests for describe_batch()."""

    def test_single(self) -> None:
        assert describe_batch(["/src/app/core/core.go"]) == "/src/app/core/core.go changed"

    def test_many(self) -> None:
        """The first path is named; the rest are counted."""
        assert describe_batch(["a.go", "b.go", "c.go"]) == "a.go changed (and 2 others)"

    def test_duplicates_counted(self) -> None:
        """The count is of events, not distinct files."""
        assert describe_batch(["a.go", "a.go"]) == "a.go changed (and 1 others)"


class TestHandleBatch:
    """Tests for Dispatcher.handle_batch()."""

    def test_passed(self, make_dispatcher, fake_runner: FakeRunner, console_output) -> None:
        """Affected packages are run in sorted order and reported as passed."""
        _, buffer = console_output
        dispatcher = make_dispatcher(fake_runner)

        report = dispatcher.handle_batch([source_path("core", "core.go")])

        assert report.outcome is BatchOutcome.PASSED
        assert report.targets == [import_path("api"), import_path("core")]
        assert fake_runner.calls == [[import_path("api"), import_path("core")]]
        output = buffer.getvalue()
        assert "/src/app/core/core.go changed" in output
        assert "Running tests in 2 packages..." in output
        assert "Tests passed" in output

    def test_no_tests(self, make_dispatcher, fake_runner: FakeRunner, console_output) -> None:
        """Nothing to run means the runner is never invoked."""
        _, buffer = console_output
        dispatcher = make_dispatcher(fake_runner)

        report = dispatcher.handle_batch([source_path("cmd", "main.go")])

        assert report.outcome is BatchOutcome.NO_TESTS
        assert report.targets == []
        assert fake_runner.calls == []
        assert "No affected tests to run" in buffer.getvalue()

    def test_failed(self, make_dispatcher, console_output) -> None:
        """A non-zero exit is reported with its status."""
        _, buffer = console_output
        runner = FakeRunner(exit_code=2)
        dispatcher = make_dispatcher(runner)

        report = dispatcher.handle_batch([source_path("api", "api_test.go")])

        assert report.outcome is BatchOutcome.FAILED
        assert report.error == "exit status 2"
        assert "Running tests in 1 package..." in buffer.getvalue()
        assert "Tests failed: exit status 2" in buffer.getvalue()

    def test_executor_error_is_reported_not_raised(self, make_dispatcher, console_output) -> None:
        """A test command that cannot start fails the batch only."""
        _, buffer = console_output
        runner = FakeRunner(error=ExecutionError("Command not found: go", ["go", "test"]))
        dispatcher = make_dispatcher(runner)

        report = dispatcher.handle_batch([source_path("core", "core_test.go")])

        assert report.outcome is BatchOutcome.FAILED
        assert report.error == "Command not found: go"
        assert "Tests failed: Command not found: go" in buffer.getvalue()

    def test_batches_are_numbered(self, make_dispatcher, fake_runner: FakeRunner) -> None:
        """Each handled batch increments the counter."""
        dispatcher = make_dispatcher(fake_runner)
        dispatcher.handle_batch(["/elsewhere/x.go"])
        dispatcher.handle_batch(["/elsewhere/y.go"])
        assert dispatcher.batches_handled == 2

    def test_bracketed_paths_are_printed_verbatim(self, make_dispatcher, fake_runner: FakeRunner, console_output) -> None:
        """Paths are not interpreted as console markup."""
        _, buffer = console_output
        dispatcher = make_dispatcher(fake_runner)
        dispatcher.handle_batch(["/src/[red]odd/x.go"])
        assert "/src/[red]odd/x.go changed" in buffer.getvalue()


class TestRun:
    """Tests for the loop itself."""

    def test_runs_until_shutdown(self, make_dispatcher, events) -> None:
        """Batches are handled one after another until shut down."""
        runner = FakeRunner()
        dispatcher = make_dispatcher(runner)

        def _after_run(targets: list[str]) -> None:
            if len(runner.calls) == 2:
                dispatcher.shutdown()
            else:
                events.put(source_path("api", "api_test.go"))

        runner.on_run = _after_run
        events.put(source_path("core", "core_test.go"))

        thread = threading.Thread(target=dispatcher.run, daemon=True)
        thread.start()
        thread.join(timeout=5.0)

        assert not thread.is_alive()
        assert dispatcher.stopped
        assert runner.calls == [[import_path("core")], [import_path("api")]]

    def test_abort_raises_watch_error(self, make_dispatcher, fake_runner: FakeRunner) -> None:
        """An aborted loop surfaces the watch error."""
        dispatcher = make_dispatcher(fake_runner)
        error = WatchError("Watch on directory stopped unexpectedly", path="/src/app/core")
        dispatcher.abort(error)

        with pytest.raises(WatchError) as exc_info:
            dispatcher.run()
        assert exc_info.value is error

    def test_first_abort_wins(self, make_dispatcher, fake_runner: FakeRunner) -> None:
        """Later errors do not replace the first."""
        dispatcher = make_dispatcher(fake_runner)
        first = WatchError("first")
        dispatcher.abort(first)
        dispatcher.abort(WatchError("second"))

        with pytest.raises(WatchError, match="first"):
            dispatcher.run()

    def test_abort_during_collection_starts_no_run(
        self,
        example_snapshot: PackageSnapshot,
        example_index: ReverseIndex,
        console_output: tuple[Console, io.StringIO],
    ) -> None:
        """A batch collected while the watch broke is discarded."""
        runner = FakeRunner()
        collector = MagicMock()
        dispatcher = Dispatcher(example_snapshot, example_index, collector, runner, console=console_output[0])
        error = WatchError("Filesystem observer stopped unexpectedly")

        def _collect_then_break(stop: threading.Event) -> list[str]:
            dispatcher.abort(error)
            return [source_path("core", "core.go")]

        collector.next_batch.side_effect = _collect_then_break

        with pytest.raises(WatchError) as exc_info:
            dispatcher.run()

        assert exc_info.value is error
        assert runner.calls == []
        assert dispatcher.batches_handled == 0

    def test_error_during_run_finishes_current_batch(self, make_dispatcher, events) -> None:
        """A watch error raised mid-run lets the run finish, then stops the loop."""
        runner = FakeRunner()
        dispatcher = make_dispatcher(runner)
        runner.on_run = lambda targets: dispatcher.abort(WatchError("broken"))
        events.put(source_path("core", "core_test.go"))

        with pytest.raises(WatchError):
            dispatcher.run()
        assert len(runner.calls) == 1


class TestDrainErrors:
    """Tests for drain_errors()."""

    def test_forwards_first_error(self) -> None:
        errors: queue.Queue[WatchError] = queue.Queue()
        received: list[WatchError] = []
        done = threading.Event()

        def _on_error(error: WatchError) -> None:
            received.append(error)
            done.set()

        thread = drain_errors(errors, _on_error)
        error = WatchError("Filesystem observer stopped unexpectedly")
        errors.put(error)

        assert done.wait(timeout=2.0)
        thread.join(timeout=2.0)
        assert received == [error]
        assert thread.daemon


class TestUndecodableOutput:
    """Test output that is not valid UTF-8."""

    def test_batch_fails_and_loop_survives(
        self,
        example_snapshot: PackageSnapshot,
        example_index: ReverseIndex,
        events: "queue.Queue[str]",
        console_output: tuple[Console, io.StringIO],
    ) -> None:
        """A failing run with garbage output is reported as FAILED."""
        console, buffer = console_output
        config = RunnerConfig(
            command=[sys.executable, "-c", "import sys; sys.stdout.buffer.write(b'\\xff\\xfe bad'); sys.exit(1)"],
            stream_output=False,
        )
        dispatcher = Dispatcher(
            example_snapshot,
            example_index,
            DebounceCollector(events, quiet_window=0.05, poll_interval=0.01),
            PackageRunner(config),
            console=console,
        )

        report = dispatcher.handle_batch([source_path("core", "core.go")])

        assert report.outcome is BatchOutcome.FAILED
        assert report.run is not None
        assert "bad" in report.run.output
        assert "Tests failed: exit status 1" in buffer.getvalue()
