"""Test executor: runs the tests of a list of packages."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from depwatch.command_executor import CommandExecutor
from depwatch.config import RunnerConfig
from depwatch.exceptions import ExecutionError
from depwatch.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RunResult:
    """Result of one test invocation."""

    targets: list[str]
    exit_code: int
    duration_seconds: float = 0.0
    output: str = ""

    @property
    def success(self) -> bool:
        """Check if the invocation passed."""
        return self.exit_code == 0


class PackageRunner:
    """Run package tests with the configured test command."""

    def __init__(
        self,
        config: RunnerConfig | None = None,
        working_dir: Path | str | None = None,
        executor: CommandExecutor | None = None,
    ) -> None:
        """Initialize runner.

        Args:
            config: Runner configuration
            working_dir: Directory the test command runs in (the module root)
            executor: Command executor (created from config when omitted)
        """
        self.config = config or RunnerConfig()
        self.executor = executor or CommandExecutor(
            working_dir=working_dir,
            timeout=self.config.timeout_seconds,
        )

    def get_command(self, targets: list[str]) -> list[str]:
        """Build the test command for a list of import paths."""
        return [*self.config.command, *self.config.extra_args, *targets]

    def run(self, targets: list[str]) -> RunResult:
        """Run the tests of ``targets``.

        Args:
            targets: Import paths to test

        Returns:
            RunResult; a failing test run is a result, not an exception

        Raises:
            ExecutionError: If the test command could not be started
        """
        cmd = self.get_command(targets)
        logger.info(f"Running: {' '.join(cmd)}")

        result = self.executor.execute(cmd, capture_output=not self.config.stream_output)
        if not result.started:
            raise ExecutionError(result.stderr or "Failed to start test command", cmd, result.exit_code)

        return RunResult(
            targets=list(targets),
            exit_code=result.exit_code,
            duration_seconds=result.duration_ms / 1000.0,
            output=result.stdout + result.stderr,
        )
