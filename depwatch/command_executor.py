"""Subprocess execution with timing, timeout and debug logging.

All commands run with shell=False from an explicit working directory; the
process working directory is never changed.
"""

import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

from depwatch.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Result of command execution."""

    command: list[str]
    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int
    success: bool
    started: bool = True


class CommandExecutor:
    """Runs argument-list commands and logs their results."""

    def __init__(
        self,
        working_dir: Path | str | None = None,
        timeout: int | None = None,
    ):
        """Initialize command executor.

        Args:
            working_dir: Working directory for command execution
            timeout: Default timeout in seconds (None waits forever)
        """
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self.timeout = timeout

    def execute(
        self,
        command: list[str],
        timeout: int | None = None,
        env: dict[str, str] | None = None,
        cwd: Path | str | None = None,
        capture_output: bool = True,
    ) -> CommandResult:
        """Execute a command.

        Args:
            command: Argument list
            timeout: Timeout in seconds (overrides default)
            env: Additional environment variables
            cwd: Working directory (overrides default)
            capture_output: Capture stdout/stderr instead of inheriting the terminal

        Returns:
            CommandResult with execution details. A command that could not be
            started has ``started=False``.
        """
        if not command:
            raise ValueError("Empty command")

        cmd_args = list(command)
        start_time = time.time()

        exec_env = os.environ.copy()
        if env:
            exec_env.update(env)

        exec_cwd = Path(cwd) if cwd else self.working_dir
        effective_timeout = timeout or self.timeout

        try:
            result = subprocess.run(
                cmd_args,
                cwd=str(exec_cwd),
                env=exec_env,
                capture_output=capture_output,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=effective_timeout,
            )

            cmd_result = CommandResult(
                command=cmd_args,
                exit_code=result.returncode,
                stdout=result.stdout if capture_output else "",
                stderr=result.stderr if capture_output else "",
                duration_ms=int((time.time() - start_time) * 1000),
                success=result.returncode == 0,
            )

        except subprocess.TimeoutExpired as e:
            raw_stdout = getattr(e, "stdout", None)
            if isinstance(raw_stdout, bytes):
                timeout_stdout = raw_stdout.decode("utf-8", errors="replace")
            else:
                timeout_stdout = raw_stdout or ""
            cmd_result = CommandResult(
                command=cmd_args,
                exit_code=-1,
                stdout=timeout_stdout,
                stderr=f"Command timed out after {effective_timeout}s",
                duration_ms=int((time.time() - start_time) * 1000),
                success=False,
            )

        except FileNotFoundError:
            cmd_result = CommandResult(
                command=cmd_args,
                exit_code=-1,
                stdout="",
                stderr=f"Command not found: {cmd_args[0]}",
                duration_ms=int((time.time() - start_time) * 1000),
                success=False,
                started=False,
            )

        except OSError as e:
            cmd_result = CommandResult(
                command=cmd_args,
                exit_code=-1,
                stdout="",
                stderr=str(e),
                duration_ms=int((time.time() - start_time) * 1000),
                success=False,
                started=False,
            )

        self._log_execution(cmd_result)

        return cmd_result

    def _log_execution(self, result: CommandResult) -> None:
        """Log command execution at debug level.

        Args:
            result: Command execution result
        """
        cmd_preview = " ".join(result.command)[:100]
        if result.success:
            logger.debug(f"Command OK: {cmd_preview} (exit={result.exit_code}, {result.duration_ms}ms)")
        else:
            logger.debug(f"Command FAILED: {cmd_preview} (exit={result.exit_code}, {result.duration_ms}ms)")

