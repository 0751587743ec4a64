"""depwatch exception hierarchy."""

from typing import Any


class DepwatchError(Exception):
    """Base exception for all depwatch errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(DepwatchError):
    """Error in depwatch configuration."""

    pass


class SetupError(DepwatchError):
    """Base error for failures before the watch loop starts."""

    pass


class ModuleRootError(SetupError):
    """The starting directory is not inside a Go module."""

    def __init__(
        self, message: str, directory: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, details)
        self.directory = directory


class SnapshotError(SetupError):
    """Package metadata could not be fetched or decoded."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        exit_code: int | None = None,
        stderr: str = "",
    ) -> None:
        details: dict[str, Any] = {}
        if command is not None:
            details["command"] = " ".join(command)
        if exit_code is not None:
            details["exit_code"] = exit_code
        super().__init__(message, details)
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class WatchError(DepwatchError):
    """A watch could not be established, or the notifier failed."""

    def __init__(
        self, message: str, path: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, details)
        self.path = path


class ExecutionError(DepwatchError):
    """The test command could not be executed at all."""

    def __init__(self, message: str, command: list[str], exit_code: int = -1, stderr: str = "") -> None:
        super().__init__(message, {"command": " ".join(command), "exit_code": exit_code})
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
