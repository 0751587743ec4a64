"""depwatch configuration management using Pydantic."""

from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from depwatch.constants import (
    CONFIG_DIR,
    CONFIG_FILE,
    DEFAULT_GO_BINARY,
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_QUIET_WINDOW_MS,
    DEFAULT_TEST_COMMAND,
)
from depwatch.exceptions import ConfigurationError


class WatchConfig(BaseModel):
    """File watching and debounce settings."""

    quiet_window_ms: int = Field(default=DEFAULT_QUIET_WINDOW_MS, ge=10, le=10000)
    poll_interval_seconds: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, gt=0, le=5.0)
    ignore_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))

    @property
    def quiet_window(self) -> float:
        """Quiet window in seconds."""
        return self.quiet_window_ms / 1000.0


class RunnerConfig(BaseModel):
    """Test executor settings."""

    command: list[str] = Field(default_factory=lambda: list(DEFAULT_TEST_COMMAND), min_length=1)
    extra_args: list[str] = Field(default_factory=list)
    timeout_seconds: int | None = Field(default=None, ge=1)
    stream_output: bool = True


class ToolchainConfig(BaseModel):
    """Build-system metadata source settings."""

    go_binary: str = DEFAULT_GO_BINARY


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="info", pattern="^(debug|info|warn|error)$")
    directory: str | None = None
    json_output: bool = True


class DepwatchConfig(BaseModel):
    """Complete depwatch configuration."""

    watch: WatchConfig = Field(default_factory=WatchConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @staticmethod
    def default_path(module_root: str | Path | None = None) -> Path:
        """Location of the config file for a module root."""
        base = Path(module_root) if module_root is not None else Path(".")
        return base / CONFIG_DIR / CONFIG_FILE

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "DepwatchConfig":
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. Defaults to .depwatch/config.yaml

        Returns:
            DepwatchConfig instance

        Raises:
            ConfigurationError: If the file is not valid YAML or fails validation
        """
        config_path = cls.default_path() if config_path is None else Path(config_path)

        if not config_path.exists():
            return cls()

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}", {"error": str(e)}) from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping in {config_path}")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DepwatchConfig":
        """Create configuration from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            DepwatchConfig instance
        """
        try:
            return cls(**data)
        except PydanticValidationError as e:
            raise ConfigurationError("Invalid configuration", {"errors": e.error_count()}) from e

    def save(self, config_path: str | Path | None = None) -> None:
        """Save configuration to YAML file.

        Args:
            config_path: Path to save config. Defaults to .depwatch/config.yaml
        """
        config_path = self.default_path() if config_path is None else Path(config_path)

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()

    def with_overrides(
        self,
        quiet_window_ms: int | None = None,
        log_level: str | None = None,
        log_dir: str | None = None,
    ) -> "DepwatchConfig":
        """Return a copy with command-line overrides applied."""
        data = self.to_dict()
        if quiet_window_ms is not None:
            data["watch"]["quiet_window_ms"] = quiet_window_ms
        if log_level is not None:
            data["logging"]["level"] = log_level
        if log_dir is not None:
            data["logging"]["directory"] = log_dir
        return self.from_dict(data)
