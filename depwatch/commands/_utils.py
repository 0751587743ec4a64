"""Shared utilities for depwatch CLI commands."""

from pathlib import Path

from depwatch.config import DepwatchConfig
from depwatch.context import WatchContext, build_context
from depwatch.logging import setup_logging


def configure_logging(config: DepwatchConfig) -> None:
    """Apply the logging section of the configuration."""
    setup_logging(
        level=config.logging.level,
        log_dir=config.logging.directory,
        json_output=config.logging.json_output,
    )


def load_context(
    directory: str,
    config_path: str | None = None,
    quiet_window_ms: int | None = None,
    log_level: str | None = None,
    log_dir: str | None = None,
) -> WatchContext:
    """Build the application context with command-line overrides applied.

    Args:
        directory: Directory inside the Go module
        config_path: Explicit config file
        quiet_window_ms: Override for watch.quiet_window_ms
        log_level: Override for logging.level
        log_dir: Override for logging.directory

    Returns:
        WatchContext with the effective configuration
    """
    context = build_context(Path(directory), config_path=config_path)
    config = context.config.with_overrides(
        quiet_window_ms=quiet_window_ms,
        log_level=log_level,
        log_dir=log_dir,
    )
    configure_logging(config)
    return WatchContext(
        module_root=context.module_root,
        config=config,
        snapshot=context.snapshot,
        reverse_index=context.reverse_index,
    )


def absolute_paths(paths: tuple[str, ...] | list[str], base: Path | None = None) -> list[str]:
    """Make file paths absolute relative to ``base`` (default: cwd) without resolving symlinks."""
    root = base or Path.cwd()
    return [str(p) if Path(p).is_absolute() else str(root / p) for p in paths]
