"""Application context: module root, configuration, snapshot and index."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from depwatch.command_executor import CommandExecutor
from depwatch.config import DepwatchConfig
from depwatch.constants import DEFAULT_GO_BINARY
from depwatch.golist import find_module_root, load_snapshot
from depwatch.logging import get_logger
from depwatch.package import PackageSnapshot
from depwatch.revdeps import ReverseIndex, build_reverse_index

logger = get_logger(__name__)


@dataclass(frozen=True)
class WatchContext:
    """Everything resolved once at startup and shared read-only afterwards."""

    module_root: Path
    config: DepwatchConfig
    snapshot: PackageSnapshot
    reverse_index: ReverseIndex


def build_context(
    start_dir: str | Path = ".",
    config_path: str | Path | None = None,
    config: DepwatchConfig | None = None,
    executor: CommandExecutor | None = None,
) -> WatchContext:
    """Resolve the module root, load configuration and fetch the snapshot.

    Args:
        start_dir: Directory inside the module
        config_path: Explicit config file (defaults to <module root>/.depwatch/config.yaml)
        config: Pre-built configuration; skips loading from disk
        executor: Command executor for toolchain commands

    Returns:
        WatchContext

    Raises:
        SetupError: If the module root or the snapshot cannot be determined
        ConfigurationError: If the configuration file is invalid
    """
    go_binary = config.toolchain.go_binary if config else DEFAULT_GO_BINARY
    module_root = find_module_root(start_dir, go_binary=go_binary, executor=executor)

    if config is None:
        config = DepwatchConfig.load(config_path or DepwatchConfig.default_path(module_root))

    snapshot = load_snapshot(module_root, go_binary=config.toolchain.go_binary, executor=executor)
    reverse_index = build_reverse_index(snapshot)
    logger.debug(f"Context ready: {len(snapshot)} packages under {module_root}")

    return WatchContext(
        module_root=module_root,
        config=config,
        snapshot=snapshot,
        reverse_index=reverse_index,
    )
