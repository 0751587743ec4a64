"""Go toolchain metadata source.

Finds the module root with ``go env GOMOD`` and fetches the package snapshot
with ``go list -json ./...``.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from depwatch.command_executor import CommandExecutor
from depwatch.constants import DEFAULT_GO_BINARY
from depwatch.exceptions import ModuleRootError, SnapshotError
from depwatch.logging import get_logger
from depwatch.package import Package, PackageSnapshot

logger = get_logger(__name__)


def find_module_root(
    start_dir: str | Path,
    go_binary: str = DEFAULT_GO_BINARY,
    executor: CommandExecutor | None = None,
) -> Path:
    """Locate the directory containing go.mod.

    Args:
        start_dir: Directory to start from
        go_binary: Go executable
        executor: Command executor (defaults to one rooted at start_dir)

    Returns:
        Absolute module root directory

    Raises:
        ModuleRootError: If start_dir is not inside a Go module
        SnapshotError: If the go command fails
    """
    start = Path(start_dir).resolve()
    if not start.is_dir():
        raise ModuleRootError(f"Not a directory: {start}", directory=str(start))

    executor = executor or CommandExecutor(working_dir=start)
    cmd = [go_binary, "env", "GOMOD"]
    result = executor.execute(cmd, cwd=start)
    if not result.success:
        raise SnapshotError(
            "Failed to run `go env GOMOD`", command=cmd, exit_code=result.exit_code, stderr=result.stderr
        )

    gomod = result.stdout.strip()
    # Windows prints NUL while os.devnull is "nul"
    if not gomod or gomod.lower() == os.devnull.lower():
        raise ModuleRootError("The directory is not within a Go module", directory=str(start))
    return Path(gomod).parent


def parse_go_list_output(text: str) -> list[dict[str, Any]]:
    """Decode the concatenated JSON objects printed by ``go list -json``.

    Args:
        text: Raw command output

    Returns:
        One dictionary per package

    Raises:
        SnapshotError: If the output is not a sequence of JSON objects
    """
    decoder = json.JSONDecoder()
    objects: list[dict[str, Any]] = []
    pos = 0
    end = len(text)
    while True:
        while pos < end and text[pos].isspace():
            pos += 1
        if pos >= end:
            return objects
        try:
            obj, pos = decoder.raw_decode(text, pos)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Failed to decode JSON: {e}") from e
        if not isinstance(obj, dict):
            raise SnapshotError(f"Expected a JSON object, got {type(obj).__name__}")
        objects.append(obj)


def load_snapshot(
    module_root: str | Path,
    go_binary: str = DEFAULT_GO_BINARY,
    executor: CommandExecutor | None = None,
) -> PackageSnapshot:
    """Fetch every package of the module.

    Args:
        module_root: Module root directory
        go_binary: Go executable
        executor: Command executor (defaults to one rooted at module_root)

    Returns:
        PackageSnapshot keyed by package directory

    Raises:
        SnapshotError: If ``go list`` fails or its output is malformed
    """
    executor = executor or CommandExecutor(working_dir=module_root)
    cmd = [go_binary, "list", "-json", "./..."]
    result = executor.execute(cmd, cwd=module_root)
    if not result.success:
        raise SnapshotError(
            "Failed to run `go list -json ./...`",
            command=cmd,
            exit_code=result.exit_code,
            stderr=result.stderr,
        )

    # go list writes UTF-8 JSON; the executor replaces undecodable bytes
    if "\ufffd" in result.stdout:
        raise SnapshotError("Output of `go list -json ./...` is not valid UTF-8", command=cmd)

    packages = []
    for obj in parse_go_list_output(result.stdout):
        try:
            packages.append(Package.from_go_list(obj))
        except KeyError as e:
            raise SnapshotError(f"Package record missing field {e}") from e

    logger.info(f"Loaded {len(packages)} packages from {module_root}")
    return PackageSnapshot(packages)
