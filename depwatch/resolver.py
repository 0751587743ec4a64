"""Change-to-targets resolution.

Maps a batch of changed file paths to the import paths whose tests must be
re-run, using the package snapshot and the reverse dependency index.
"""

from __future__ import annotations

import os
from collections import defaultdict
from collections.abc import Iterable

from depwatch.logging import get_logger
from depwatch.package import Package, PackageSnapshot
from depwatch.revdeps import ReverseIndex

logger = get_logger(__name__)


def group_by_directory(changed_paths: Iterable[str]) -> dict[str, set[str]]:
    """Split file paths into directory -> file names.

    Args:
        changed_paths: File paths, normally absolute

    Returns:
        Mapping of directory to the set of changed file names in it
    """
    groups: dict[str, set[str]] = defaultdict(set)
    for path in changed_paths:
        if not path or not path.strip():
            continue
        directory, name = os.path.split(os.path.normpath(path))
        if not name:
            continue
        groups[directory].add(name)
    return groups


def affected_by(pkg: Package, names: set[str], reverse_index: ReverseIndex) -> set[str]:
    """Import paths affected by changes to ``names`` inside ``pkg``.

    Args:
        pkg: Package owning the changed files
        names: Changed file names in the package directory
        reverse_index: Reverse dependency index

    Returns:
        Import paths to consider, before filtering out packages without tests
    """
    # Files excluded by build constraints are not part of the package
    remaining = {name for name in names if name not in pkg.ignored_files}
    if not remaining:
        return set()

    # Dependents never observe test-file changes
    if all(pkg.is_test_file(name) for name in remaining):
        return {pkg.import_path}

    # A package is never its own reverse dependent
    return set(reverse_index.dependents(pkg.import_path)) | {pkg.import_path}


def resolve(
    changed_paths: Iterable[str],
    snapshot: PackageSnapshot,
    reverse_index: ReverseIndex,
) -> frozenset[str]:
    """Resolve changed files to the minimal set of import paths to test.

    Dependents are looked up one level deep: a change in C reaches B when B
    imports C, but A importing B is not reached unless A also lists C among
    its own dependencies.

    Args:
        changed_paths: Changed file paths; order and duplicates are irrelevant
        snapshot: Package snapshot
        reverse_index: Reverse dependency index built from ``snapshot``

    Returns:
        Import paths of packages that have tests and may be affected
    """
    candidates: set[str] = set()
    for directory, names in group_by_directory(changed_paths).items():
        pkg = snapshot.get(directory)
        if pkg is None:
            logger.debug(f"Ignoring {len(names)} change(s) outside known packages: {directory}")
            continue
        candidates |= affected_by(pkg, names, reverse_index)

    targets = set()
    for import_path in candidates:
        pkg = snapshot.by_import_path(import_path)
        if pkg is not None and pkg.has_tests:
            targets.add(import_path)

    return frozenset(targets)
