"""Reverse dependency index: import path -> in-module packages that depend on it."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from types import MappingProxyType

from depwatch.logging import get_logger
from depwatch.package import Package, PackageSnapshot

logger = get_logger(__name__)


def in_module(import_path: str, module_path: str) -> bool:
    """Check whether an import path belongs to a module.

    Args:
        import_path: Import path to test, e.g. "example.com/app/core"
        module_path: Module root import path, e.g. "example.com/app"

    Returns:
        True if the import path is the module root or nested under it
    """
    if not module_path:
        return False
    return import_path == module_path or import_path.startswith(module_path + "/")


class ReverseIndex:
    """Read-only multi-map from an import path to the import paths of its dependents."""

    def __init__(self, entries: Mapping[str, frozenset[str]]) -> None:
        self._entries = MappingProxyType(dict(entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, import_path: object) -> bool:
        return import_path in self._entries

    def dependents(self, import_path: str) -> frozenset[str]:
        """Packages whose production or test code imports ``import_path``."""
        return self._entries.get(import_path, frozenset())


def _record(index: dict[str, set[str]], pkg: Package, imports: frozenset[str]) -> None:
    for dep in imports:
        # A package's external tests import the package itself
        if dep == pkg.import_path:
            continue
        if in_module(dep, pkg.module_path):
            index[dep].add(pkg.import_path)


def build_reverse_index(snapshot: PackageSnapshot) -> ReverseIndex:
    """Build the reverse dependency index for every package in the snapshot.

    Production dependencies and test-only imports are merged into one set per
    key. Test imports are not expanded transitively, so a package reached
    only through a test file's indirect import is not recorded.

    Args:
        snapshot: Package snapshot

    Returns:
        ReverseIndex instance
    """
    index: dict[str, set[str]] = defaultdict(set)
    for pkg in snapshot:
        _record(index, pkg, pkg.dependencies)
        _record(index, pkg, pkg.test_dependencies)

    logger.debug(f"Built reverse index with {len(index)} keys over {len(snapshot)} packages")
    return ReverseIndex({dep: frozenset(users) for dep, users in index.items()})
