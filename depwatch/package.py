"""Package records and the read-only package snapshot."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


def _names(data: Mapping[str, Any], *keys: str) -> frozenset[str]:
    merged: set[str] = set()
    for key in keys:
        merged.update(data.get(key) or ())
    return frozenset(merged)


@dataclass(frozen=True)
class Package:
    """One compilation unit as reported by the build system.

    File sets hold bare file names relative to ``directory``. ``dependencies``
    is the (transitive) set of import paths the production code imports;
    ``test_dependencies`` are the direct imports of the test files only.
    """

    directory: str
    import_path: str
    module_path: str = ""
    production_files: frozenset[str] = field(default_factory=frozenset)
    ignored_files: frozenset[str] = field(default_factory=frozenset)
    test_files: frozenset[str] = field(default_factory=frozenset)
    external_test_files: frozenset[str] = field(default_factory=frozenset)
    embed_files: frozenset[str] = field(default_factory=frozenset)
    dependencies: frozenset[str] = field(default_factory=frozenset)
    test_dependencies: frozenset[str] = field(default_factory=frozenset)

    @property
    def has_tests(self) -> bool:
        return bool(self.test_files or self.external_test_files)

    def is_test_file(self, name: str) -> bool:
        return name in self.test_files or name in self.external_test_files

    @classmethod
    def from_go_list(cls, data: Mapping[str, Any]) -> Package:
        """Build a package from one object of ``go list -json`` output."""
        module = data.get("Module") or {}
        return cls(
            directory=data["Dir"],
            import_path=data["ImportPath"],
            module_path=module.get("Path", ""),
            production_files=_names(data, "GoFiles", "CgoFiles"),
            ignored_files=_names(data, "IgnoredGoFiles"),
            test_files=_names(data, "TestGoFiles"),
            external_test_files=_names(data, "XTestGoFiles"),
            embed_files=_names(data, "EmbedFiles"),
            dependencies=_names(data, "Deps"),
            test_dependencies=_names(data, "TestImports", "XTestImports"),
        )


class PackageSnapshot:
    """Immutable directory -> package mapping fetched once at startup."""

    def __init__(self, packages: Iterable[Package]) -> None:
        by_dir: dict[str, Package] = {}
        by_import: dict[str, Package] = {}
        for pkg in packages:
            by_dir[pkg.directory] = pkg
            by_import[pkg.import_path] = pkg
        self._by_dir = MappingProxyType(by_dir)
        self._by_import = MappingProxyType(by_import)

    def __len__(self) -> int:
        return len(self._by_dir)

    def __iter__(self) -> Iterator[Package]:
        return iter(self._by_dir.values())

    def __contains__(self, directory: object) -> bool:
        return directory in self._by_dir

    @property
    def directories(self) -> list[str]:
        return sorted(self._by_dir)

    def get(self, directory: str) -> Package | None:
        """Package whose source directory is ``directory``, if any."""
        return self._by_dir.get(directory)

    def by_import_path(self, import_path: str) -> Package | None:
        return self._by_import.get(import_path)
