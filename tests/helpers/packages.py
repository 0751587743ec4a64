"""Builders for packages in a fake Go module."""

from collections.abc import Iterable

from depwatch.package import Package

MODULE = "example.com/app"
MODULE_ROOT = "/src/app"


def make_package(
    name: str,
    *,
    files: Iterable[str] = (),
    tests: Iterable[str] = (),
    xtests: Iterable[str] = (),
    ignored: Iterable[str] = (),
    deps: Iterable[str] = (),
    test_deps: Iterable[str] = (),
    module: str = MODULE,
    root: str = MODULE_ROOT,
) -> Package:
    """Build a package named ``name`` under the example module.

    Dependencies given as bare names are expanded to import paths inside
    ``module``; paths whose first element contains a dot are kept verbatim.
    """

    def expand(paths: Iterable[str]) -> frozenset[str]:
        return frozenset(p if "." in p.split("/")[0] else f"{module}/{p}" for p in paths)

    files = tuple(files) or (f"{name.split('/')[-1]}.go",)
    return Package(
        directory=f"{root}/{name}",
        import_path=f"{module}/{name}",
        module_path=module,
        production_files=frozenset(files),
        ignored_files=frozenset(ignored),
        test_files=frozenset(tests),
        external_test_files=frozenset(xtests),
        dependencies=expand(deps),
        test_dependencies=expand(test_deps),
    )


def import_path(name: str) -> str:
    """Import path of a package in the example module."""
    return f"{MODULE}/{name}"


def source_path(name: str, filename: str, root: str = MODULE_ROOT) -> str:
    """Absolute path of a file in an example package directory."""
    return f"{root}/{name}/{filename}"
