"""Pytest configuration and fixtures for depwatch tests."""

import io
from collections.abc import Generator

import pytest
from rich.console import Console

from depwatch.logging import clear_batch_context, setup_logging
from depwatch.package import PackageSnapshot
from depwatch.revdeps import ReverseIndex, build_reverse_index
from tests.helpers.packages import make_package
from tests.mocks.mock_runner import FakeRunner


@pytest.fixture
def example_snapshot() -> PackageSnapshot:
    """Example module: core (tests) <- api (tests) <- cmd (no tests).

    Returns:
        PackageSnapshot with three packages under /src/app
    """
    return PackageSnapshot(
        [
            make_package("core", tests=["core_test.go"], ignored=["core_windows.go"]),
            make_package("api", tests=["api_test.go"], xtests=["api_ext_test.go"], deps=["core"]),
            make_package("cmd", files=["main.go"], deps=["api"]),
        ]
    )


@pytest.fixture
def example_index(example_snapshot: PackageSnapshot) -> ReverseIndex:
    """Reverse index of the example snapshot."""
    return build_reverse_index(example_snapshot)


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Runner that passes every invocation."""
    return FakeRunner()


@pytest.fixture
def console_output() -> tuple[Console, io.StringIO]:
    """A rich console writing plain text into a buffer."""
    buffer = io.StringIO()
    return Console(file=buffer, force_terminal=False, color_system=None, width=200), buffer


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Restore the import-time logging setup after every test."""
    yield
    clear_batch_context()
    setup_logging(level="warn", console_output=True, json_output=False)
