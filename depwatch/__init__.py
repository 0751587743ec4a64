"""depwatch - dependency-aware test watcher.

Reruns exactly the package tests a change can affect.
"""

__version__ = "0.1.0"

from depwatch.constants import BatchOutcome
from depwatch.exceptions import DepwatchError
from depwatch.package import Package, PackageSnapshot
from depwatch.resolver import resolve
from depwatch.revdeps import ReverseIndex, build_reverse_index

__all__ = [
    "__version__",
    "BatchOutcome",
    "DepwatchError",
    # Core model
    "Package",
    "PackageSnapshot",
    "ReverseIndex",
    "build_reverse_index",
    "resolve",
]
