"""depwatch CLI commands."""

from depwatch.commands.affected import affected
from depwatch.commands.packages import packages
from depwatch.commands.watch import watch

__all__ = [
    "affected",
    "packages",
    "watch",
]
