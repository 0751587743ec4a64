"""depwatch command-line interface."""

import click

from depwatch import __version__
from depwatch.commands import affected, packages, watch


@click.group()
@click.version_option(version=__version__, prog_name="depwatch")
def cli() -> None:
    """depwatch - dependency-aware test watcher for Go modules.

    Reruns exactly the package tests a change can affect.
    """


cli.add_command(watch)
cli.add_command(affected)
cli.add_command(packages)


if __name__ == "__main__":
    cli()
