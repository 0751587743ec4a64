"""depwatch packages command - show the package snapshot."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from depwatch.commands._utils import load_context
from depwatch.context import WatchContext
from depwatch.exceptions import DepwatchError

console = Console()


def package_rows(context: WatchContext) -> list[dict[str, object]]:
    """Summaries of every package, ordered by import path."""
    rows = []
    for pkg in sorted(context.snapshot, key=lambda p: p.import_path):
        try:
            rel_dir = str(Path(pkg.directory).relative_to(context.module_root))
        except ValueError:
            rel_dir = pkg.directory
        rows.append(
            {
                "import_path": pkg.import_path,
                "directory": rel_dir,
                "test_files": len(pkg.test_files) + len(pkg.external_test_files),
                "dependents": len(context.reverse_index.dependents(pkg.import_path)),
            }
        )
    return rows


@click.command()
@click.option(
    "--directory", "-d", default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Directory to start in",
)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, help="Config file")
@click.option("--json", "json_output", is_flag=True, help="Print as JSON")
def packages(directory: str, config_path: str | None, json_output: bool) -> None:
    """List the packages of the module with their test and dependent counts."""
    try:
        context = load_context(directory, config_path=config_path)
    except DepwatchError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1) from None

    rows = package_rows(context)
    if json_output:
        click.echo(json.dumps(rows, indent=2))
        return

    table = Table(title=f"Packages in {context.module_root}")
    table.add_column("Import path", style="cyan")
    table.add_column("Directory")
    table.add_column("Test files", justify="right")
    table.add_column("Dependents", justify="right")
    for row in rows:
        table.add_row(
            str(row["import_path"]),
            str(row["directory"]),
            str(row["test_files"]),
            str(row["dependents"]),
        )
    console.print(table)
