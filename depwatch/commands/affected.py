"""depwatch affected command - resolve changed files to test targets once."""

import json

import click
from rich.console import Console
from rich.markup import escape

from depwatch.commands._utils import absolute_paths, load_context
from depwatch.exceptions import DepwatchError
from depwatch.resolver import resolve
from depwatch.runner import PackageRunner

console = Console()


@click.command()
@click.argument("files", nargs=-1, required=True)
@click.option(
    "--directory", "-d", default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Directory to start in",
)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, help="Config file")
@click.option("--run", "run_tests", is_flag=True, help="Run the affected tests")
@click.option("--json", "json_output", is_flag=True, help="Print targets as JSON")
def affected(
    files: tuple[str, ...],
    directory: str,
    config_path: str | None,
    run_tests: bool,
    json_output: bool,
) -> None:
    """List the packages whose tests are affected by FILES.

    Relative paths are taken from the current directory.

    Examples:

        depwatch affected internal/core/core.go

        git diff --name-only | xargs depwatch affected --run
    """
    try:
        context = load_context(directory, config_path=config_path)
        targets = sorted(resolve(absolute_paths(files), context.snapshot, context.reverse_index))

        if json_output:
            click.echo(json.dumps({"changed": list(files), "targets": targets}, indent=2))
        elif not targets:
            console.print("No affected tests to run")
        else:
            for target in targets:
                click.echo(target)

        if run_tests and targets:
            runner = PackageRunner(context.config.runner, working_dir=context.module_root)
            result = runner.run(targets)
            if not result.success:
                console.print(f"[red]Tests failed:[/red] exit status {result.exit_code}")
                raise SystemExit(1)
            console.print("[green]Tests passed[/green]")

    except DepwatchError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1) from None
