"""depwatch watch command - rerun affected tests as files change."""

import click
from rich.console import Console
from rich.markup import escape

from depwatch.commands._utils import load_context
from depwatch.debounce import DebounceCollector
from depwatch.dispatch import Dispatcher, drain_errors
from depwatch.exceptions import DepwatchError, WatchError
from depwatch.logging import get_logger
from depwatch.runner import PackageRunner
from depwatch.watcher import Watcher

console = Console()
logger = get_logger(__name__)


@click.command()
@click.option(
    "--directory", "-d", default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Directory to start in",
)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, help="Config file")
@click.option(
    "--quiet-window", "quiet_window_ms", type=click.IntRange(10, 10000), default=None,
    help="Milliseconds without changes that close a batch",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"]),
    default=None,
    help="Log level",
)
@click.option("--log-dir", type=click.Path(file_okay=False), default=None, help="Write JSON logs here")
def watch(
    directory: str,
    config_path: str | None,
    quiet_window_ms: int | None,
    log_level: str | None,
    log_dir: str | None,
) -> None:
    """Watch the Go module and run affected tests on every change.

    Examples:

        depwatch watch

        depwatch watch -d ./service --quiet-window 500
    """
    watcher = None
    try:
        context = load_context(
            directory,
            config_path=config_path,
            quiet_window_ms=quiet_window_ms,
            log_level=log_level,
            log_dir=log_dir,
        )
        config = context.config
        logger.info(f"Module root: {context.module_root}")

        watcher = Watcher(ignore_patterns=config.watch.ignore_patterns)
        watcher.start(context.snapshot.directories)

        dispatcher = Dispatcher(
            snapshot=context.snapshot,
            reverse_index=context.reverse_index,
            collector=DebounceCollector(
                watcher.events,
                quiet_window=config.watch.quiet_window,
                poll_interval=config.watch.poll_interval_seconds,
            ),
            runner=PackageRunner(config.runner, working_dir=context.module_root),
            console=console,
        )
        drain_errors(watcher.errors, dispatcher.abort)

        console.print(f"Watching {len(context.snapshot)} directories...")
        dispatcher.run()

    except KeyboardInterrupt:
        console.print("\n[dim]Stopped watching[/dim]")
    except WatchError as e:
        console.print(f"\n[red]Error watching directories:[/red] {escape(str(e))}")
        raise SystemExit(1) from None
    except DepwatchError as e:
        console.print(f"\n[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1) from None
    finally:
        if watcher is not None:
            watcher.stop()
