"""
dirmirror CLI Main Entry Point.

Provides the command-line interface for one-off and periodic mirroring.
"""

from __future__ import annotations

import json
import signal
import sys
import threading
from pathlib import Path

import click
import humanize
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dirmirror import __version__
from dirmirror.core.config import DirMirrorConfig, LoggingConfig, load_config
from dirmirror.core.logging import SyncLogger, setup_logging
from dirmirror.core.models import PassOutcome, PassReport, SyncJob
from dirmirror.sync.coordinator import SyncCoordinator
from dirmirror.sync.scheduler import PeriodicScheduler

console = Console()


def _non_empty(ctx: click.Context, param: click.Parameter, value: str) -> str:
    if value is None or not value.strip():
        raise click.BadParameter(f"{param.human_readable_name} cannot be empty")
    return value


def build_coordinator(
    config: DirMirrorConfig, source: str, replica: str
) -> tuple[SyncCoordinator, SyncLogger]:
    """Create the sync logger and a coordinator for a source/replica pair."""
    try:
        job = SyncJob.from_paths(source, replica)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    sync_logger = SyncLogger()
    return SyncCoordinator(job, sync_logger, config=config.sync), sync_logger


def _configure_logging(config: DirMirrorConfig, log_file: str | None, quiet: bool) -> None:
    updates: dict[str, object] = {}
    if log_file is not None:
        updates["log_file"] = log_file
        updates["file_enabled"] = True
    else:
        updates["file_enabled"] = config.logging.file_enabled and config.logging.log_file is not None
    if quiet:
        updates["console_enabled"] = False
    logging_config = LoggingConfig.model_validate(
        {**config.logging.model_dump(), **updates}
    )
    setup_logging(logging_config, force=True)


def _print_report(report: PassReport) -> None:
    summary = report.summary
    color = "green" if report.outcome == PassOutcome.COMPLETED else "red"

    table = Table(title="Pass Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("New files", str(summary.files_new))
    table.add_row("Modified files", str(summary.files_modified))
    table.add_row("Copied", humanize.naturalsize(summary.bytes_copied, binary=True))
    table.add_row("Directories created", str(summary.dirs_created))
    table.add_row("Files deleted", str(summary.files_deleted))
    table.add_row("Directories deleted", str(summary.dirs_deleted))
    table.add_row("Errors", str(summary.errors))

    console.print(
        Panel(
            f"""[cyan]Source:[/cyan] {report.source}
[cyan]Replica:[/cyan] {report.replica}
[cyan]Outcome:[/cyan] [{color}]{report.outcome.name}[/{color}]
[cyan]Duration:[/cyan] {humanize.precisedelta(report.duration_seconds or 0, minimum_unit="milliseconds")}""",
            title="dirmirror",
        )
    )
    console.print(table)
    for error in report.errors:
        console.print(f"[red]{error}[/red]")


@click.group()
@click.version_option(version=__version__, prog_name="dirmirror")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.option("--quiet", "-q", is_flag=True, help="Suppress console log output")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    json_output: bool,
    quiet: bool,
) -> None:
    """
    dirmirror - Keep a replica directory identical to a source directory.

    Copies new and modified files, removes entries that no longer exist
    in the source, and repeats on a fixed interval.
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config)
    ctx.obj["json_output"] = json_output
    ctx.obj["quiet"] = quiet


@cli.command("run")
@click.argument("source", callback=_non_empty)
@click.argument("replica", callback=_non_empty)
@click.argument("interval", type=click.IntRange(min=1))
@click.argument("log_file", callback=_non_empty)
@click.pass_context
def run(ctx: click.Context, source: str, replica: str, interval: int, log_file: str) -> None:
    """
    Mirror SOURCE onto REPLICA every INTERVAL seconds, logging to LOG_FILE.

    One pass runs immediately; later passes follow on the interval until
    Ctrl+C. A pass still in progress is allowed to finish before exit.
    """
    config: DirMirrorConfig = ctx.obj["config"]
    _configure_logging(config, log_file, ctx.obj.get("quiet", False))
    coordinator, sync_logger = build_coordinator(config, source, replica)

    sync_logger.info("Directory synchronization started")
    sync_logger.info(f"Source: {source}")
    sync_logger.info(f"Replica: {replica}")
    sync_logger.info(f"Interval: {interval} seconds ({humanize.naturaldelta(interval)})")
    sync_logger.info(f"Log file: {log_file}")

    coordinator.run()

    scheduler = PeriodicScheduler(coordinator.run, interval, sync_logger)
    stop_event = threading.Event()

    def _request_stop(signum: int, frame: object) -> None:
        stop_event.set()

    signal.signal(signal.SIGTERM, _request_stop)
    scheduler.start()
    console.print("Press Ctrl+C to stop synchronization...")

    try:
        while not stop_event.wait(0.5):
            pass
    except KeyboardInterrupt:
        pass
    finally:
        if coordinator.guard.busy:
            console.print("[yellow]Waiting for the current pass to finish...[/yellow]")
        scheduler.stop(wait=True)

    sync_logger.info("Directory synchronization stopped")
    console.print("Directory synchronization stopped")


@cli.command("once")
@click.argument("source", callback=_non_empty)
@click.argument("replica", callback=_non_empty)
@click.option(
    "--log-file",
    default=None,
    help="Append log lines to this file",
)
@click.pass_context
def once(ctx: click.Context, source: str, replica: str, log_file: str | None) -> None:
    """Run a single pass mirroring SOURCE onto REPLICA."""
    config: DirMirrorConfig = ctx.obj["config"]
    json_output = ctx.obj.get("json_output", False)
    _configure_logging(config, log_file, ctx.obj.get("quiet", False) or json_output)
    coordinator, _ = build_coordinator(config, source, replica)

    report = coordinator.run()
    if report is None:
        console.print("[yellow]Pass skipped: another pass is in progress[/yellow]")
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(report.to_dict(), indent=2, default=str))
    else:
        _print_report(report)

    if report.outcome != PassOutcome.COMPLETED:
        sys.exit(1)


def main() -> None:
    """Main entry point."""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
