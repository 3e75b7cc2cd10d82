"""Thin CLI wrapper for assetpack.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from assetpack import __version__
from assetpack.config import Settings, get_settings, print_settings_json

if TYPE_CHECKING:
    from assetpack.manifest.schema import ManifestSchema

app = typer.Typer(
    name="assetpack",
    help="AssetPack - declarative asset bundling with external post-processing",
    no_args_is_help=True,
)
console = Console()

CHANGES = "Changes detected in source directory, re-packing."
WATCHING = "Watching for changes. Press Ctrl+C to quit."


def configure_logging(level: str) -> None:
    """Send log records to the console through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=console,
                show_time=False,
                show_path=False,
                show_level=False,
                markup=False,
            )
        ],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"assetpack version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """AssetPack - declarative asset bundling with external post-processing."""


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings))
    else:
        tmp_dir_display = (
            str(settings.tmp_dir) if settings.tmp_dir else "(system default)"
        )
        timeout_display = (
            str(settings.action_timeout) if settings.action_timeout else "(none)"
        )
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Operational:[/bold]")
        console.print(f"  Log level:           {settings.log_level}")
        console.print(f"  Temp directory:      {tmp_dir_display}")
        console.print(f"  Action timeout:      {timeout_display}")
        console.print()
        console.print("[bold]Watch:[/bold]")
        console.print(f"  Quiet interval:      {settings.quiet_interval}")
        console.print(f"  Settle delay:        {settings.settle_delay}")
        console.print(
            f"  Watched extensions:  {', '.join(settings.watch_extensions)}"
        )


def _load_or_exit(manifest: str) -> tuple[Path, "ManifestSchema"]:
    """Load a manifest, or print why it is invalid and exit 1."""
    from assetpack.manifest.io import load_manifest

    result = load_manifest(manifest)
    if not result.is_valid or result.manifest is None:
        console.print(f"[red]{escape(result.invalid_reason or '')}[/red]")
        raise typer.Exit(code=1)
    return result.path, result.manifest


@app.command()
def validate(
    manifest: Annotated[str, typer.Argument(help="Path to manifest file")],
) -> None:
    """Validate a manifest without building it."""
    path, loaded = _load_or_exit(manifest)

    console.print(f"[green]✓ Valid manifest: {escape(str(path))}[/green]")
    console.print(f"  Outputs: {len(loaded.outputs)}")
    console.print(f"  Output actions: {len(loaded.output_actions)}")


def _resolve_context_or_exit(
    path: Path, loaded: "ManifestSchema", overrides: dict[str, str | None]
):
    from assetpack.context import resolve_build_context
    from assetpack.errors import ArgumentInvalidError

    try:
        return resolve_build_context(path, loaded, overrides)
    except ArgumentInvalidError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(code=1) from None


@app.command()
def status(
    manifest: Annotated[str, typer.Argument(help="Path to manifest file")],
    src: Annotated[
        str | None,
        typer.Option("--src", help="Source directory override"),
    ] = None,
) -> None:
    """List inputs modified since the manifest was last saved."""
    from assetpack.build.graph import OutputGraph
    from assetpack.build.service import find_stale_inputs

    path, loaded = _load_or_exit(manifest)
    # Actions never run for a status report.
    context = _resolve_context_or_exit(path, loaded, {"src": src, "actions": "false"})

    stale = find_stale_inputs(OutputGraph.from_manifest(loaded), context)
    if not stale:
        console.print("[green]No inputs changed since the manifest was saved[/green]")
        return

    console.print(f"[bold]{len(stale)} input(s) changed since the manifest:[/bold]")
    for path in stale:
        console.print(f"  {escape(str(path))}")


def _pack_and_report(packer) -> bool:
    """Run one build, print its outcome and timing."""
    result = packer.pack()
    failure = result.outcome.failure
    if failure is not None:
        console.print(f"[red]{escape(failure.message)}[/red]")

    finished = datetime.fromtimestamp(result.started_at + result.duration)
    console.print(
        f"Packing completed in {result.duration:.2f} seconds at "
        f"{finished:%A, %B %d, %Y %H:%M:%S}."
    )
    console.print()
    return result.outcome.success


@app.command()
def build(
    manifest: Annotated[str, typer.Argument(help="Path to manifest file")],
    src: Annotated[
        str | None,
        typer.Option("--src", help="Source directory override"),
    ] = None,
    target: Annotated[
        str | None,
        typer.Option("--target", help="Target directory override"),
    ] = None,
    version: Annotated[
        str | None,
        typer.Option("--version", help="Version for versioned outputs"),
    ] = None,
    actions: Annotated[
        str | None,
        typer.Option("--actions", help="Run output actions: true or false"),
    ] = None,
    watch: Annotated[
        bool,
        typer.Option("--watch", "-w", help="Rebuild when source files change"),
    ] = False,
) -> None:
    """Build every output declared in a manifest."""
    from assetpack.build.graph import OutputGraph
    from assetpack.build.service import Packer

    settings: Settings = get_settings()
    configure_logging(settings.log_level)

    path, loaded = _load_or_exit(manifest)
    context = _resolve_context_or_exit(
        path,
        loaded,
        {"src": src, "target": target, "version": version, "actions": actions},
    )

    packer = Packer(
        OutputGraph.from_manifest(loaded),
        context,
        tmp_dir=settings.tmp_dir,
        action_timeout=settings.action_timeout,
    )
    success = _pack_and_report(packer)

    if not watch:
        if not success:
            raise typer.Exit(code=1)
        return

    _watch(packer, settings)


def _watch(packer, settings: Settings) -> None:
    from assetpack.watch import WatchScheduler, watch_forever

    def rebuild() -> None:
        console.print(CHANGES)
        _pack_and_report(packer)
        console.print(WATCHING)

    scheduler = WatchScheduler(
        rebuild,
        quiet_interval=settings.quiet_interval,
        settle_delay=settings.settle_delay,
        extensions=settings.watch_extensions,
    )

    console.print(WATCHING)
    try:
        watch_forever(scheduler, packer.context.source_root)
    except KeyboardInterrupt:
        console.print("Stopped watching.")


if __name__ == "__main__":
    app()
