"""CLI for todoist-mirror (one-shot sync, periodic watch, status)."""

import threading
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from todoist_mirror.api import TodoistApi
from todoist_mirror.config import SyncConfig, load_config
from todoist_mirror.core.identity.index import build_identity_index, scan_notes
from todoist_mirror.core.scheduler import Scheduler, current_host_name
from todoist_mirror.core.sync.engine import SyncEngine
from todoist_mirror.exceptions import ConfigError, TransportError
from todoist_mirror.logging_config import configure_logging
from todoist_mirror.store import VaultStore

app = typer.Typer(help="Mirror Todoist projects into a markdown vault.")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to config.json"),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", help="Also write logs to this file"),
    ] = None,
) -> None:
    configure_logging(verbose=verbose, log_file=log_file)
    ctx.obj = config


def _load(ctx: typer.Context, **overrides: object) -> SyncConfig:
    try:
        return load_config(ctx.obj, **overrides)
    except ConfigError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e


def build_engine(config: SyncConfig) -> SyncEngine:
    """Wire the real API client and vault store into an engine."""
    try:
        store = VaultStore(config.vault_path, dry_run=config.dry_run)
    except ValueError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
    return SyncEngine(config, TodoistApi(config.api_token), store)


@app.command()
def sync(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Do not change anything"),
) -> None:
    """Run a single sync pass."""
    config = _load(ctx, dry_run=dry_run or None)
    engine = build_engine(config)
    try:
        report = engine.run_pass()
    except TransportError as e:
        logger.error("Cannot fetch projects: {}", e)
        raise typer.Exit(1) from e
    typer.echo(report.summary())


@app.command()
def watch(ctx: typer.Context) -> None:
    """Sync periodically until interrupted."""
    config = _load(ctx)
    engine = build_engine(config)
    scheduler = Scheduler(
        engine.run_pass,
        interval=config.sync_frequency_seconds,
        primary_device=config.primary_sync_device,
    )
    if not scheduler.start():
        logger.error("sync_frequency_seconds is 0; use 'sync' for a manual pass")
        raise typer.Exit(1)
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        logger.info("Stopping")
    finally:
        scheduler.stop()


@app.command()
def status(ctx: typer.Context) -> None:
    """Show configuration and how many notes are managed."""
    config = _load(ctx)
    try:
        store = VaultStore(config.vault_path)
    except ValueError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
    index, duplicates = build_identity_index(scan_notes(store))
    host = current_host_name()
    primary = not config.primary_sync_device or config.primary_sync_device == host

    typer.echo(f"Vault: {store.root}")
    typer.echo(f"Project folder: {config.project_folder}")
    typer.echo(f"Archive folder: {config.archive_folder}")
    typer.echo(f"Managed notes: {len(index)}")
    if duplicates:
        typer.echo(f"Duplicate IDs: {len(duplicates)}")
    typer.echo(f"Sync every: {config.sync_frequency_seconds or 'disabled'}")
    typer.echo(f"Primary device: {'yes' if primary else 'no'} (this host: {host})")
