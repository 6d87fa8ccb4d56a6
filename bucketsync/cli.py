"""Click-based CLI for bucketsync - one-way object sync between buckets."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, NoReturn, Optional

import click
import yaml

from bucketsync import __version__
from bucketsync.config import (
    ensure_config_exists,
    get_config_path,
    load_config,
    validate_config_file,
)
from bucketsync.config.schema import BucketSyncConfig
from bucketsync.errors import BucketSyncError, ConfigurationError
from bucketsync.logger import setup_logging
from bucketsync.output.console import Console, create_console
from bucketsync.storage.s3 import s3_storage_factory
from bucketsync.sync.engine import SyncEngine
from bucketsync.sync.item import list_objects
from bucketsync.sync.location import StorageLocation

EXIT_FAILURE = 1
EXIT_CONFIG = 2


def common_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that talks to storage."""
    func = click.option("--verbose", "-v", is_flag=True, help="Show detailed output")(func)
    func = click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Configuration file (default: ~/.config/bucketsync/config.yaml)",
    )(func)
    func = click.option("--profile", "-p", default=None, help="AWS profile (env: AWS_PROFILE)")(func)
    return func


def location_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Source and destination options."""
    func = click.option(
        "--destination", "-d", default=None, help="Destination URI s3://bucket/prefix (env: DESTINATION_URI)"
    )(func)
    func = click.option("--source", "-s", default=None, help="Source URI s3://bucket/prefix (env: SOURCE_URI)")(func)
    return func


def _load(
    config_path: Optional[Path],
    *,
    source: Optional[str] = None,
    destination: Optional[str] = None,
    profile: Optional[str] = None,
    verbose: bool = False,
) -> BucketSyncConfig:
    """Load configuration and apply command line overrides, exiting on errors."""
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ConfigurationError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG)

    if source:
        config.sync.source = source
    if destination:
        config.sync.destination = destination
    if profile:
        config.sync.profile = profile
    if verbose:
        config.output.verbose = True

    return config


def _make_console(config: BucketSyncConfig) -> Console:
    """Create the console and route logging through its stderr side."""
    console = create_console(verbose=config.output.verbose, colored=config.output.colored)
    setup_logging(
        verbose=config.output.verbose,
        log_file=config.output.log_file,
        console=console.err_console,
    )
    return console


def _fatal(console: Console, error: BucketSyncError) -> NoReturn:
    """Report a run-fatal error and exit."""
    console.print_error(error.message)
    sys.exit(EXIT_CONFIG if isinstance(error, ConfigurationError) else EXIT_FAILURE)


@click.group()
@click.version_option(version=__version__, prog_name="bucketsync")
def cli() -> None:
    """bucketsync - copy objects missing from a destination bucket.

    One-way sync between object-storage locations. Objects are compared
    by key and size only; copies are server-side.

    \b
    Workflows:
      bucketsync diff -s s3://src/data -d s3://dst/data   Preview copies
      bucketsync sync -s s3://src/data -d s3://dst/data   Copy missing objects
      bucketsync ls s3://src/data                          List with fingerprints
    """
    pass


@cli.command()
@location_options
@common_options
@click.option("--workers", "-w", type=click.IntRange(min=1), default=None, help="Maximum concurrent copies")
@click.option("--deadline", type=click.FloatRange(min=0, min_open=True), default=None, help="Overall time limit in seconds")
@click.option("--dry-run", "-n", is_flag=True, help="Preview copies without performing them")
@click.option("--strict/--no-strict", default=None, help="Exit non-zero when any object fails")
def sync(
    source: Optional[str],
    destination: Optional[str],
    profile: Optional[str],
    config_path: Optional[Path],
    verbose: bool,
    workers: Optional[int],
    deadline: Optional[float],
    dry_run: bool,
    strict: Optional[bool],
) -> None:
    """Copy objects that exist in the source but not in the destination.

    Copied objects land directly under the destination prefix: sub-paths
    of source keys are not mirrored.
    """
    config = _load(config_path, source=source, destination=destination, profile=profile, verbose=verbose)
    if workers is not None:
        config.concurrency.max_workers = workers
    if deadline is not None:
        config.concurrency.run_deadline = deadline
    if strict is not None:
        config.policy.fail_on_errors = strict

    console = _make_console(config)

    try:
        engine = SyncEngine.from_config(config)
        console.print_locations(engine.source, engine.destination)

        report = engine.sync(
            dry_run=dry_run,
            on_copy=lambda task: console.print_copy(task, engine.source, engine.destination),
        )
    except BucketSyncError as e:
        _fatal(console, e)

    if dry_run and report.diff:
        console.print_plan(report, engine.destination)
    console.print_sync_result(report)

    if not report.success and config.policy.fail_on_errors:
        sys.exit(EXIT_FAILURE)


@cli.command("diff")
@location_options
@common_options
def show_diff(
    source: Optional[str],
    destination: Optional[str],
    profile: Optional[str],
    config_path: Optional[Path],
    verbose: bool,
) -> None:
    """Show which objects a sync would copy, without copying."""
    config = _load(config_path, source=source, destination=destination, profile=profile, verbose=verbose)
    console = _make_console(config)

    try:
        engine = SyncEngine.from_config(config)
        console.print_locations(engine.source, engine.destination)
        report = engine.sync(dry_run=True)
    except BucketSyncError as e:
        _fatal(console, e)

    console.print_plan(report, engine.destination)


@cli.command("ls")
@click.argument("uri")
@common_options
def list_location(
    uri: str,
    profile: Optional[str],
    config_path: Optional[Path],
    verbose: bool,
) -> None:
    """List every object under URI with its fingerprint."""
    config = _load(config_path, profile=profile, verbose=verbose)
    console = _make_console(config)

    try:
        location = StorageLocation(
            uri,
            config.sync.credentials,
            s3_storage_factory(
                request_timeout=config.concurrency.request_timeout,
                poll_delay=config.verification.poll_delay,
            ),
            fallback_region=config.sync.fallback_region,
        )
        records = list_objects(location)
    except BucketSyncError as e:
        _fatal(console, e)

    console.print_listing(location, records)


# ============================================================================
# Configuration Commands
# ============================================================================


@cli.group()
def config() -> None:
    """Configuration file management.

    \b
    Lookup order (later wins):
    - ~/.config/bucketsync/config.yaml (or $BUCKETSYNC_CONFIG)
    - SOURCE_URI, DESTINATION_URI, AWS_PROFILE
    - command line options
    """
    pass


@config.command("init")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
def config_init(config_path: Optional[Path]) -> None:
    """Create a default configuration file."""
    path, created = ensure_config_exists(config_path)
    if created:
        click.echo(f"Created configuration: {path}")
    else:
        click.echo(f"Configuration already exists: {path}")


@config.command("show")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
def config_show(config_path: Optional[Path]) -> None:
    """Print the effective configuration (file + environment)."""
    config = _load(config_path)
    click.echo(yaml.dump(config.model_dump(mode="json"), default_flow_style=False, sort_keys=False))


@config.command("validate")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
def config_validate(config_path: Optional[Path]) -> None:
    """Validate a configuration file."""
    path = config_path or get_config_path()
    is_valid, errors = validate_config_file(path)

    if is_valid:
        click.echo(f"Configuration is valid: {path}")
        return

    click.echo(f"Configuration is invalid: {path}", err=True)
    for error in errors:
        click.echo(f"  - {error}", err=True)
    sys.exit(EXIT_CONFIG)


if __name__ == "__main__":
    cli()
