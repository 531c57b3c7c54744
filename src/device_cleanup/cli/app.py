#!/usr/bin/env python3
"""
Device cleanup CLI - delete devices from Intune and their matching Entra ID objects.
"""

import sys
import time
import logging
from pathlib import Path
from typing import List, Optional

import click

from device_cleanup.config import Config, ConfigError
from device_cleanup.logger import log_performance_metric, log_system_event, setup_logging
from device_cleanup.models.device import ProcessingOutcome
from device_cleanup.parsers.device_list import read_device_names
from device_cleanup.reports.outcome_log import write_outcome_log
from device_cleanup.services.entra import EntraDirectoryStore
from device_cleanup.services.graph import AuthenticationError, GraphSession
from device_cleanup.services.intune import IntuneInventoryStore
from device_cleanup.workflows.deletion import DeletionProcessor, summarize

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def _load_config(settings: Optional[str]) -> Config:
    try:
        return Config(settings_path=settings)
    except OSError as e:
        raise click.ClickException(f"Cannot read settings file: {e}")


def _print_summary(outcomes: List[ProcessingOutcome], dry_run: bool) -> None:
    summary = summarize(outcomes)
    click.echo(f"\n{'=' * 60}")
    click.echo(f" DEVICE CLEANUP SUMMARY{' (DRY RUN)' if dry_run else ''}")
    click.echo(f"{'=' * 60}")
    click.echo(f"Devices processed:        {summary['processed']}")
    click.echo(f"Found in inventory:       {summary['found_in_inventory']}")
    click.echo(f"Removed from inventory:   {summary['removed_from_inventory']}")
    click.echo(f"Found in directory:       {summary['found_in_directory']}")
    click.echo(f"Removed from directory:   {summary['removed_from_directory']}")
    click.echo(f"Devices with errors:      {summary['with_errors']}")

    failed = [o for o in outcomes if o.errors]
    if failed:
        click.echo("\nDevices with errors:")
        for outcome in failed:
            click.echo(f"  ERROR: {outcome.device_name} - {'; '.join(outcome.errors)}")


@click.group(help="Delete devices from Intune and Entra ID without touching duplicates")
def cli():
    """Device cleanup CLI."""
    pass


@cli.command("run")
@click.option("--input", "input_path", type=click.Path(path_type=Path),
              help="Device list, one name per line (overrides input_path setting)")
@click.option("--output", "output_path", type=click.Path(path_type=Path),
              help="CSV log to write (overrides output_path setting)")
@click.option("--settings", type=click.Path(exists=True, dir_okay=False),
              help="Settings YAML file")
@click.option("--dry-run/--no-dry-run", default=False,
              help="Look everything up but delete nothing (default: delete)")
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
def run_command(input_path: Optional[Path], output_path: Optional[Path], settings: Optional[str],
                dry_run: bool, log_level: Optional[str]):
    """Delete every device named in the input list."""
    config = _load_config(settings)
    setup_logging(log_level or config.log_level, config.log_to_file, config.log_dir)

    input_path = input_path or config.input_path
    output_path = output_path or config.output_path
    if not input_path or not output_path:
        raise click.UsageError("Both an input path and an output path are required "
                               "(--input/--output or input_path/output_path in settings)")

    try:
        names = read_device_names(input_path)
    except OSError as e:
        logger.error(f"Cannot read device list {input_path}: {e}")
        click.echo(f"ERROR: Cannot read device list {input_path}: {e}")
        sys.exit(1)

    try:
        config.require_valid()
        graph = GraphSession.from_config(config)
    except (ConfigError, AuthenticationError) as e:
        click.echo(f"ERROR: {e}")
        sys.exit(1)

    outcomes: List[ProcessingOutcome] = []
    interrupted = False
    with graph:
        try:
            graph.connect()
        except AuthenticationError as e:
            click.echo(f"ERROR: {e}")
            sys.exit(1)

        log_system_event("RUN_START", f"{len(names)} device(s), dry_run={dry_run}")
        if dry_run:
            click.echo("DRY RUN: lookups only, nothing will be deleted")

        start = time.time()
        processor = DeletionProcessor(IntuneInventoryStore(graph), EntraDirectoryStore(graph),
                                      dry_run=dry_run)
        try:
            for outcome in processor.iter_outcomes(names):
                outcomes.append(outcome)
        except KeyboardInterrupt:
            interrupted = True
            log_system_event("RUN_INTERRUPTED",
                             f"stopped after {len(outcomes)} of {len(names)} device(s)", "WARNING")

    write_outcome_log(outcomes, output_path)
    duration = time.time() - start
    log_performance_metric("DEVICE_CLEANUP_RUN", duration, len(outcomes),
                           sum(1 for o in outcomes if o.succeeded))
    log_system_event("RUN_END", f"log written to {output_path}")

    _print_summary(outcomes, dry_run)
    click.echo(f"\nLog written to {output_path}")

    if interrupted:
        sys.exit(EXIT_INTERRUPTED)
    sys.exit(0 if all(o.succeeded for o in outcomes) else 1)


@cli.command("check")
@click.option("--settings", type=click.Path(exists=True, dir_okay=False),
              help="Settings YAML file")
def check_command(settings: Optional[str]):
    """Validate configuration, credentials and Graph permissions."""
    config = _load_config(settings)
    setup_logging(config.log_level, False)

    problems = config.validate()
    if problems:
        for problem in problems:
            click.echo(f"ERROR: {problem}")
        sys.exit(1)

    try:
        with GraphSession.from_config(config) as graph:
            graph.connect()
            missing = graph.check_capabilities()
    except AuthenticationError as e:
        click.echo(f"ERROR: {e}")
        sys.exit(1)

    if missing:
        for capability in missing:
            click.echo(f"MISSING: permission to {capability}")
        sys.exit(1)

    click.echo("SUCCESS: configuration and Graph permissions look good")


def main():
    cli()


if __name__ == "__main__":
    main()
