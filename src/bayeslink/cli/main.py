"""Command-line interface for bayeslink.

Provides CLI commands for running a matching configuration and inspecting
its lookup properties.
"""

import dataclasses
import importlib.metadata
import sys
import time
from pathlib import Path

import click

from bayeslink.audit import LEVELS, AuditLogger, generate_run_id
from bayeslink.config import load_configuration
from bayeslink.engine import LinkageProcessor, ProcessorSettings, write_results_jsonl
from bayeslink.errors import BayesLinkError

__all__ = ["cli"]

try:
    __version__ = importlib.metadata.version("bayeslink")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"  # Fallback for development


@click.group()
@click.version_option(version=__version__, prog_name="bayeslink")
def cli() -> None:
    """Probabilistic deduplication and record linkage.

    Use 'bayeslink COMMAND --help' for command-specific help.
    """


@cli.command()
@click.argument("config_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    required=True,
    help="Output JSONL file for classified pairs",
)
@click.option(
    "--log",
    "log_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write structured JSONL audit events to this file",
)
@click.option(
    "--log-level",
    type=click.Choice(LEVELS),
    default="INFO",
    help="Lowest audit event level written (default: INFO)",
)
@click.option(
    "--emit-non-matches",
    is_flag=True,
    help="Also write pairs classified as non-matches",
)
@click.option(
    "--overwrite",
    is_flag=True,
    help="Discard any existing index contents (indexed backend)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def run(
    config_path: str,
    output: str,
    log_path: str | None,
    log_level: str,
    emit_non_matches: bool,
    overwrite: bool,
    verbose: bool,
) -> None:
    """Run deduplication or record linkage described by CONFIG_PATH.

    The mode follows the configuration: sources in group 0 are
    deduplicated, sources in groups 1 and 2 are linked.

    Examples
    --------
        bayeslink run people.json -o pairs.jsonl
        bayeslink run linkage.json -o pairs.jsonl --log events.jsonl --overwrite
    """
    logger: AuditLogger | None = None
    if log_path:
        logger = AuditLogger(generate_run_id(), Path(log_path), min_level=log_level)
    start = time.perf_counter()

    try:
        if logger:
            logger.run_started(
                command=sys.argv,
                parameters={"config": config_path, "emit_non_matches": emit_non_matches},
            )

        config = load_configuration(config_path, logger=logger)
        if overwrite:
            config = dataclasses.replace(
                config, database=dataclasses.replace(config.database, overwrite=True)
            )

        if verbose:
            click.echo(f"Configuration: {config_path}", err=True)
            click.echo(
                f"  Mode: {'deduplication' if config.is_deduplication_mode() else 'record linkage'}",
                err=True,
            )
            click.echo(f"  Backend: {config.database.backend.value}", err=True)
            lookups = ", ".join(p.name for p in config.lookup_properties) or "(exhaustive)"
            click.echo(f"  Lookup properties: {lookups}", err=True)

        processor = LinkageProcessor(
            config,
            settings=ProcessorSettings(emit_non_matches=emit_non_matches),
            logger=logger,
        )
        written = write_results_jsonl(processor.run(), Path(output))
        stats = processor.stats

        if logger:
            logger.run_finished(
                status="success",
                duration_seconds=time.perf_counter() - start,
                records_processed=stats.records_seen,
            )

        if verbose:
            click.echo("\nResults:", err=True)
            for name, value in stats.counters().items():
                click.echo(f"  {name}: {value}", err=True)

        click.secho(
            f"✓ {stats.matches} matches, {stats.possible_matches} possible matches "
            f"({written} pairs written to {output})",
            fg="green",
        )
        if stats.records_failed:
            click.secho(f"  {stats.records_failed} malformed records skipped", fg="yellow", err=True)

    except BayesLinkError as e:
        if logger:
            logger.error(type(e).__name__, str(e))
            logger.run_finished(status="failed", duration_seconds=time.perf_counter() - start)
        click.secho(f"✗ Error: {e}", fg="red", err=True)
        sys.exit(1)
    finally:
        if logger:
            logger.close()


@cli.command()
@click.argument("config_path", type=click.Path(exists=True, dir_okay=False))
def lookup(config_path: str) -> None:
    """Show the lookup properties selected for CONFIG_PATH.

    Lists matched properties ranked by their high probability and marks
    the ones the database indexes.
    """
    from bayeslink.scoring import rank_candidates

    try:
        config = load_configuration(config_path)
    except BayesLinkError as e:
        click.secho(f"✗ Error: {e}", fg="red", err=True)
        sys.exit(1)

    indexed = {p.name for p in config.lookup_properties}
    for prop in rank_candidates(config.property_list):
        marker = "*" if prop.name in indexed else " "
        click.echo(f"{marker} {prop.name}\thigh={prop.high}\tlow={prop.low}")

    if not indexed:
        click.echo("(no lookup properties: retrieval is exhaustive)")


if __name__ == "__main__":
    cli()
