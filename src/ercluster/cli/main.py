"""Command-line interface for ercluster.

Provides CLI commands for clustering classified pairs.
"""

import importlib.metadata
import sys
import time
from contextlib import ExitStack
from pathlib import Path

import click

from ercluster.audit import AuditLogger, generate_run_id
from ercluster.clustering.models import RefineConfig

__all__ = ["cli"]

try:
    __version__ = importlib.metadata.version("ercluster")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"  # Fallback for development


@click.group()
@click.version_option(version=__version__, prog_name="ercluster")
def cli() -> None:
    """Online clustering of classified duplicate pairs.

    Use 'ercluster COMMAND --help' for command-specific help.
    """


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output JSONL file path (default: stdout)",
)
@click.option(
    "--refine/--no-refine",
    default=True,
    show_default=True,
    help="Split transitive clusters whose members disagree",
)
@click.option(
    "--consistent",
    is_flag=True,
    help="Never present an emitted cluster as split",
)
@click.option(
    "--max-small-cluster-size",
    type=click.IntRange(min=1),
    default=10,
    show_default=True,
    help="Largest cluster refined exactly; larger ones use the greedy heuristic",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for heuristic edge sampling",
)
@click.option(
    "--batch-size",
    type=click.IntRange(min=1),
    default=1000,
    show_default=True,
    help="Pairs per online clustering step",
)
@click.option(
    "--log",
    "log_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Append JSONL audit events to this file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def cluster(
    input_path: str,
    output: str | None,
    refine: bool,
    consistent: bool,
    max_small_cluster_size: int,
    seed: int | None,
    batch_size: int,
    log_path: str | None,
    verbose: bool,
) -> None:
    """Cluster classified pairs from INPUT_PATH.

    INPUT_PATH is a JSONL file with one pair per line: record1, record2,
    classification (duplicate, non_duplicate, unknown) and confidence.
    Pairs are processed in batches; after each batch the clusters it changed
    are written as one JSON object per line.

    Examples
    --------
        ercluster cluster pairs.jsonl -o clusters.jsonl
        ercluster cluster pairs.jsonl --no-refine --batch-size 1
        ercluster cluster pairs.jsonl --consistent --seed 7 --log events.jsonl
    """
    from ercluster.api import cluster_file

    config = RefineConfig(max_small_cluster_size=max_small_cluster_size, seed=seed)
    parameters = {
        "input_path": input_path,
        "refine": refine,
        "consistent": consistent,
        "max_small_cluster_size": max_small_cluster_size,
        "seed": seed,
        "batch_size": batch_size,
    }

    if verbose:
        click.echo(f"Clustering: {input_path}", err=True)
        for name, value in parameters.items():
            click.echo(f"  {name}: {value}", err=True)

    start = time.monotonic()
    with ExitStack() as stack:
        logger = None
        if log_path:
            logger = stack.enter_context(AuditLogger(generate_run_id(), Path(log_path)))
            logger.run_started(command=sys.argv, parameters=parameters)

        try:
            if output:
                stream = stack.enter_context(Path(output).open("w", encoding="utf-8", newline="\n"))
            else:
                stream = click.get_text_stream("stdout")

            written = cluster_file(
                input_path,
                stream,
                refine=refine,
                consistent=consistent,
                config=config,
                batch_size=batch_size,
                logger=logger,
            )
        except Exception as e:
            if logger:
                logger.error(type(e).__name__, str(e))
                logger.run_finished("failed", time.monotonic() - start)
            click.secho(f"✗ Error: {e}", fg="red", err=True)
            sys.exit(1)

        if logger:
            logger.run_finished("success", time.monotonic() - start, clusters_emitted=written)

    if output or verbose:
        click.secho(f"✓ Wrote {written} cluster(s)", fg="green", err=output is None)


if __name__ == "__main__":
    cli()
