"""Command-line interface for ercluster."""

from ercluster.cli.main import cli

__all__ = ["cli"]
