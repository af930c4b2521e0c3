"""Command-line interface for bayeslink."""

from bayeslink.cli.main import cli

__all__ = ["cli"]
