"""Command line interface for brainlook."""

from brainlook.cli.main import cli

__all__ = ["cli"]
