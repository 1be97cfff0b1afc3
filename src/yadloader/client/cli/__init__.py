"""Command-line interface for yadloader.

This module provides the main CLI entry point and assembles all commands.

Commands:
- tree: List every file of a public share
- download: Mirror a public share into a local folder
"""

from __future__ import annotations

import click

from yadloader.client.cli.config import (
    build_client_config,
    get_config_dir,
    get_config_file,
    load_config,
)
from yadloader.client.cli.download import download
from yadloader.client.cli.tree import tree


@click.group()
@click.version_option(package_name="yadloader")
def cli() -> None:
    """yadloader - list and download Yandex.Disk public shares."""


cli.add_command(tree)
cli.add_command(download)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "build_client_config",
    "get_config_dir",
    "get_config_file",
    "load_config",
]
