"""Options shared by the yadloader commands."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from yadloader.client.cli.config import build_client_config, load_config
from yadloader.core.config import ClientConfig

F = TypeVar("F", bound=Callable[..., Any])

_SHARED_OPTIONS = [
    click.option("--path", "-p", default="/", show_default=True, help="Folder inside the share to start from."),
    click.option("--limit", type=click.IntRange(min=1), help="Items per listing page (default 100)."),
    click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Per-request timeout in seconds (default 10)."),
    click.option("--page-delay", type=click.FloatRange(min=0), help="Pause between pages of one folder in seconds (default 5)."),
    click.option("--max-retries", type=click.IntRange(min=0), help="Retries per request (default 3)."),
    click.option("--max-depth", type=click.IntRange(min=0), help="Fail if folders nest deeper than this."),
    click.option("--max-files", type=click.IntRange(min=0), help="Fail if the share holds more files than this."),
    click.option(
        "--config",
        "config_path",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="JSON config file (default ~/.yadloader/config.json).",
    ),
    click.option("--verbose", "-v", count=True, help="Log more (-v info, -vv debug)."),
    click.option("--no-progress", is_flag=True, help="Disable the progress line."),
]


def shared_options(func: F) -> F:
    """Attach the listing options common to every command."""
    for option in reversed(_SHARED_OPTIONS):
        func = option(func)
    return func


def make_client_config(config_path: Path | None, **overrides: Any) -> ClientConfig:
    """Build the ClientConfig for a command, exiting on invalid settings."""
    try:
        return build_client_config(load_config(config_path), **overrides)
    except (TypeError, ValueError) as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e
