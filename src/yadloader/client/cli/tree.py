"""Tree command for the yadloader CLI.

Commands:
- tree: List every file of a public share
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from yadloader.client.api import HTTPClient
from yadloader.client.cli.options import make_client_config, shared_options
from yadloader.client.cli.progress import StatusLine, format_size, setup_logging
from yadloader.client.errors import YaDiskError


@click.command()
@click.argument("link")
@shared_options
@click.option("--json", "as_json", is_flag=True, help="Print files as a JSON array.")
def tree(
    link: str,
    path: str,
    limit: int | None,
    timeout: float | None,
    page_delay: float | None,
    max_retries: int | None,
    max_depth: int | None,
    max_files: int | None,
    config_path: Path | None,
    verbose: int,
    no_progress: bool,
    as_json: bool,
) -> None:
    """List every file below PATH in the public share LINK.

    Prints one "path<TAB>download-url" line per file, or a JSON array
    with --json.
    """
    config = make_client_config(
        config_path,
        limit=limit,
        timeout=timeout,
        page_delay=page_delay,
        max_retries=max_retries,
        max_depth=max_depth,
        max_files=max_files,
    )
    status = StatusLine(enabled=not (no_progress or as_json))
    setup_logging(verbose, status)

    try:
        with HTTPClient(config) as client:
            files = client.get_tree(link, path, progress=status.walk_progress)
    except YaDiskError as e:
        status.finish()
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        status.finish()
        click.echo("Interrupted.", err=True)
        sys.exit(130)
    status.finish()

    if as_json:
        click.echo(json.dumps([f.to_dict() for f in files], indent=2, ensure_ascii=False))
    else:
        for disk_file in files:
            click.echo(f"{disk_file.path}\t{disk_file.file}")

    total_size = sum(f.size for f in files)
    click.echo(f"Total: {len(files)} file(s), {format_size(total_size)}", err=True)
