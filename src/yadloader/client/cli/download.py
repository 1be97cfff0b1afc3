"""Download command for the yadloader CLI.

Commands:
- download: Mirror a public share into a local folder
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from yadloader.client.api import DiskFile, HTTPClient
from yadloader.client.cli.options import make_client_config, shared_options
from yadloader.client.cli.progress import StatusLine, format_size, setup_logging
from yadloader.client.download import FileDownloader
from yadloader.client.errors import YaDiskError
from yadloader.client.mirror import mirror_files
from yadloader.core.types import FailurePolicy


@click.command()
@click.argument("link")
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Folder to download into.",
)
@shared_options
@click.option("--chunk-size", type=click.IntRange(min=1), help="Download buffer size in bytes (default 1MB).")
@click.option("--verify", is_flag=True, help="Check size and hash of every downloaded file.")
@click.option("--fail-fast", is_flag=True, help="Stop at the first failed download.")
@click.option("--skip-existing", is_flag=True, help="Skip files already present with the listed size.")
def download(
    link: str,
    output: Path,
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
    chunk_size: int | None,
    verify: bool,
    fail_fast: bool,
    skip_existing: bool,
) -> None:
    """Download every file below PATH in the public share LINK.

    Folders are recreated under OUTPUT. A failed file is reported and
    skipped unless --fail-fast is given; the exit status is 1 if any
    file failed.
    """
    config = make_client_config(
        config_path,
        limit=limit,
        timeout=timeout,
        page_delay=page_delay,
        max_retries=max_retries,
        max_depth=max_depth,
        max_files=max_files,
        chunk_size=chunk_size,
        verify_checksum=True if verify else None,
        on_download_error=FailurePolicy.ABORT if fail_fast else None,
    )
    status = StatusLine(enabled=not no_progress)
    setup_logging(verbose, status)

    def on_file(disk_file: DiskFile, error: Exception | None) -> None:
        status.clear()
        if error is None:
            click.echo(f"  ↓ {disk_file.path}")
        else:
            click.echo(f"  ✗ {disk_file.path}: {error}")
        status.redraw()

    try:
        with HTTPClient(config) as client:
            files = client.get_tree(link, path, progress=status.walk_progress)
            status.finish()
            total_size = sum(f.size for f in files)
            click.echo(f"Found {len(files)} file(s), {format_size(total_size)}")

            result = mirror_files(
                FileDownloader(client),
                files,
                output,
                policy=config.on_download_error,
                skip_existing=skip_existing,
                check_hash=config.verify_checksum,
                on_file=on_file,
            )
    except (YaDiskError, OSError, ValueError) as e:
        status.finish()
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        status.finish()
        click.echo("Interrupted.", err=True)
        sys.exit(130)

    click.echo(
        f"Downloaded {len(result.downloaded)} file(s) ({format_size(result.bytes_written)}), "
        f"skipped {len(result.skipped)}, failed {len(result.failed)}"
    )
    if not result.ok:
        click.echo(click.style("\nErrors:", fg="red"), err=True)
        for file_path, error in result.failed:
            click.echo(f"  ✗ {file_path}: {error}", err=True)
        sys.exit(1)
