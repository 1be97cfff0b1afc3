"""Terminal progress display for the yadloader CLI.

This module provides:
- StatusLine: Single self-overwriting line on stderr
- StatusLineAwareHandler: Logging handler that does not garble the status line
- format_size: Human-readable byte counts
"""

from __future__ import annotations

import logging

import click


def format_size(size: int) -> str:
    """Format a byte count as B/KB/MB/GB/TB."""
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"


class StatusLine:
    """A status line rewritten in place on stderr."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._last_len = 0
        self._text = ""

    def update(self, text: str) -> None:
        """Replace the status line with text."""
        if not self.enabled:
            return
        self._text = text
        self._draw()

    def clear(self) -> None:
        """Erase the status line from the terminal."""
        if self._last_len > 0:
            click.echo("\r" + " " * self._last_len + "\r", nl=False, err=True)
            self._last_len = 0

    def redraw(self) -> None:
        """Draw the last status again (after a log message)."""
        if self.enabled and self._text:
            self._draw()

    def finish(self) -> None:
        """Clear the line and forget its content."""
        self.clear()
        self._text = ""

    def walk_progress(self, count: int, total_size: int) -> None:
        """Progress callback for a tree walk."""
        self.update(f"  Found {count} file(s), {format_size(total_size)}")

    def _draw(self) -> None:
        padding = " " * max(0, self._last_len - len(self._text))
        click.echo(f"\r{self._text}{padding}", nl=False, err=True)
        self._last_len = len(self._text)


class StatusLineAwareHandler(logging.Handler):
    """Logging handler that coordinates with the status line display.

    Clears the status line before printing log messages and restores it after.
    """

    def __init__(self, status_line: StatusLine | None = None) -> None:
        super().__init__()
        self._status_line = status_line

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            if self._status_line:
                self._status_line.clear()
            # Resolve stderr at emit time so the current stream is used
            click.echo(msg, err=True)
            if self._status_line:
                self._status_line.redraw()
        except Exception:
            self.handleError(record)


def setup_logging(verbosity: int, status_line: StatusLine | None = None) -> None:
    """Configure the yadloader logger for a CLI run.

    Args:
        verbosity: 0 for warnings only, 1 for info, 2 or more for debug.
        status_line: Status line to keep intact while logging.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = StatusLineAwareHandler(status_line)
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    # Replace handlers from a previous run in the same process
    yad_logger = logging.getLogger("yadloader")
    yad_logger.handlers = [handler]
    yad_logger.setLevel(level)
