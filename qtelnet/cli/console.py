"""Console and logging configuration module for qtelnet.

Logging goes through a Rich handler on a shared console. While a capture is
being decoded a progress bar is pinned to the bottom of the screen, and log
records are printed above it rather than through it.
"""

from __future__ import annotations

import logging
import threading
from itertools import count
from logging import WARNING, getLogger

from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

# Shared Rich console for logs and decoded output
console = Console()

progress_lock = threading.RLock()
progress = Progress(
    SpinnerColumn(),
    TextColumn("[bold blue]{task.description}"),
    BarColumn(),
    DownloadColumn(),
    TimeElapsedColumn(),
    console=console,
    expand=True,
)
live_display = Live(
    progress,
    console=console,
    refresh_per_second=10,
    transient=True,  # Progress bars vanish once decoding is done
    auto_refresh=False,
)

# Progress task names to Rich task IDs
_active_tasks: dict[str, TaskID] = {}
_task_counter = count(1)


class LiveDisplayHandler(RichHandler):
    """Rich log handler that prints above the progress bar when one is shown."""

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record without tearing the live display."""
        with progress_lock:
            # Printing through the live display's console lands above the bar
            super().emit(record)
            if live_display.is_started:
                live_display.refresh()


logging.basicConfig(
    level=WARNING,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[LiveDisplayHandler(console=console, rich_tracebacks=True, show_time=True)],
    force=True,
)

log = getLogger("qtelnet")


def set_verbosity(verbose: int) -> None:
    """Set the package log level from a count of ``-v`` flags."""
    if verbose >= 2:  # noqa: PLR2004
        log.setLevel("DEBUG")
    elif verbose == 1:
        log.setLevel("INFO")
    else:
        log.setLevel("WARNING")


def create_progress(description: str, total: float | None = None, task_id: str | None = None) -> str:
    """Create a new progress bar, starting the live display if needed.

    Args:
        description: Description of the task
        total: Total number of steps, or None if unknown
        task_id: Optional name for the task (generated if not provided)

    Returns:
        Name of the task for later updates
    """
    with progress_lock:
        if not live_display.is_started:
            live_display.start()
        if task_id is None:
            task_id = f"task_{next(_task_counter)}"
        _active_tasks[task_id] = progress.add_task(description, total=total)
        live_display.refresh()
        return task_id


def update_progress(task_id: str, advance: float) -> None:
    """Advance a progress bar."""
    with progress_lock:
        if task_id not in _active_tasks:
            log.warning("Attempted to update non-existent progress task: %s", task_id)
            return
        progress.update(_active_tasks[task_id], advance=advance)
        if live_display.is_started:
            live_display.refresh()


def complete_progress(task_id: str) -> None:
    """Finish a progress bar, stopping the live display when none remain."""
    with progress_lock:
        if task_id not in _active_tasks:
            log.warning("Attempted to complete non-existent progress task: %s", task_id)
            return
        progress_task_id = _active_tasks.pop(task_id)
        task = progress.tasks[progress_task_id]
        progress.update(progress_task_id, completed=task.total if task.total is not None else task.completed)
        progress.remove_task(progress_task_id)
        if not _active_tasks and live_display.is_started:
            live_display.stop()
