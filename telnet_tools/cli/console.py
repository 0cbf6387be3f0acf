"""Console and logging configuration module for telnet tools.

Everything printed by the package goes through one Rich console: log records are
rendered by a ``RichHandler`` and progress bars for command runs live in a
``Live`` display pinned below them, so the two never overwrite each other.
"""

from __future__ import annotations

import logging
import threading
import time
from logging import DEBUG, INFO, WARNING, getLogger
from typing import Any

from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

# Shared Rich console for logs, progress and command output
console = Console()

progress_lock = threading.RLock()
progress = Progress(
    SpinnerColumn(),
    TextColumn("[bold blue]{task.description}"),
    BarColumn(),
    MofNCompleteColumn(),
    TimeElapsedColumn(),
    console=console,
    expand=True,
)

live_display = Live(
    progress,
    console=console,
    refresh_per_second=10,
    transient=False,
    auto_refresh=False,  # Refreshed by hand whenever a task changes
)

# Progress task IDs by caller-chosen name
_active_tasks: dict[str, TaskID] = {}


class LiveDisplayHandler(RichHandler):
    """Rich log handler that prints above the progress bars while they run."""

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record without tearing the live display."""
        with progress_lock:
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

log = getLogger("telnet_tools")


def set_verbosity(verbose: int) -> None:
    """Pick the package log level from a ``-v`` count.

    Args:
        verbose: 0 for warnings only, 1 for info, 2 or more for debug
    """
    if verbose >= 2:  # noqa: PLR2004
        log.setLevel(DEBUG)
    elif verbose == 1:
        log.setLevel(INFO)
    else:
        log.setLevel(WARNING)


def start_live_display() -> None:
    """Start the live display if it is not already running."""
    with progress_lock:
        if not live_display.is_started:
            live_display.start()


def stop_live_display() -> None:
    """Stop the live display once no progress task is left."""
    with progress_lock:
        if live_display.is_started and not _active_tasks:
            live_display.stop()


def create_progress(description: str, total: int = 100, task_id: str | None = None) -> str:
    """Create a new progress bar task.

    Args:
        description: Description of the task
        total: Total number of steps
        task_id: Optional identifier for the task (generated if not provided)

    Returns:
        String identifier for the task
    """
    with progress_lock:
        start_live_display()
        if task_id is None:
            task_id = f"task_{time.time()}"
        _active_tasks[task_id] = progress.add_task(description, total=total)
        live_display.refresh()
        return task_id


def update_progress(task_id: str, advance: float | None = None, description: str | None = None, **kwargs: Any) -> None:
    """Update a progress bar task.

    Args:
        task_id: Identifier for the task
        advance: Number of steps to advance
        description: Update the task description
        **kwargs: Additional arguments to pass to progress.update
    """
    with progress_lock:
        if task_id not in _active_tasks:
            log.warning("Attempted to update non-existent progress task: %s", task_id)
            return

        if advance is not None:
            kwargs["advance"] = advance
        if description is not None:
            kwargs["description"] = description
        progress.update(_active_tasks[task_id], **kwargs)
        if live_display.is_started:
            live_display.refresh()


def complete_progress(task_id: str, description: str | None = None) -> None:
    """Mark a progress bar task as complete and retire it.

    Args:
        task_id: Identifier for the task
        description: Final description for the completed task
    """
    with progress_lock:
        if task_id not in _active_tasks:
            log.warning("Attempted to complete non-existent progress task: %s", task_id)
            return

        progress_task_id = _active_tasks.pop(task_id)
        if description is not None:
            progress.update(progress_task_id, description=description)
        task = next(task for task in progress.tasks if task.id == progress_task_id)
        progress.update(progress_task_id, completed=task.total)
        if live_display.is_started:
            live_display.refresh()
        stop_live_display()
