"""Command line interface components for telnet tools.

This module provides CLI-related functionality including console output,
logging, progress tracking and result files for the telnet tools command.
"""

from __future__ import annotations

from .args import parse_args
from .console import complete_progress, console, create_progress, log, set_verbosity, update_progress
from .files import FileReader, FileWriter
from .main import main

__all__ = [
    "FileReader",
    "FileWriter",
    "complete_progress",
    "console",
    "create_progress",
    "log",
    "main",
    "parse_args",
    "set_verbosity",
    "update_progress",
]
