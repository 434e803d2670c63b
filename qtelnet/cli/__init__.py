"""Command line interface components for qtelnet.

This module provides the capture decoder CLI along with its console output,
logging, progress tracking and output file handling.
"""

from __future__ import annotations

from .args import parse_args
from .console import complete_progress, console, create_progress, log, set_verbosity, update_progress
from .decode import CaptureDecoder, event_record
from .files import FileWriter
from .main import main

__all__ = [
    "CaptureDecoder",
    "FileWriter",
    "complete_progress",
    "console",
    "create_progress",
    "event_record",
    "log",
    "main",
    "parse_args",
    "set_verbosity",
    "update_progress",
]
