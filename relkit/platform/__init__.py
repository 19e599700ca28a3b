"""Platform abstraction layer."""

from .files import atomic_write_text, line_separator
from .process import ProcessError, run, run_streaming

__all__ = [
    # files
    "atomic_write_text",
    "line_separator",
    # process
    "ProcessError",
    "run",
    "run_streaming",
]
