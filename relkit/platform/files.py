"""Filesystem helpers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

__all__ = ["atomic_write_text", "line_separator"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace.

    The file is rewritten, never appended. Readers see either the old
    content or the new content, never a partial write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def line_separator() -> str | None:
    """Platform line terminator, or None if the platform reports none."""
    return os.linesep or None
