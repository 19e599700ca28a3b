"""The version declaration file (version.sbt by default).

The file holds exactly one declaration, surrounded by line separators:

    <sep>version in ThisBuild := "1.2.0"<sep>

It is the durable record of the selected version and is rewritten as a
whole on every change.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from relkit.core.result import Err, Ok, Result
from relkit.platform.files import atomic_write_text


@dataclass(frozen=True, slots=True)
class VersionFileError:
    message: str
    path: Path


def render(declaration: str, version: str, line_sep: str) -> str:
    return f'{line_sep}{declaration} := "{version}"{line_sep}'


def read_version(path: Path, declaration: str) -> Result[str, VersionFileError]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(VersionFileError(f"version file not found: {path}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(VersionFileError(f"cannot read version file: {e}", path=path))

    pattern = re.compile(rf'^\s*{re.escape(declaration)}\s*:=\s*"([^"]*)"\s*$', re.MULTILINE)
    m = pattern.search(text)
    if m is None:
        return Err(
            VersionFileError(f"no '{declaration} := \"...\"' declaration in {path.name}", path=path)
        )
    return Ok(m.group(1))


def write_version(
    path: Path, declaration: str, version: str, line_sep: str
) -> Result[None, VersionFileError]:
    try:
        atomic_write_text(path, render(declaration, version, line_sep))
    except OSError as e:
        return Err(VersionFileError(f"cannot write version file: {e}", path=path))
    return Ok(None)
