"""Capabilities the release steps delegate to.

Running the test suite and collecting unstable dependencies are not the
engine's business; steps only see these two callables. The defaults here
are driven by release.toml: a test command, and a scan of dependency
manifests for versions carrying the snapshot qualifier.
"""

from __future__ import annotations

import concurrent.futures
import re
from collections.abc import Callable, Sequence
from pathlib import Path

from relkit.core.result import Err, Ok, Result
from relkit.platform.process import run_streaming
from relkit.release.version import is_snapshot

__all__ = [
    "DependencyProbe",
    "TestRunner",
    "command_test_runner",
    "no_snapshot_dependencies",
    "snapshot_dependency_scan",
]

TestRunner = Callable[[], Result[None, str]]
DependencyProbe = Callable[[], Result[frozenset[str], str]]


def command_test_runner(root: Path, command: Sequence[str]) -> TestRunner:
    def run_tests() -> Result[None, str]:
        if not command:
            return Ok(None)
        match run_streaming(list(command), cwd=root):
            case Err(e):
                return Err(e.stderr.strip() or str(e))
            case Ok(_):
                return Ok(None)

    return run_tests


def no_snapshot_dependencies() -> Result[frozenset[str], str]:
    return Ok(frozenset())


def snapshot_dependency_scan(
    root: Path, files: Sequence[str], qualifier: str
) -> DependencyProbe:
    """Probe scanning each manifest concurrently for snapshot pins.

    Findings are reported as "<file>: <line>". The first unreadable manifest
    fails the whole probe.
    """
    token = re.compile(r"\d[\w.+-]*")

    def scan_one(name: str) -> Result[frozenset[str], str]:
        path = root / name
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return Err(f"cannot read dependency file {name}: {e}")
        found: set[str] = set()
        for line in text.splitlines():
            s = line.strip()
            if not s or s.startswith(("#", "//")):
                continue
            if any(is_snapshot(t, qualifier) for t in token.findall(s)):
                found.add(f"{name}: {s}")
        return Ok(frozenset(found))

    def probe() -> Result[frozenset[str], str]:
        if not files:
            return Ok(frozenset())
        with concurrent.futures.ThreadPoolExecutor() as ex:
            results = list(ex.map(scan_one, files))
        found: set[str] = set()
        for result in results:
            if isinstance(result, Err):
                return result
            found |= result.value
        return Ok(frozenset(found))

    return probe
