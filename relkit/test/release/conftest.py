from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from relkit.core.config import Config
from relkit.core.result import Ok, Result
from relkit.output.console import MockConsole
from relkit.release.interaction import ScriptedReader
from relkit.release.steps import StepContext
from relkit.release.vcs import MemoryVcs
from relkit.release.version_file import render

VERSION_FILE = "version.sbt"
DECLARATION = "version in ThisBuild"


@dataclass
class Harness:
    """A StepContext plus handles on its fakes."""

    root: Path
    vcs: MemoryVcs
    reader: ScriptedReader
    console: MockConsole
    ctx: StepContext
    test_runs: list[str] = field(default_factory=list)

    @property
    def version_text(self) -> str:
        return (self.root / VERSION_FILE).read_text(encoding="utf-8")


@pytest.fixture
def make_harness(tmp_path: Path) -> Callable[..., Harness]:
    def make(
        *,
        answers: Iterable[str | None] = (),
        version: str | None = "1.2.0-SNAPSHOT",
        config: Config | None = None,
        tests: Result[None, str] = Ok(None),
        snapshot_deps: Result[frozenset[str], str] = Ok(frozenset()),
    ) -> Harness:
        vcs = MemoryVcs(root=tmp_path)
        if version is not None:
            content = render(DECLARATION, version, "\n")
            (tmp_path / VERSION_FILE).write_text(content, encoding="utf-8")
            vcs.committed[VERSION_FILE] = content

        reader = ScriptedReader.of(answers)
        console = MockConsole()
        test_runs: list[str] = []

        def run_tests() -> Result[None, str]:
            test_runs.append("run")
            return tests

        ctx = StepContext(
            root=tmp_path,
            config=config or Config(),
            vcs=vcs,
            reader=reader,
            console=console,
            line_sep="\n",
            run_tests=run_tests,
            find_snapshot_dependencies=lambda: snapshot_deps,
        )
        return Harness(
            root=tmp_path,
            vcs=vcs,
            reader=reader,
            console=console,
            ctx=ctx,
            test_runs=test_runs,
        )

    return make
