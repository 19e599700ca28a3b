from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from relkit.core.config import CONFIG_FILE_NAME, Config, load_config_or_default
from relkit.core.errors import ErrorCode
from relkit.core.result import Err
from relkit.git.repository import Repository
from relkit.output.console import ConsoleProtocol, RichConsole
from relkit.platform.files import line_separator
from relkit.release.hooks import (
    DependencyProbe,
    command_test_runner,
    no_snapshot_dependencies,
    snapshot_dependency_scan,
)
from relkit.release.interaction import LineReader, terminal_reader
from relkit.release.steps import StepContext
from relkit.release.vcs import VcsPort

ROOT_ENV = "RELKIT_ROOT"
CONFIG_ENV = "RELKIT_CONFIG"


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: Config
    console: ConsoleProtocol
    vcs: VcsPort
    reader: LineReader
    line_sep: str

    def step_context(self) -> StepContext:
        probe: DependencyProbe = no_snapshot_dependencies
        if self.config.dependencies.files:
            probe = snapshot_dependency_scan(
                self.root, self.config.dependencies.files, self.config.version.qualifier
            )
        return StepContext(
            root=self.root,
            config=self.config,
            vcs=self.vcs,
            reader=self.reader,
            console=self.console,
            line_sep=self.line_sep,
            run_tests=command_test_runner(self.root, self.config.tests.command),
            find_snapshot_dependencies=probe,
        )


def detect_root() -> Path:
    env = os.environ.get(ROOT_ENV)
    if env:
        return Path(env).expanduser().resolve()
    return Path.cwd().resolve()


def build_context() -> CLIContext:
    line_sep = line_separator()
    if line_sep is None:
        typer.echo("error: no line separator configured for this platform", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    root = detect_root()
    config_env = os.environ.get(CONFIG_ENV)
    config_path = Path(config_env) if config_env else root / CONFIG_FILE_NAME

    config_result = load_config_or_default(config_path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        root=root,
        config=config_result.value,
        console=RichConsole(),
        vcs=Repository(root),
        reader=terminal_reader,
        line_sep=line_sep,
    )
