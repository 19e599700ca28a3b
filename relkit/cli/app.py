from __future__ import annotations

import os
from pathlib import Path

import typer

from relkit import __version__
from relkit.cli.commands.release_cmd import (
    STEP_COMMANDS,
    make_step_command,
    release,
    release_state,
)
from relkit.cli.context import CONFIG_ENV, ROOT_ENV
from relkit.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(release)
app.command("release-state")(release_state)
for _command_name, _step_name in STEP_COMMANDS.items():
    app.command(_command_name)(make_step_command(_step_name))


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Repository root (defaults to the current directory).",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Release config file (defaults to <root>/release.toml).",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if root is not None:
        try:
            resolved = root.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --root: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not resolved.is_dir():
            typer.echo(f"error: --root '{resolved}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[ROOT_ENV] = str(resolved)

    if config is not None:
        os.environ[CONFIG_ENV] = str(config.expanduser().resolve())


def main() -> None:
    app()
