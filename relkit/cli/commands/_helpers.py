"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from relkit.core.errors import ErrorCode
from relkit.core.result import Err, Result
from relkit.output.console import Style
from relkit.release.state import AbortKind

if TYPE_CHECKING:
    from relkit.cli.context import CLIContext


_ABORT_CODES: dict[AbortKind, ErrorCode] = {
    "precondition": ErrorCode.ENV_ERROR,
    "sequence": ErrorCode.ENV_ERROR,
    "dependencies": ErrorCode.USER_ERROR,
    "input": ErrorCode.USER_ERROR,
    "tests": ErrorCode.BUILD_ERROR,
    "vcs": ErrorCode.VCS_ERROR,
    "io": ErrorCode.IO_ERROR,
}


def abort_exit_code(kind: AbortKind) -> ErrorCode:
    return _ABORT_CODES[kind]


def exit_on_error[T, E](
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.ENV_ERROR,
) -> None:
    """Exit with error if result is Err, otherwise return.

    Expects error objects to have 'message' and optional 'hint' attributes.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        raise typer.Exit(code=int(error_code))


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
