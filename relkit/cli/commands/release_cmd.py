"""Release commands: the full run, one command per step, and the saved state."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace

import typer

from relkit.cli.context import CLIContext, build_context
from relkit.cli.commands._helpers import abort_exit_code, exit_on_error, exit_with_code
from relkit.core.errors import ErrorCode
from relkit.core.result import Err
from relkit.output.console import Style
from relkit.release.pipeline import PipelineAborted, Step, run_pipeline, select_steps
from relkit.release.state import ReleaseState, clear_state, load_state, save_state
from relkit.release.steps import DEFAULT_STEP_ORDER, release_steps, standard_steps
from relkit.release.version_file import read_version

# Command name -> step name. One command per standard step.
STEP_COMMANDS: dict[str, str] = {
    "release-git-checks": "vcs-checks",
    "release-check-snapshot-dependencies": "check-snapshot-dependencies",
    "release-inquire-versions": "inquire-versions",
    "release-run-tests": "run-tests",
    "release-set-release-version": "set-release-version",
    "release-set-next-version": "set-next-version",
    "release-commit-release-version": "commit-release-version",
    "release-commit-next-version": "commit-next-version",
    "release-tag-release": "tag-release",
    "release-push-changes": "push-changes",
}


def _fresh_state(ctx: CLIContext, *, use_defaults: bool, skip_tests: bool) -> ReleaseState:
    current = read_version(ctx.root / ctx.config.version.file, ctx.config.version.declaration)
    if isinstance(current, Err):
        ctx.console.warning(current.error.message)
    return ReleaseState(
        use_defaults=use_defaults,
        skip_tests=skip_tests,
        current_version=current.unwrap_or(None),
    )


def _resumed_state(
    ctx: CLIContext, *, use_defaults: bool | None, skip_tests: bool | None
) -> ReleaseState:
    loaded = load_state(ctx.root)
    exit_on_error(loaded, ctx, ErrorCode.ENV_ERROR)
    state = loaded.unwrap_or(None)
    if state is None:
        return _fresh_state(
            ctx, use_defaults=bool(use_defaults), skip_tests=bool(skip_tests)
        )

    if state.current_version is None:
        fresh = _fresh_state(ctx, use_defaults=state.use_defaults, skip_tests=state.skip_tests)
        if fresh.current_version is not None:
            state = state.with_current_version(fresh.current_version)
    if use_defaults is not None:
        state = replace(state, use_defaults=use_defaults)
    if skip_tests is not None:
        state = replace(state, skip_tests=skip_tests)
    return state


def _report_abort(ctx: CLIContext, aborted: PipelineAborted, *, resume_hint: bool) -> None:
    ctx.console.error(aborted.message)
    if aborted.hint:
        ctx.console.print(f"hint: {aborted.hint}", Style.DIM)
    if resume_hint and aborted.completed_steps:
        ctx.console.print(
            f"fix the problem, then resume with: relkit release --from {aborted.step}",
            Style.DIM,
        )


def _print_metadata(ctx: CLIContext, state: ReleaseState) -> None:
    for key, value in state.metadata:
        ctx.console.print(f"{key}: {value}", Style.DIM)


def _run(
    ctx: CLIContext, steps: list[Step], state: ReleaseState, *, resume_hint: bool
) -> ReleaseState:
    result = run_pipeline(steps, state, console=ctx.console)
    if isinstance(result, Err):
        aborted = result.error
        # Nothing to resume when the first step aborts; leave the tree untouched.
        if aborted.completed_steps:
            exit_on_error(save_state(ctx.root, aborted.state), ctx, ErrorCode.IO_ERROR)
        _report_abort(ctx, aborted, resume_hint=resume_hint)
        exit_with_code(int(abort_exit_code(aborted.kind)))
    return result.value


def release(
    with_defaults: bool = typer.Option(
        False, "--with-defaults", help="Accept every suggested answer; never prompt."
    ),
    skip_tests: bool = typer.Option(False, "--skip-tests", help="Do not run the test step."),
    from_step: str | None = typer.Option(
        None,
        "--from",
        help=f"Resume from this step ({', '.join(DEFAULT_STEP_ORDER)}).",
    ),
) -> None:
    """Run the whole release: checks, versions, tests, commits, tag, push."""
    ctx = build_context()

    if from_step is None:
        state = _fresh_state(ctx, use_defaults=with_defaults, skip_tests=skip_tests)
    else:
        state = _resumed_state(ctx, use_defaults=with_defaults, skip_tests=skip_tests)

    selected = select_steps(release_steps(ctx.step_context()), start=from_step)
    exit_on_error(selected, ctx, ErrorCode.USER_ERROR)

    final = _run(ctx, selected.unwrap_or([]), state, resume_hint=True)

    exit_on_error(clear_state(ctx.root), ctx, ErrorCode.IO_ERROR)
    _print_metadata(ctx, final)
    ctx.console.success("release finished")


def make_step_command(step_name: str) -> Callable[..., None]:
    """Build the CLI command running exactly one step against the saved state."""

    def command(
        with_defaults: bool | None = typer.Option(
            None,
            "--with-defaults/--interactive",
            help="Override the saved prompt mode.",
        ),
        skip_tests: bool | None = typer.Option(
            None,
            "--skip-tests/--run-tests",
            help="Override the saved test mode.",
        ),
    ) -> None:
        ctx = build_context()
        state = _resumed_state(ctx, use_defaults=with_defaults, skip_tests=skip_tests)
        step = standard_steps(ctx.step_context())[step_name]

        final = _run(ctx, [step], state, resume_hint=False)

        exit_on_error(save_state(ctx.root, final), ctx, ErrorCode.IO_ERROR)
        ctx.console.success(step_name)

    command.__doc__ = f"Run the '{step_name}' release step."
    return command


def release_state(
    clear: bool = typer.Option(False, "--clear", help="Forget the saved release state."),
) -> None:
    """Show the release state saved between step commands."""
    ctx = build_context()

    if clear:
        exit_on_error(clear_state(ctx.root), ctx, ErrorCode.IO_ERROR)
        ctx.console.success("release state cleared")
        return

    loaded = load_state(ctx.root)
    exit_on_error(loaded, ctx, ErrorCode.ENV_ERROR)
    state = loaded.unwrap_or(None)
    if state is None:
        ctx.console.info("no release in progress")
        return

    ctx.console.print(f"use defaults: {state.use_defaults}")
    ctx.console.print(f"skip tests: {state.skip_tests}")
    ctx.console.print(f"current version: {state.current_version or '-'}")
    if state.versions is not None:
        ctx.console.print(f"release version: {state.versions.release}")
        ctx.console.print(f"next version: {state.versions.next}")
    _print_metadata(ctx, state)
