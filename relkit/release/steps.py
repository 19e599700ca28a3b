"""Standard release steps.

Each step is a function of (StepContext, ReleaseState) returning a
StepOutcome. `standard_steps` binds them to a context so the pipeline only
ever sees `Step(name, run)` values.

Steps are safe to re-run: a commit step whose version file is unchanged
commits nothing, a tag step offers to keep or overwrite an existing tag.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from relkit.core.config import Config
from relkit.core.result import Err, Ok, Result
from relkit.git.repository import VcsCommandError
from relkit.output.console import ConsoleProtocol
from relkit.release.hooks import DependencyProbe, TestRunner
from relkit.release.interaction import InteractionPort, LineReader, Prompter
from relkit.release.pipeline import Step
from relkit.release.state import (
    RELEASE_HASH,
    RELEASE_TAG,
    Abort,
    ReleaseState,
    StepOutcome,
    Versions,
)
from relkit.release.vcs import VcsPort
from relkit.release.version import Version, parse, propose_next, propose_release
from relkit.release.version_file import write_version

__all__ = [
    "AbortTagging",
    "DEFAULT_STEP_ORDER",
    "SkipTagging",
    "StepContext",
    "TagOutcome",
    "UseTag",
    "check_snapshot_dependencies",
    "commit_next_version",
    "commit_release_version",
    "initial_vcs_checks",
    "inquire_versions",
    "push_changes",
    "release_steps",
    "resolve_tag",
    "run_tests",
    "set_next_version",
    "set_release_version",
    "standard_steps",
    "tag_release",
]


@dataclass(frozen=True, slots=True)
class StepContext:
    """Everything the steps talk to besides the state itself."""

    root: Path
    config: Config
    vcs: VcsPort
    reader: LineReader
    console: ConsoleProtocol
    line_sep: str
    run_tests: TestRunner
    find_snapshot_dependencies: DependencyProbe

    @property
    def version_file(self) -> Path:
        return self.root / self.config.version.file

    def interaction(self, state: ReleaseState) -> InteractionPort:
        return Prompter(self.reader, non_interactive=state.use_defaults)


def _vcs_abort(error: VcsCommandError) -> Err[Abort]:
    return Err(Abort(error.message, kind="vcs", hint=error.stderr.strip() or None))


# -----------------------------------------------------------------------------
# Preconditions
# -----------------------------------------------------------------------------


def initial_vcs_checks(ctx: StepContext, state: ReleaseState) -> StepOutcome:
    if not ctx.vcs.is_repository():
        return Err(
            Abort(
                "not a repository",
                kind="precondition",
                hint=f"{ctx.root} is not a git working tree",
            )
        )

    dirty = ctx.vcs.is_dirty()
    if isinstance(dirty, Err):
        return _vcs_abort(dirty.error)
    if dirty.value:
        return Err(
            Abort(
                "Working directory is dirty.",
                kind="precondition",
                hint="commit or stash your changes first",
            )
        )

    sha = ctx.vcs.current_hash()
    if isinstance(sha, Err):
        return _vcs_abort(sha.error)
    ctx.console.info(f"Starting release process off commit: {sha.value}")
    return Ok(state)


def check_snapshot_dependencies(ctx: StepContext, state: ReleaseState) -> StepOutcome:
    found = ctx.find_snapshot_dependencies()
    if isinstance(found, Err):
        return Err(
            Abort(f"Error checking for snapshot dependencies: {found.error}", kind="dependencies")
        )

    deps = sorted(found.value)
    if not deps:
        return Ok(state)

    if state.use_defaults:
        return Err(
            Abort(
                "Aborting release due to snapshot dependencies.",
                kind="dependencies",
                hint=", ".join(deps),
            )
        )

    ctx.console.warning("Snapshot dependencies detected:\n" + "\n".join(deps))
    if not ctx.interaction(state).confirm("Do you want to continue (y/n)? [n] ", False):
        return Err(Abort("Aborting release due to snapshot dependencies.", kind="dependencies"))
    return Ok(state)


# -----------------------------------------------------------------------------
# Versions
# -----------------------------------------------------------------------------


def _read_version(
    interaction: InteractionPort,
    *,
    suggested: Version,
    prompt: str,
    use_defaults: bool,
) -> Result[Version, Abort]:
    if use_defaults:
        return Ok(suggested)

    answer = interaction.ask(prompt.format(suggested.string), suggested.string)
    if answer is None:
        return Err(Abort("No version provided!", kind="input"))

    parsed = parse(answer)
    if isinstance(parsed, Err):
        return Err(Abort(f"Version format error: {parsed.error.message}", kind="input"))
    return Ok(parsed.value)


def inquire_versions(ctx: StepContext, state: ReleaseState) -> StepOutcome:
    if state.current_version is None:
        return Err(
            Abort(
                "Current version is unknown.",
                kind="sequence",
                hint=f"expected a declaration in {ctx.config.version.file}",
            )
        )

    current = parse(state.current_version)
    if isinstance(current, Err):
        return Err(
            Abort(f"Current version is not usable: {current.error.message}", kind="input")
        )

    interaction = ctx.interaction(state)

    release = _read_version(
        interaction,
        suggested=propose_release(current.value),
        prompt="Release version [{}] : ",
        use_defaults=state.use_defaults,
    )
    if isinstance(release, Err):
        return release

    next_v = _read_version(
        interaction,
        suggested=propose_next(release.value, ctx.config.version.qualifier),
        prompt="Next version [{}] : ",
        use_defaults=state.use_defaults,
    )
    if isinstance(next_v, Err):
        return next_v

    versions = Versions(release=release.value.string, next=next_v.value.string)
    ctx.console.info(f"Release version: {versions.release}, next version: {versions.next}")
    return Ok(state.with_versions(versions))


def _set_version(
    ctx: StepContext, state: ReleaseState, select: Callable[[Versions], str]
) -> StepOutcome:
    versions = state.require_versions()
    if isinstance(versions, Err):
        return versions

    selected = select(versions.value)
    ctx.console.info(f"Setting version to '{selected}'.")

    written = write_version(
        ctx.version_file, ctx.config.version.declaration, selected, ctx.line_sep
    )
    if isinstance(written, Err):
        return Err(Abort(written.error.message, kind="io", hint=str(written.error.path)))
    return Ok(state.with_current_version(selected))


def set_release_version(ctx: StepContext, state: ReleaseState) -> StepOutcome:
    return _set_version(ctx, state, lambda v: v.release)


def set_next_version(ctx: StepContext, state: ReleaseState) -> StepOutcome:
    return _set_version(ctx, state, lambda v: v.next)


# -----------------------------------------------------------------------------
# Tests
# -----------------------------------------------------------------------------


def run_tests(ctx: StepContext, state: ReleaseState) -> StepOutcome:
    if state.skip_tests:
        ctx.console.info("Skipping tests.")
        return Ok(state)

    result = ctx.run_tests()
    if isinstance(result, Err):
        return Err(Abort("Tests failed.", kind="tests", hint=result.error or None))
    ctx.console.success("tests passed")
    return Ok(state)


# -----------------------------------------------------------------------------
# Commits
# -----------------------------------------------------------------------------


def _commit_version(
    ctx: StepContext, state: ReleaseState, template: str, *, record_hash: bool
) -> StepOutcome:
    version = state.current_version
    if version is None:
        return Err(Abort("No version has been set.", kind="sequence"))

    staged = ctx.vcs.stage(ctx.config.version.file)
    if isinstance(staged, Err):
        return _vcs_abort(staged.error)

    dirty = ctx.vcs.is_dirty()
    if isinstance(dirty, Err):
        return _vcs_abort(dirty.error)

    if dirty.value:
        message = template.format(version=version)
        committed = ctx.vcs.commit(message)
        if isinstance(committed, Err):
            return _vcs_abort(committed.error)
        ctx.console.success(f"committed: {message}")
    else:
        ctx.console.info(f"Nothing to commit, {ctx.config.version.file} is unchanged.")

    if not record_hash:
        return Ok(state)

    sha = ctx.vcs.current_hash()
    if isinstance(sha, Err):
        return _vcs_abort(sha.error)
    return Ok(state.with_metadata(RELEASE_HASH, sha.value))


def commit_release_version(ctx: StepContext, state: ReleaseState) -> StepOutcome:
    return _commit_version(ctx, state, ctx.config.commit.release_message, record_hash=True)


def commit_next_version(ctx: StepContext, state: ReleaseState) -> StepOutcome:
    return _commit_version(ctx, state, ctx.config.commit.next_message, record_hash=False)


# -----------------------------------------------------------------------------
# Tagging
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UseTag:
    name: str


@dataclass(frozen=True, slots=True)
class SkipTagging:
    pass


@dataclass(frozen=True, slots=True)
class AbortTagging:
    reason: str


TagOutcome = UseTag | SkipTagging | AbortTagging


def resolve_tag(
    candidate: str,
    *,
    vcs: VcsPort,
    interaction: InteractionPort,
    console: ConsoleProtocol,
    max_attempts: int | None = None,
) -> TagOutcome:
    """Pick the tag to create when the proposed one may already exist.

    The operator may keep proposing new names for as long as they like,
    unless max_attempts caps the number of new names.
    """
    tag = candidate
    attempts = 0

    while vcs.tag_exists(tag):
        answer = interaction.ask_freeform(
            f"Tag [{tag}] exists! Overwrite, keep or abort or enter a new tag (o/k/a)? [a] "
        )
        match answer:
            case None:
                return AbortTagging("No tag entered. Aborting release!")
            case "" | "a" | "A":
                return AbortTagging("Aborting release!")
            case "k" | "K":
                console.warning(
                    f"The current tag [{tag}] does not point to the commit for this release!"
                )
                return SkipTagging()
            case "o" | "O":
                console.warning(
                    "Overwriting a tag can cause problems if others have already seen the tag "
                    "(see `git help tag`)!"
                )
                return UseTag(tag)
            case new_tag:
                attempts += 1
                if max_attempts is not None and attempts > max_attempts:
                    return AbortTagging(
                        f"Gave up after {max_attempts} alternative tag names. Aborting release!"
                    )
                tag = new_tag

    return UseTag(tag)


def tag_release(ctx: StepContext, state: ReleaseState) -> StepOutcome:
    versions = state.require_versions()
    if isinstance(versions, Err):
        return versions

    outcome = resolve_tag(
        ctx.config.tag.name_for(versions.value.release),
        vcs=ctx.vcs,
        interaction=ctx.interaction(state),
        console=ctx.console,
        max_attempts=ctx.config.tag.max_attempts,
    )
    match outcome:
        case AbortTagging(reason=reason):
            return Err(Abort(reason, kind="input"))
        case SkipTagging():
            return Ok(state)
        case UseTag(name=name):
            created = ctx.vcs.create_tag(name, force=True)
            if isinstance(created, Err):
                return _vcs_abort(created.error)
            ctx.console.success(f"tagged {name}")
            return Ok(state.with_metadata(RELEASE_TAG, name))


# -----------------------------------------------------------------------------
# Push
# -----------------------------------------------------------------------------


def push_changes(ctx: StepContext, state: ReleaseState) -> StepOutcome:
    if not ctx.vcs.has_upstream():
        branch = ctx.vcs.current_branch().unwrap_or("?")
        ctx.console.info(
            "Changes were NOT pushed, because no upstream branch is configured "
            f"for the local branch [{branch}]"
        )
        return Ok(state)

    if not ctx.interaction(state).confirm("Push changes to the remote repository (y/n)? [y] ", True):
        ctx.console.warning("Remember to push the changes yourself!")
        return Ok(state)

    pushed = ctx.vcs.push()
    if isinstance(pushed, Err):
        return _vcs_abort(pushed.error)
    pushed_tags = ctx.vcs.push_tags()
    if isinstance(pushed_tags, Err):
        return _vcs_abort(pushed_tags.error)
    ctx.console.success("pushed branch and tags")
    return Ok(state)


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

_STEP_FUNCTIONS: dict[str, Callable[[StepContext, ReleaseState], StepOutcome]] = {
    "vcs-checks": initial_vcs_checks,
    "check-snapshot-dependencies": check_snapshot_dependencies,
    "inquire-versions": inquire_versions,
    "run-tests": run_tests,
    "set-release-version": set_release_version,
    "commit-release-version": commit_release_version,
    "tag-release": tag_release,
    "set-next-version": set_next_version,
    "commit-next-version": commit_next_version,
    "push-changes": push_changes,
}

DEFAULT_STEP_ORDER: tuple[str, ...] = tuple(_STEP_FUNCTIONS)


def standard_steps(ctx: StepContext) -> dict[str, Step]:
    return {name: Step(name, partial(fn, ctx)) for name, fn in _STEP_FUNCTIONS.items()}


def release_steps(ctx: StepContext) -> list[Step]:
    """The full release, in order."""
    steps = standard_steps(ctx)
    return [steps[name] for name in DEFAULT_STEP_ORDER]
