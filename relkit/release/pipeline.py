"""Ordered execution of release steps.

The pipeline runs steps strictly in order, feeding each one the state its
predecessor returned. The first Abort stops the run. Side effects already
applied stay applied (commits remain committed); the operator fixes the
cause and re-runs, typically only the remaining steps via select_steps.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from relkit.core.result import Err, Ok, Result
from relkit.output.console import ConsoleProtocol
from relkit.release.state import Abort, AbortKind, ReleaseState, StepOutcome

__all__ = [
    "PipelineAborted",
    "Step",
    "run_pipeline",
    "select_steps",
]


@dataclass(frozen=True, slots=True)
class Step:
    name: str
    run: Callable[[ReleaseState], StepOutcome]


@dataclass(frozen=True, slots=True)
class PipelineAborted:
    """Why and where a pipeline stopped.

    Attributes:
        step: Name of the step that aborted
        reason: Human readable reason from the step
        kind: Abort kind, used for exit-code mapping
        completed_steps: Names of the steps that finished before it
        state: Last state produced before the abort
        hint: Optional extra detail from the step
    """

    step: str
    reason: str
    kind: AbortKind
    completed_steps: tuple[str, ...]
    state: ReleaseState
    hint: str | None = None

    @property
    def message(self) -> str:
        return f"{self.step}: {self.reason}"


def run_pipeline(
    steps: Sequence[Step],
    initial: ReleaseState,
    *,
    console: ConsoleProtocol,
) -> Result[ReleaseState, PipelineAborted]:
    state = initial
    completed: list[str] = []

    for step in steps:
        console.header(step.name)
        outcome = step.run(state)
        if isinstance(outcome, Err):
            abort = outcome.error
            return Err(
                PipelineAborted(
                    step=step.name,
                    reason=abort.reason,
                    kind=abort.kind,
                    completed_steps=tuple(completed),
                    state=state,
                    hint=abort.hint,
                )
            )
        state = outcome.value
        completed.append(step.name)

    return Ok(state)


def select_steps(
    steps: Sequence[Step],
    *,
    start: str | None = None,
    only: str | None = None,
) -> Result[list[Step], Abort]:
    """Narrow a step list to resume a release.

    start keeps the named step and everything after it; only keeps the
    named step alone. With neither, the list is returned unchanged.
    """
    names = [s.name for s in steps]
    wanted = only or start
    if wanted is None:
        return Ok(list(steps))
    if wanted not in names:
        return Err(
            Abort(
                f"unknown release step: {wanted}",
                kind="input",
                hint=f"known steps: {', '.join(names)}",
            )
        )
    idx = names.index(wanted)
    if only is not None:
        return Ok([steps[idx]])
    return Ok(list(steps[idx:]))
