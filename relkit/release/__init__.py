"""Release workflow engine.

- version: version parsing and the release/next version policy
- interaction: operator prompts
- vcs: version-control port (git adapter lives in relkit.git)
- state: the state threaded through steps, and its persistence
- pipeline: ordered step execution
- steps: the standard release steps
- version_file, hooks: the version declaration file, test/dependency hooks
"""

from __future__ import annotations

from relkit.release.pipeline import PipelineAborted, Step, run_pipeline, select_steps
from relkit.release.state import Abort, ReleaseState, Versions
from relkit.release.steps import StepContext, release_steps, standard_steps

__all__ = [
    "Abort",
    "PipelineAborted",
    "ReleaseState",
    "Step",
    "StepContext",
    "Versions",
    "release_steps",
    "run_pipeline",
    "select_steps",
    "standard_steps",
]
