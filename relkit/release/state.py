"""Release state threaded through the pipeline.

A ReleaseState is created once per release run. Each step receives the
current value and returns a new one; nothing mutates a state in place.
Between separate CLI invocations the state is persisted as JSON under
`.relkit/state.json` in the repository root.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Literal

from relkit.core.result import Err, Ok, Result
from relkit.core.structured import as_str_dict, get_bool, get_str, get_table
from relkit.platform.files import atomic_write_text

__all__ = [
    "Abort",
    "AbortKind",
    "ReleaseState",
    "StateFileError",
    "StepOutcome",
    "Versions",
    "clear_state",
    "load_state",
    "save_state",
    "state_path",
]

AbortKind = Literal[
    "precondition",
    "dependencies",
    "input",
    "sequence",
    "tests",
    "vcs",
    "io",
]

RELEASE_HASH = "release-hash"
RELEASE_TAG = "release-tag"


@dataclass(frozen=True, slots=True)
class Abort:
    """Fatal outcome of a step: the release stops here."""

    reason: str
    kind: AbortKind = "precondition"
    hint: str | None = None

    @property
    def message(self) -> str:
        return self.reason


@dataclass(frozen=True, slots=True)
class Versions:
    release: str
    next: str


@dataclass(frozen=True, slots=True)
class ReleaseState:
    use_defaults: bool = False
    skip_tests: bool = False
    versions: Versions | None = None
    current_version: str | None = None
    metadata: tuple[tuple[str, str], ...] = ()

    def with_versions(self, versions: Versions) -> ReleaseState:
        return replace(self, versions=versions)

    def with_current_version(self, version: str) -> ReleaseState:
        return replace(self, current_version=version)

    def with_metadata(self, key: str, value: str) -> ReleaseState:
        kept = tuple((k, v) for k, v in self.metadata if k != key)
        return replace(self, metadata=(*kept, (key, value)))

    def get_metadata(self, key: str) -> str | None:
        for k, v in self.metadata:
            if k == key:
                return v
        return None

    def require_versions(self) -> Result[Versions, Abort]:
        if self.versions is None:
            return Err(
                Abort(
                    "No versions are set! Was this step executed before inquire-versions?",
                    kind="sequence",
                )
            )
        return Ok(self.versions)


type StepOutcome = Result[ReleaseState, Abort]


# -----------------------------------------------------------------------------
# Persistence
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StateFileError:
    message: str
    path: Path

    @property
    def hint(self) -> str:
        return str(self.path)


_SCHEMA = 1


def state_path(root: Path) -> Path:
    return root / ".relkit" / "state.json"


# Matches everything, itself included: the state directory never shows in `git status`.
_IGNORE_ALL = "*\n"


def save_state(root: Path, state: ReleaseState) -> Result[None, StateFileError]:
    path = state_path(root)
    payload: dict[str, object] = {
        "schema": _SCHEMA,
        "use_defaults": state.use_defaults,
        "skip_tests": state.skip_tests,
        "versions": (
            {"release": state.versions.release, "next": state.versions.next}
            if state.versions is not None
            else None
        ),
        "current_version": state.current_version,
        "metadata": dict(state.metadata),
    }
    try:
        ignore = path.parent / ".gitignore"
        if not ignore.exists():
            atomic_write_text(ignore, _IGNORE_ALL)
        atomic_write_text(path, json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        return Err(StateFileError(f"failed to write release state: {e}", path=path))
    return Ok(None)


def load_state(root: Path) -> Result[ReleaseState | None, StateFileError]:
    """Load the persisted state; Ok(None) when no release is in progress."""
    path = state_path(root)
    if not path.exists():
        return Ok(None)

    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        return Err(StateFileError(f"failed to load release state: {e}", path=path))

    d = as_str_dict(obj)
    if d is None:
        return Err(StateFileError("invalid release state format", path=path))

    schema = d.get("schema")
    if schema != _SCHEMA:
        return Err(StateFileError(f"unsupported release state schema: {schema}", path=path))

    use_defaults = get_bool(d, "use_defaults")
    skip_tests = get_bool(d, "skip_tests")
    if use_defaults is None or skip_tests is None:
        return Err(StateFileError("release state missing required fields", path=path))

    versions: Versions | None = None
    raw_versions = get_table(d, "versions")
    if raw_versions is not None:
        release = get_str(raw_versions, "release")
        next_v = get_str(raw_versions, "next")
        if release is None or next_v is None:
            return Err(StateFileError("release state has incomplete versions", path=path))
        versions = Versions(release=release, next=next_v)

    raw_meta = get_table(d, "metadata") or {}
    metadata = tuple((k, v) for k, v in raw_meta.items() if isinstance(v, str))

    return Ok(
        ReleaseState(
            use_defaults=use_defaults,
            skip_tests=skip_tests,
            versions=versions,
            current_version=get_str(d, "current_version"),
            metadata=metadata,
        )
    )


def clear_state(root: Path) -> Result[None, StateFileError]:
    path = state_path(root)
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        return Err(StateFileError(f"failed to clear release state: {e}", path=path))
    return Ok(None)
