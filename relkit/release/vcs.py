"""Version-control port used by the release steps.

Repository (relkit.git) is the production implementation. MemoryVcs keeps a
tiny in-memory model of a working tree (files, index, commits, tags, remote)
and is used by the tests and for rehearsing a release without touching git.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from hashlib import sha1
from pathlib import Path
from typing import Protocol

from relkit.core.result import Err, Ok, Result
from relkit.git.repository import VcsCommandError

__all__ = ["MemoryVcs", "VcsCommandError", "VcsPort"]


class VcsPort(Protocol):
    def is_repository(self) -> bool: ...

    def is_dirty(self) -> Result[bool, VcsCommandError]: ...

    def current_hash(self) -> Result[str, VcsCommandError]: ...

    def current_branch(self) -> Result[str, VcsCommandError]: ...

    def stage(self, path: str) -> Result[None, VcsCommandError]: ...

    def status(self) -> Result[str, VcsCommandError]: ...

    def commit(self, message: str) -> Result[None, VcsCommandError]: ...

    def tag_exists(self, name: str) -> bool: ...

    def create_tag(self, name: str, *, force: bool) -> Result[None, VcsCommandError]: ...

    def has_upstream(self) -> bool: ...

    def push(self) -> Result[None, VcsCommandError]: ...

    def push_tags(self) -> Result[None, VcsCommandError]: ...


@dataclass(frozen=True, slots=True)
class MemoryCommit:
    sha: str
    message: str
    files: tuple[tuple[str, str], ...]


def _empty_commits() -> list[MemoryCommit]:
    return []


@dataclass
class MemoryVcs:
    """In-memory working tree.

    Tracked file content is read from `root` when a path is staged, so steps
    that write real files (the version file) interact with it naturally.
    `failures` maps a command name ("commit", "tag", "push", ...) to the
    error the next call should report.
    """

    root: Path
    repository: bool = True
    branch: str = "main"
    upstream: str | None = "origin/main"
    dirty_paths: set[str] = field(default_factory=set)
    committed: dict[str, str] = field(default_factory=dict)
    index: dict[str, str] = field(default_factory=dict)
    commits: list[MemoryCommit] = field(default_factory=_empty_commits)
    tags: dict[str, str] = field(default_factory=dict)
    pushed_commits: list[str] = field(default_factory=list)
    pushed_tags: dict[str, str] = field(default_factory=dict)
    failures: dict[str, VcsCommandError] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.commits:
            self.commits.append(MemoryCommit(sha=_sha("initial"), message="initial", files=()))

    def is_repository(self) -> bool:
        self.calls.append("is_repository")
        return self.repository

    def status(self) -> Result[str, VcsCommandError]:
        self.calls.append("status")
        lines = [f"M  {p}" for p in sorted(self.index)]
        lines += [f" M {p}" for p in sorted(self.dirty_paths - set(self.index))]
        return Ok("\n".join(lines))

    def is_dirty(self) -> Result[bool, VcsCommandError]:
        match self.status():
            case Ok(text):
                return Ok(bool(text))
            case Err(e):
                return Err(e)

    def current_hash(self) -> Result[str, VcsCommandError]:
        self.calls.append("current_hash")
        return Ok(self.commits[-1].sha)

    def current_branch(self) -> Result[str, VcsCommandError]:
        self.calls.append("current_branch")
        return Ok(self.branch)

    def stage(self, path: str) -> Result[None, VcsCommandError]:
        self.calls.append(f"stage {path}")
        return self._guard("add", lambda: self._stage(path))

    def commit(self, message: str) -> Result[None, VcsCommandError]:
        self.calls.append(f"commit {message}")
        return self._guard("commit", lambda: self._commit(message))

    def tag_exists(self, name: str) -> bool:
        self.calls.append(f"tag_exists {name}")
        return name in self.tags

    def create_tag(self, name: str, *, force: bool) -> Result[None, VcsCommandError]:
        self.calls.append(f"create_tag {name}")
        if name in self.tags and not force:
            return Err(VcsCommandError("tag", 128, f"fatal: tag '{name}' already exists"))
        return self._guard("tag", lambda: self.tags.__setitem__(name, self.commits[-1].sha))

    def has_upstream(self) -> bool:
        self.calls.append("has_upstream")
        return self.upstream is not None

    def push(self) -> Result[None, VcsCommandError]:
        self.calls.append("push")
        return self._guard("push", lambda: self._push())

    def push_tags(self) -> Result[None, VcsCommandError]:
        self.calls.append("push_tags")
        return self._guard("push", lambda: self.pushed_tags.update(self.tags))

    @property
    def messages(self) -> list[str]:
        return [c.message for c in self.commits]

    def _guard(self, command: str, action: Callable[[], object]) -> Result[None, VcsCommandError]:
        error = self.failures.pop(command, None)
        if error is not None:
            return Err(error)
        action()
        return Ok(None)

    def _stage(self, path: str) -> None:
        content = (self.root / path).read_text(encoding="utf-8")
        self.dirty_paths.discard(path)
        if self.committed.get(path) == content:
            self.index.pop(path, None)
        else:
            self.index[path] = content

    def _commit(self, message: str) -> None:
        self.committed.update(self.index)
        files = tuple(sorted(self.committed.items()))
        self.commits.append(
            MemoryCommit(sha=_sha(f"{len(self.commits)}:{message}"), message=message, files=files)
        )
        self.index.clear()

    def _push(self) -> None:
        self.pushed_commits = [c.sha for c in self.commits]


def _sha(seed: str) -> str:
    return sha1(seed.encode("utf-8")).hexdigest()
