"""Git repository adapter.

Repository implements the version-control operations the release steps need
by shelling out to the `git` CLI. Queries that cannot fail meaningfully
return plain values; everything else returns a Result carrying a
VcsCommandError built from the failed command.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.current_hash():
        case Ok(sha):
            print(f"HEAD is {sha}")
        case Err(e):
            print(f"git failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relkit.core.result import Err, Ok, Result
from relkit.platform.process import ProcessError
from relkit.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "Repository",
    "VcsCommandError",
]


@dataclass(frozen=True, slots=True)
class VcsCommandError:
    """A version-control command exited non-zero.

    Attributes:
        command: The git subcommand that failed (e.g. "commit")
        exit_code: Process return code (-1 if git could not be started)
        stderr: What git printed on stderr
    """

    command: str
    exit_code: int
    stderr: str

    @property
    def message(self) -> str:
        detail = self.stderr.strip().splitlines()
        suffix = f": {detail[-1].strip()}" if detail else ""
        return f"git {self.command} failed (exit {self.exit_code}){suffix}"


class Repository:
    """A git working tree rooted at `path`."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def is_repository(self) -> bool:
        """True if path is inside a git working tree."""
        if (self.path / ".git").exists():
            return True
        result = self._run(["rev-parse", "--is-inside-work-tree"])
        return isinstance(result, Ok) and result.value.strip() == "true"

    def status(self) -> Result[str, VcsCommandError]:
        """Porcelain status text (empty when the tree is clean)."""
        return self._text("status", ["status", "--porcelain"])

    def is_dirty(self) -> Result[bool, VcsCommandError]:
        match self.status():
            case Ok(text):
                return Ok(text.strip() != "")
            case Err(e):
                return Err(e)

    def current_hash(self) -> Result[str, VcsCommandError]:
        return self._text("rev-parse", ["rev-parse", "HEAD"])

    def current_branch(self) -> Result[str, VcsCommandError]:
        return self._text("rev-parse", ["rev-parse", "--abbrev-ref", "HEAD"])

    def stage(self, path: str) -> Result[None, VcsCommandError]:
        return self._unit("add", ["add", "--", path])

    def commit(self, message: str) -> Result[None, VcsCommandError]:
        return self._unit("commit", ["commit", "-m", message])

    def tag_exists(self, name: str) -> bool:
        result = self._run(["rev-parse", "-q", "--verify", f"refs/tags/{name}"])
        return isinstance(result, Ok)

    def create_tag(self, name: str, *, force: bool) -> Result[None, VcsCommandError]:
        args = ["tag", "-f", name] if force else ["tag", name]
        return self._unit("tag", args)

    def has_upstream(self) -> bool:
        """Check if current branch has an upstream configured."""
        result = self._run(["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"])
        return isinstance(result, Ok)

    def push(self) -> Result[None, VcsCommandError]:
        """Push HEAD to the upstream branch, whatever its name on the remote."""
        match self._tracking():
            case Err(e):
                return Err(e)
            case Ok((remote, branch)):
                merge = self._text("config", ["config", "--get", f"branch.{branch}.merge"])
                if isinstance(merge, Err):
                    return merge
                return self._unit("push", ["push", remote, f"HEAD:{merge.value}"])

    def push_tags(self) -> Result[None, VcsCommandError]:
        """Push all tags to the tracking remote of the current branch."""
        match self._tracking():
            case Err(e):
                return Err(e)
            case Ok((remote, _)):
                return self._unit("push", ["push", "--tags", remote])

    def _tracking(self) -> Result[tuple[str, str], VcsCommandError]:
        branch = self.current_branch()
        if isinstance(branch, Err):
            return branch
        remote = self._text("config", ["config", "--get", f"branch.{branch.value}.remote"])
        if isinstance(remote, Err):
            return remote
        return Ok((remote.value, branch.value))

    def _text(self, command: str, args: list[str]) -> Result[str, VcsCommandError]:
        match self._run(args):
            case Err(e):
                return Err(_to_vcs_error(command, e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def _unit(self, command: str, args: list[str]) -> Result[None, VcsCommandError]:
        match self._run(args):
            case Err(e):
                return Err(_to_vcs_error(command, e))
            case Ok(_):
                return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)


def _to_vcs_error(command: str, error: ProcessError) -> VcsCommandError:
    return VcsCommandError(
        command=command,
        exit_code=error.returncode,
        stderr=error.stderr or error.stdout,
    )
