"""Repository.push against a real bare remote."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from relkit.core.result import Ok
from relkit.git.repository import Repository

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(root: Path, *args: str) -> str:
    proc = subprocess.run(
        ["git", "-C", str(root), *args],
        capture_output=True,
        text=True,
        check=True,
    )
    return proc.stdout.strip()


def _commit(root: Path, message: str) -> None:
    (root / "notes.txt").write_text(message, encoding="utf-8")
    _git(root, "add", "notes.txt")
    _git(root, "commit", "-q", "-m", message)


@pytest.fixture
def tracking_trunk(tmp_path: Path) -> tuple[Path, Path]:
    """Local `main` tracking `origin/trunk`."""
    remote = tmp_path / "remote.git"
    local = tmp_path / "local"
    remote.mkdir()
    local.mkdir()
    _git(remote, "init", "-q", "--bare")

    _git(local, "init", "-q")
    _git(local, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(local, "config", "user.name", "Release Bot")
    _git(local, "config", "user.email", "release@example.com")
    _git(local, "config", "commit.gpgsign", "false")
    _commit(local, "initial")
    _git(local, "remote", "add", "origin", str(remote))
    _git(local, "push", "-q", "origin", "HEAD:refs/heads/trunk")
    _git(local, "fetch", "-q", "origin")
    _git(local, "branch", "-q", "--set-upstream-to=origin/trunk")
    return local, remote


def test_push_updates_differently_named_upstream(tracking_trunk: tuple[Path, Path]) -> None:
    local, remote = tracking_trunk
    _commit(local, "Releasing 1.2.0")
    repo = Repository(local)

    assert repo.has_upstream()
    assert repo.push() == Ok(None)

    assert _git(remote, "rev-parse", "refs/heads/trunk") == _git(local, "rev-parse", "HEAD")
    heads = _git(remote, "for-each-ref", "--format=%(refname)", "refs/heads")
    assert heads == "refs/heads/trunk"


def test_push_tags_reaches_tracking_remote(tracking_trunk: tuple[Path, Path]) -> None:
    local, remote = tracking_trunk
    repo = Repository(local)
    assert repo.create_tag("v1.2.0", force=True) == Ok(None)

    assert repo.push_tags() == Ok(None)

    assert _git(remote, "tag", "--list") == "v1.2.0"
