"""Git operations module.

Usage:
    from relkit.git import Repository

    repo = Repository(Path("/path/to/repo"))
    if repo.is_repository() and not repo.is_dirty().unwrap_or(True):
        print("ready to release")
"""

from relkit.git.repository import Repository, VcsCommandError

__all__ = [
    "Repository",
    "VcsCommandError",
]
