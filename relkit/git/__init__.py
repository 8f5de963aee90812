"""Git operations module.

Usage:
    from relkit.git import Repository

    repo = Repository(Path("/path/to/repo"))
    listing = repo.ls_tree("HEAD")
"""

from relkit.git.repository import GitError, Repository

__all__ = [
    "GitError",
    "Repository",
]
