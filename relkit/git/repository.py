"""Git repository abstraction.

Read-only plumbing commands needed for revision diffing. All operations
return Result types.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.ls_tree("HEAD"):
        case Ok(listing):
            ...
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relkit.core.config import DEFAULT_GIT_TIMEOUT_SECONDS, Config
from relkit.core.result import Err, Ok, Result
from relkit.platform.process import ProcessError
from relkit.platform.process import run as run_process
from relkit.platform.process import run_bytes

__all__ = [
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def _git_error(command: str, error: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=error.stderr.strip() or error.stdout.strip() or fallback,
        returncode=error.returncode,
    )


class Repository:
    """Version-control provider backed by the git binary.

    Attributes:
        path: Path to the repository (or any directory inside its work tree)
    """

    def __init__(self, path: Path, *, timeout: float = DEFAULT_GIT_TIMEOUT_SECONDS) -> None:
        self.path = path
        self.timeout = timeout

    @classmethod
    def from_config(cls, path: Path, config: Config) -> Repository:
        return cls(path, timeout=config.git.timeout_seconds)

    def exists(self) -> bool:
        """Check if path is inside a git work tree."""
        return isinstance(self._run(["rev-parse", "--git-dir"]), Ok)

    def rev_parse(self, revision: str) -> Result[str, GitError]:
        """Resolve a revision (branch, tag, HEAD~1, ...) to a full commit id."""
        result = self._run(["rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"])
        match result:
            case Err(e):
                return Err(_git_error("rev-parse", e, f"unknown revision: {revision}"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def ls_tree(self, revision: str) -> Result[str, GitError]:
        """Recursive NUL-separated tree listing: ``<mode> <type> <id>\\t<path>\\0``.

        NUL separation keeps paths with quotes or non-ASCII characters verbatim.
        """
        result = self._run(["ls-tree", "-r", "-z", revision])
        match result:
            case Err(e):
                return Err(_git_error("ls-tree", e, "ls-tree failed"))
            case Ok(stdout):
                return Ok(stdout)

    def cat_blob(self, object_id: str) -> Result[bytes, GitError]:
        """Raw content of a blob by object id."""
        result = run_bytes(
            ["git", "-C", str(self.path), "cat-file", "-p", object_id],
            cwd=self.path,
            timeout=self.timeout,
        )
        match result:
            case Err(e):
                return Err(_git_error("cat-file", e, f"cannot read object {object_id}"))
            case Ok(content):
                return Ok(content)

    def show(self, revision: str) -> Result[str, GitError]:
        """``git show --raw <revision>``: object content, or commit summary for commits."""
        result = self._run(["show", "--raw", revision])
        match result:
            case Err(e):
                return Err(_git_error("show", e, f"cannot show {revision}"))
            case Ok(stdout):
                return Ok(stdout)

    def diff_raw(self, revision_from: str, revision_to: str) -> Result[str, GitError]:
        """``git diff --raw -z -M`` between two revisions, with full object ids."""
        result = self._run(
            ["diff", "--raw", "-z", "-M", "--no-abbrev", revision_from, revision_to]
        )
        match result:
            case Err(e):
                return Err(_git_error("diff", e, "diff failed"))
            case Ok(stdout):
                return Ok(stdout)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, timeout=self.timeout
        )
