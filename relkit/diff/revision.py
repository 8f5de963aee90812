"""Revision-based change detection.

The engine keeps an index of every blob at one target revision. Files and
folders are then copied out of that index into a working directory, byte for
byte, without checking the revision out.

The index belongs to the instance and is only replaced by an explicit
``list_tree_at_revision`` call. Callers working on several revisions at once
should use one engine per revision.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path, PurePosixPath
from typing import Protocol

from relkit.core.result import Err, Ok, Result
from relkit.git.repository import GitError
from relkit.output.console import ConsoleProtocol, NullConsole

from .model import DiffError, DiffFile, DiffFileStatus, GitTreeEntry, Record, RecordDiff
from .records import diff_record_lists

__all__ = ["RevisionDiffEngine", "RevisionSource", "parse_ls_tree", "parse_diff_raw"]


class RevisionSource(Protocol):
    """What the engine needs from version control (see relkit.git.Repository)."""

    def ls_tree(self, revision: str) -> Result[str, GitError]: ...

    def cat_blob(self, object_id: str) -> Result[bytes, GitError]: ...

    def show(self, revision: str) -> Result[str, GitError]: ...

    def diff_raw(self, revision_from: str, revision_to: str) -> Result[str, GitError]: ...


def _normalize(path: str) -> str:
    """POSIX form without a leading "./" (``Path("./a/b")`` -> ``"a/b"``)."""
    return str(PurePosixPath(path.replace("\\", "/")))


def parse_ls_tree(listing: str) -> list[GitTreeEntry]:
    """Parse ``git ls-tree -r -z`` output into blob entries.

    Submodule entries (type "commit") have no content in this repository and
    are left out.
    """
    entries: list[GitTreeEntry] = []
    for record in listing.split("\0"):
        if not record.strip():
            continue
        meta, sep, path = record.partition("\t")
        if not sep:
            continue
        fields = meta.split()
        if len(fields) < 3 or fields[1] != "blob":
            continue
        entries.append(GitTreeEntry(revision_id=fields[2], path=_normalize(path)))
    return entries


def parse_diff_raw(output: str) -> DiffFile:
    """Parse ``git diff --raw -z -M --no-abbrev`` output.

    Deletions go to ``deleted``; additions, modifications, type changes and
    renames go to ``added_edited``. A rename keeps the old path in ``path``
    and the new one in ``renamed_path``.
    """
    tokens = output.split("\0")
    deleted: list[DiffFileStatus] = []
    added_edited: list[DiffFileStatus] = []

    i = 0
    while i < len(tokens):
        header = tokens[i]
        i += 1
        if not header.startswith(":"):
            continue
        fields = header[1:].split()
        if len(fields) < 5 or i >= len(tokens):
            continue
        sha_from, sha_to, status = fields[2], fields[3], fields[4]

        path = tokens[i]
        i += 1
        renamed: str | None = None
        if status[0] in "RC" and i < len(tokens):
            renamed = tokens[i]
            i += 1

        entry = DiffFileStatus(
            revision_from=sha_from,
            revision_to=sha_to,
            path=path,
            renamed_path=renamed if status[0] == "R" else None,
        )
        if status[0] == "C" and renamed is not None:
            # A copy adds the destination; the source is untouched.
            entry = DiffFileStatus(revision_from=sha_from, revision_to=sha_to, path=renamed)

        if status[0] == "D":
            deleted.append(entry)
        else:
            added_edited.append(entry)

    return DiffFile(deleted=deleted, added_edited=added_edited)


class RevisionDiffEngine:
    """Answer "what changed" for file trees and keyed record lists.

    Usage:
        engine = RevisionDiffEngine(Repository(repo_path))
        engine.list_tree_at_revision("v1.4.0")
        engine.materialize_folder("packages/core", Path("build/core"))
    """

    def __init__(self, source: RevisionSource, *, console: ConsoleProtocol | None = None) -> None:
        self._source = source
        self._console: ConsoleProtocol = console or NullConsole()
        self._revision: str | None = None
        self._entries: tuple[GitTreeEntry, ...] | None = None

    @property
    def revision(self) -> str | None:
        """Revision the current index was built for, if any."""
        return self._revision

    @property
    def entries(self) -> tuple[GitTreeEntry, ...]:
        return self._entries or ()

    def list_tree_at_revision(self, revision: str) -> Result[list[GitTreeEntry], DiffError]:
        """Index every blob at revision, replacing the previous index."""
        self._console.debug(f"Fetching file list from target revision {revision}")
        self._revision = None
        self._entries = None

        listing = self._source.ls_tree(revision)
        if isinstance(listing, Err):
            return Err(
                DiffError(
                    kind="git_failed",
                    message=f"Unable to list files at revision {revision}: {listing.error.message}",
                )
            )

        entries = parse_ls_tree(listing.value)
        self._revision = revision
        self._entries = tuple(entries)
        return Ok(entries)

    def _loaded(self) -> Result[tuple[GitTreeEntry, ...], DiffError]:
        if self._entries is None:
            return Err(
                DiffError(
                    kind="tree_not_loaded",
                    message="No revision indexed",
                    hint="Call list_tree_at_revision() first.",
                )
            )
        return Ok(self._entries)

    def materialize_file(self, path: str, output_dir: Path) -> Result[list[Path], DiffError]:
        """Write the indexed content of path under output_dir.

        A no-op if ``output_dir/path`` already exists. When the index holds
        several blobs for the same path, each is written in index order.

        Returns:
            Ok(paths written), or Err with ``tree_not_loaded``,
            ``file_not_in_revision`` or ``git_failed``.
        """
        wanted = _normalize(path)
        if (output_dir / wanted).exists():
            self._console.debug(f"File {wanted} already in output folder")
            return Ok([])

        loaded = self._loaded()
        if isinstance(loaded, Err):
            return loaded

        matches = [entry for entry in loaded.value if entry.path == wanted]
        if not matches:
            return Err(
                DiffError(
                    kind="file_not_in_revision",
                    message=f"Unable to find the required file {wanted} in git at revision {self._revision}",
                    path=wanted,
                    hint="Did you really commit the file?",
                )
            )

        written: list[Path] = []
        for entry in matches:
            self._console.debug(f"Copying {entry.path} (blob {entry.revision_id}) to {output_dir}")
            content = self._source.cat_blob(entry.revision_id)
            if isinstance(content, Err):
                return Err(
                    DiffError(
                        kind="git_failed",
                        message=f"Unable to read {entry.path}: {content.error.message}",
                        path=entry.path,
                    )
                )
            target = output_dir / entry.path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content.value)
            written.append(target)
        return Ok(written)

    def materialize_folder(self, prefix: str, output_dir: Path) -> Result[list[Path], DiffError]:
        """materialize_file for every indexed path starting with prefix.

        The prefix is matched as a plain string: pass "src/" rather than "src"
        to exclude siblings such as "src2/".
        """
        loaded = self._loaded()
        if isinstance(loaded, Err):
            return loaded

        wanted = prefix.replace("\\", "/").removeprefix("./")
        written: list[Path] = []
        for entry in loaded.value:
            if not entry.path.startswith(wanted):
                continue
            result = self.materialize_file(entry.path, output_dir)
            if isinstance(result, Err):
                return result
            written.extend(result.value)
        return Ok(written)

    def diff_revisions(self, revision_from: str, revision_to: str) -> Result[DiffFile, DiffError]:
        """File-level changes between two revisions."""
        output = self._source.diff_raw(revision_from, revision_to)
        if isinstance(output, Err):
            return Err(
                DiffError(
                    kind="git_failed",
                    message=f"Unable to diff {revision_from}..{revision_to}: {output.error.message}",
                )
            )
        return Ok(parse_diff_raw(output.value))

    def file_includes_content(self, status: DiffFileStatus, content: str) -> Result[bool, DiffError]:
        """Whether the pre-change version of a file contains content."""
        shown = self._source.show(status.revision_from)
        if isinstance(shown, Err):
            return Err(
                DiffError(
                    kind="git_failed",
                    message=f"Unable to read {status.path}: {shown.error.message}",
                    path=status.path,
                )
            )
        return Ok(content in shown.value)

    @staticmethod
    def diff_record_lists(
        before: Record | Sequence[Record] | None,
        after: Record | Sequence[Record] | None,
        key_field: str,
    ) -> RecordDiff:
        """See relkit.diff.records.diff_record_lists."""
        return diff_record_lists(before, after, key_field)
