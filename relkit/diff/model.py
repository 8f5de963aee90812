from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

DiffErrorKind = Literal["tree_not_loaded", "file_not_in_revision", "git_failed"]

type Record = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class DiffError:
    """Error from revision lookups. Always local: never retried."""

    kind: DiffErrorKind
    message: str
    path: str | None = None
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


@dataclass(frozen=True, slots=True)
class GitTreeEntry:
    """One blob at one revision.

    Attributes:
        revision_id: Blob object id (content revision)
        path: Repository-relative POSIX path
    """

    revision_id: str
    path: str


@dataclass(frozen=True, slots=True)
class DiffFileStatus:
    """One changed path between two revisions.

    Attributes:
        revision_from: Blob id before the change (all zeros for additions)
        revision_to: Blob id after the change (all zeros for deletions)
        path: Path before the change
        renamed_path: Path after the change, for renames
    """

    revision_from: str
    revision_to: str
    path: str
    renamed_path: str | None = None


def _no_statuses() -> list[DiffFileStatus]:
    return []


@dataclass(frozen=True, slots=True)
class DiffFile:
    deleted: list[DiffFileStatus] = field(default_factory=_no_statuses)
    added_edited: list[DiffFileStatus] = field(default_factory=_no_statuses)


def _no_records() -> list[Record]:
    return []


@dataclass(frozen=True, slots=True)
class RecordDiff:
    """Reconciliation of two keyed record lists.

    Attributes:
        added_edited: Records new in ``after``, or present in both with a different value
            (the ``after`` version is kept)
        deleted: Records of ``before`` whose key is gone from ``after``
    """

    added_edited: list[Record] = field(default_factory=_no_records)
    deleted: list[Record] = field(default_factory=_no_records)

    @property
    def is_empty(self) -> bool:
        return not self.added_edited and not self.deleted
