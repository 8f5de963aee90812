"""Change detection between revisions and between record snapshots."""

from relkit.diff.model import (
    DiffError,
    DiffFile,
    DiffFileStatus,
    GitTreeEntry,
    Record,
    RecordDiff,
)
from relkit.diff.records import diff_record_lists
from relkit.diff.revision import (
    RevisionDiffEngine,
    RevisionSource,
    parse_diff_raw,
    parse_ls_tree,
)

__all__ = [
    # model
    "DiffError",
    "DiffFile",
    "DiffFileStatus",
    "GitTreeEntry",
    "Record",
    "RecordDiff",
    # records
    "diff_record_lists",
    # revision
    "RevisionDiffEngine",
    "RevisionSource",
    "parse_diff_raw",
    "parse_ls_tree",
]
