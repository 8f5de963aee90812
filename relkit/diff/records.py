"""Reconcile two snapshots of keyed records.

Used for any pair of same-shaped structured snapshots, e.g. two versions of
a manifest section, not only file trees.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping, Sequence, Set

from .model import Record, RecordDiff

__all__ = ["diff_record_lists"]


def _as_list(records: Record | Sequence[Record] | None) -> list[Record] | None:
    if records is None:
        return None
    if isinstance(records, Mapping):
        return [records]
    return list(records)


def _freeze(value: object) -> Hashable:
    """Hashable projection of a JSON-like value that keeps bool apart from int.

    Two values project equal exactly when they are deeply equal as data:
    mappings ignore key order, ints and floats compare numerically, and
    ``True`` never matches ``1``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (int, float)):
        return ("number", value)
    if isinstance(value, str):
        return ("str", value)
    if isinstance(value, Mapping):
        return ("map", frozenset((_freeze(k), _freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return ("seq", tuple(_freeze(item) for item in value))
    if isinstance(value, Set):
        return ("set", frozenset(_freeze(item) for item in value))
    if isinstance(value, Hashable):
        return (type(value), value)
    return ("object", id(value))


def diff_record_lists(
    before: Record | Sequence[Record] | None,
    after: Record | Sequence[Record] | None,
    key_field: str,
) -> RecordDiff:
    """Partition two record lists into added/edited and deleted.

    - A ``before`` record whose key is absent from ``after`` is deleted.
    - A ``before`` record whose key is in ``after`` but whose value differs
      (deep equality) is edited; the ``after`` record is reported.
    - An ``after`` record whose key is absent from ``before`` is added.

    A single record (a mapping) counts as a one-element list. ``None`` before
    means everything in ``after`` is added; ``None`` after means everything in
    ``before`` is deleted. Keys and values are compared as data, so list or
    mapping keys work and ``True`` does not match ``1``. When a key repeats
    in ``after``, the first record with that key is the one compared.

    Args:
        before: Baseline snapshot
        after: Target snapshot
        key_field: Field identifying a record across snapshots
    """
    old = _as_list(before)
    new = _as_list(after)

    if old is None and new is None:
        return RecordDiff()
    if old is None:
        return RecordDiff(added_edited=list(new or []))
    if new is None:
        return RecordDiff(deleted=old)

    new_by_key: dict[Hashable, Record] = {}
    for record in new:
        new_by_key.setdefault(_freeze(record.get(key_field)), record)
    old_keys = {_freeze(record.get(key_field)) for record in old}

    added_edited: list[Record] = []
    deleted: list[Record] = []

    for record in old:
        key = _freeze(record.get(key_field))
        if key not in new_by_key:
            deleted.append(record)
        elif _freeze(new_by_key[key]) != _freeze(record):
            added_edited.append(new_by_key[key])

    added_edited.extend(record for record in new if _freeze(record.get(key_field)) not in old_keys)

    return RecordDiff(added_edited=added_edited, deleted=deleted)
