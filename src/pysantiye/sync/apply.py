"""Deterministic change application rules.

These functions never mutate their input and never reorder existing
rows. A collection is "snapshot plus every event in arrival order";
there is no de-duplication and no reconciliation against the backend.
"""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import Any

from pysantiye.sync.events import ChangeEvent, ChangeType, Record


def prepend_record(records: Sequence[Record], record: Record) -> list[Record]:
    """Insert *record* as the new head, whatever its ``created_at``.

    Inserting a row whose id is already present yields two entries.
    """
    return [copy.deepcopy(record), *records]


def replace_record(records: Sequence[Record], record: Record) -> list[Record]:
    """Replace rows with the same id in place; unknown ids are a no-op."""
    record_id = record.get("id")
    return [copy.deepcopy(record) if item.get("id") == record_id else item for item in records]


def remove_record(records: Sequence[Record], record_id: Any) -> list[Record]:
    """Drop rows with *record_id*; unknown ids are a no-op."""
    return [item for item in records if item.get("id") != record_id]


def apply_change(records: Sequence[Record], event: ChangeEvent) -> list[Record]:
    """Apply a single change event and return the new collection."""
    if event.type == ChangeType.INSERT:
        return prepend_record(records, event.record)
    if event.type == ChangeType.UPDATE:
        return replace_record(records, event.record)
    if event.type == ChangeType.DELETE:
        return remove_record(records, event.record_id)
    raise ValueError(f"Unsupported change type: {event.type!r}")


def sort_snapshot(
    records: Sequence[Record],
    order_by: str = "created_at",
    *,
    descending: bool = True,
) -> list[Record]:
    """Sort a snapshot by *order_by*; rows missing the key go last.

    Used by backends that cannot order server-side. Values are compared as
    strings, which is correct for the ISO-8601 timestamps the backend
    returns.
    """
    present = [item for item in records if item.get(order_by) is not None]
    missing = [item for item in records if item.get(order_by) is None]
    present.sort(key=lambda item: str(item[order_by]), reverse=descending)
    return present + missing
