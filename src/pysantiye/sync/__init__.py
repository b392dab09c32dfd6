"""Realtime synchronization layer.

This package keeps client-held collections consistent with a remote
resource: one initial snapshot followed by insert/update/delete change
events applied in arrival order. Only this package mutates collection
state; backends merely fetch rows and deliver :class:`ChangeEvent`s.
"""

from pysantiye.sync.collection import SyncedCollection
from pysantiye.sync.events import ChangeEvent, ChangeType, RowFilter
from pysantiye.sync.notifications import NotificationChannel

__all__ = [
    "ChangeEvent",
    "ChangeType",
    "NotificationChannel",
    "RowFilter",
    "SyncedCollection",
]
