"""Notification rows."""

from __future__ import annotations

from pysantiye.models._base import RecordModel

PRIORITY_CRITICAL = "critical"


class Notification(RecordModel):
    """An inbox entry addressed to one user."""

    title: str
    message: str
    type: str = "info"
    priority: str = "medium"
    source: str = ""
    is_read: bool = False
    user_id: str | None = None

    @property
    def is_critical(self) -> bool:
        return self.priority == PRIORITY_CRITICAL
