"""Per-user notification inbox built on :class:`SyncedCollection`."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pysantiye.models._base import ResourceName
from pysantiye.sync.collection import SyncedCollection
from pysantiye.sync.events import RowFilter

if TYPE_CHECKING:
    from pysantiye.backend import DataBackend

_logger = logging.getLogger(__name__)


class NotificationChannel(SyncedCollection):
    """Notifications addressed to one owner, kept in sync live.

    Without an owner the channel stays idle: no fetch, no subscription,
    an empty collection and ``loading`` left ``True`` until
    :meth:`set_owner` supplies one.
    """

    def __init__(
        self,
        backend: DataBackend,
        owner_id: str | None,
        *,
        owner_field: str = "user_id",
        logger: logging.Logger | None = None,
    ) -> None:
        self._owner_field = owner_field
        self._owner_id = self._normalize_owner(owner_id)
        super().__init__(
            backend,
            ResourceName.NOTIFICATIONS.value,
            row_filter=self._scope(self._owner_id),
            logger=logger or _logger,
        )

    @property
    def owner_id(self) -> str | None:
        return self._owner_id

    @property
    def unread_count(self) -> int:
        return sum(1 for item in self._data if not item.get("is_read"))

    async def set_owner(self, owner_id: str | None) -> None:
        """Re-scope the inbox; the previous owner's rows are dropped."""
        owner = self._normalize_owner(owner_id)
        if owner == self._owner_id:
            return
        await self._teardown()
        self._owner_id = owner
        self._row_filter = self._scope(owner)
        self._data = []
        await self._reload()

    async def set_resource(self, resource: str) -> None:
        if resource != self._resource:
            raise ValueError(f"{type(self).__name__} is bound to {self._resource!r}")

    def _can_load(self) -> bool:
        return self._owner_id is not None

    def _scope(self, owner_id: str | None) -> RowFilter | None:
        if owner_id is None:
            return None
        return RowFilter(column=self._owner_field, value=owner_id)

    @staticmethod
    def _normalize_owner(owner_id: str | None) -> str | None:
        if owner_id is None:
            return None
        owner = str(owner_id).strip()
        return owner or None
