"""High-level async client for the construction-site dashboard backend."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import aiohttp

from pysantiye._api import records as _records_api
from pysantiye._realtime import RealtimeRuntime
from pysantiye._transport import RestTransport
from pysantiye.backend import ChangeHandler, ChangeSubscription, InactiveSubscription
from pysantiye.config import SantiyeConfig
from pysantiye.exceptions import SantiyeError
from pysantiye.models._base import ResourceName
from pysantiye.sync.collection import SyncedCollection
from pysantiye.sync.events import Record, RowFilter
from pysantiye.sync.notifications import NotificationChannel

_logger = logging.getLogger(__name__)


class SantiyeClient:
    """Async client for the dashboard's hosted database and realtime service.

    Implements :class:`pysantiye.backend.DataBackend`, so it can be handed
    directly to :class:`SyncedCollection`.

    Usage::

        async with SantiyeClient(config) as client:
            async with client.collection("sites") as sites:
                await sites.wait_until_loaded()
                print(sites.data)
    """

    def __init__(
        self,
        config: SantiyeConfig,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: RestTransport | None = None
        self._realtime: RealtimeRuntime | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SantiyeClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = RestTransport(self._config, self._http_session)
        if self._config.realtime_enabled:
            self._realtime = RealtimeRuntime(
                config=self._config,
                http_session=self._http_session,
                logger=_logger,
            )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        realtime = self._realtime
        self._realtime = None
        if realtime is not None:
            try:
                await realtime.stop()
            except Exception:
                _logger.debug("Realtime runtime stop failed", exc_info=True)
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    @property
    def config(self) -> SantiyeConfig:
        return self._config

    def _require_transport(self) -> RestTransport:
        if self._transport is None:
            raise SantiyeError("Client not initialized. Use 'async with SantiyeClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # DataBackend
    # ------------------------------------------------------------------

    async def fetch_all(
        self,
        resource: str,
        *,
        order_by: str = "created_at",
        descending: bool = True,
        row_filter: RowFilter | None = None,
    ) -> list[Record]:
        """Fetch every row of *resource*, newest first by default."""
        return await _records_api.fetch_records(
            self._require_transport(),
            resource,
            order_by=order_by,
            descending=descending,
            row_filter=row_filter,
        )

    async def subscribe_to_changes(
        self,
        resource: str,
        on_event: ChangeHandler,
        *,
        row_filter: RowFilter | None = None,
    ) -> ChangeSubscription:
        """Open a change channel for *resource*.

        With realtime disabled this returns a handle that never fires.
        """
        self._require_transport()
        realtime = self._realtime
        if realtime is None:
            _logger.debug("Realtime disabled; %s subscription is inactive", resource)
            return InactiveSubscription(resource)
        return await realtime.subscribe(resource, on_event, row_filter=row_filter)

    # ------------------------------------------------------------------
    # Record mutations
    # ------------------------------------------------------------------

    async def insert_record(self, resource: str, values: Mapping[str, Any]) -> Record:
        """Insert a row; subscribed collections see it as an INSERT event."""
        return await _records_api.insert_record(self._require_transport(), resource, values)

    async def update_record(self, resource: str, record_id: Any, values: Mapping[str, Any]) -> Record | None:
        return await _records_api.update_record(self._require_transport(), resource, record_id, values)

    async def delete_record(self, resource: str, record_id: Any) -> bool:
        return await _records_api.delete_record(self._require_transport(), resource, record_id)

    async def mark_notification_read(self, notification_id: Any) -> Record | None:
        return await self.update_record(ResourceName.NOTIFICATIONS, notification_id, {"is_read": True})

    async def mark_all_notifications_read(self, owner_id: str, *, owner_field: str = "user_id") -> list[Record]:
        """Mark every unread notification of *owner_id* as read."""
        scope = RowFilter(column=owner_field, value=owner_id)
        return await _records_api.update_records(
            self._require_transport(),
            ResourceName.NOTIFICATIONS,
            {"is_read": True},
            params={scope.column: f"eq.{scope.value}", "is_read": "eq.false"},
        )

    # ------------------------------------------------------------------
    # Collection factories
    # ------------------------------------------------------------------

    def collection(self, resource: str, initial: Sequence[Record] | None = None) -> SyncedCollection:
        """Create an unstarted collection synced against this client."""
        return SyncedCollection(self, str(resource), initial)

    def notifications(self, owner_id: str | None, *, owner_field: str = "user_id") -> NotificationChannel:
        """Create an unstarted notification inbox for *owner_id*."""
        return NotificationChannel(self, owner_id, owner_field=owner_field)
