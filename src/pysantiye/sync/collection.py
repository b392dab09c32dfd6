"""Synchronized collection: one snapshot plus a live change stream.

A :class:`SyncedCollection` is privately owned by one consumer. It opens
exactly one change subscription per mount, loads the initial snapshot,
and applies every change event in the order the backend delivers it.
Failures never propagate to the consumer; they are logged and the
collection keeps its previous contents.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from pysantiye._redact import redact_for_log
from pysantiye.sync.apply import apply_change
from pysantiye.sync.events import ChangeEvent, Record, RowFilter

if TYPE_CHECKING:
    from pysantiye.backend import ChangeSubscription, DataBackend

_logger = logging.getLogger(__name__)

Listener = Callable[[list[Record]], None]
DataUpdate = Sequence[Record] | Callable[[list[Record]], Sequence[Record]]


class SyncedCollection:
    """Keep an in-memory list of records in sync with a backend resource.

    Usage::

        async with SyncedCollection(backend, "sites") as sites:
            sites.add_listener(render)
            await sites.wait_until_loaded()

    Load sequence (per mount or resource change):

    1. subscribe to change events; events arriving from here on are
       buffered while the snapshot is in flight,
    2. fetch all rows ordered by ``created_at`` descending,
    3. replace the data with the snapshot (kept as-is on failure),
    4. replay buffered events in arrival order, clear ``loading``.

    Inserts are prepended, updates replace in place, deletes remove.
    Unknown ids on update/delete are no-ops and duplicate inserts are
    kept.
    """

    def __init__(
        self,
        backend: DataBackend,
        resource: str,
        initial: Sequence[Record] | None = None,
        *,
        row_filter: RowFilter | None = None,
        order_by: str = "created_at",
        descending: bool = True,
        logger: logging.Logger | None = None,
    ) -> None:
        self._backend = backend
        self._resource = resource
        self._row_filter = row_filter
        self._order_by = order_by
        self._descending = descending
        self._logger = logger or _logger

        self._data: list[Record] = list(initial) if initial else []
        self._loading = True
        self._listeners: list[Listener] = []

        self._started = False
        # Bumped on every teardown; late fetch results and events carrying
        # an older generation are ignored.
        self._generation = 0
        self._task: asyncio.Task[None] | None = None
        self._subscription: ChangeSubscription | None = None
        self._pending: list[ChangeEvent] | None = None

    # ------------------------------------------------------------------
    # Consumer-facing state
    # ------------------------------------------------------------------

    @property
    def data(self) -> list[Record]:
        """Current records, most recent first."""
        return list(self._data)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def resource(self) -> str:
        return self._resource

    @property
    def row_filter(self) -> RowFilter | None:
        return self._row_filter

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_subscribed(self) -> bool:
        subscription = self._subscription
        return subscription is not None and subscription.is_active

    def set_data(self, value: DataUpdate) -> None:
        """Replace the records, or transform them with a callable.

        Local edits are not sent to the backend and are subject to later
        change events like any other row.
        """
        new_data = value(list(self._data)) if callable(value) else value
        self._data = list(new_data)
        self._notify()

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* to be called after every mutation.

        Returns a callable that unregisters it.
        """
        self._listeners.append(listener)

        def _remove() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _remove

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Mount: schedule the load sequence and return immediately."""
        if self._started:
            return
        self._started = True
        if self._can_load():
            self._launch()
        else:
            self._logger.debug("%s collection idle until its scope is set", self._resource)

    async def close(self) -> None:
        """Unmount: release the subscription and ignore late results."""
        if not self._started:
            return
        self._started = False
        await self._teardown()

    async def set_resource(self, resource: str) -> None:
        """Switch to another resource, tearing down the current channel first."""
        if resource == self._resource:
            return
        await self._teardown()
        self._resource = resource
        await self._reload()

    async def wait_until_loaded(self) -> None:
        """Wait for the current load sequence to finish (or be torn down)."""
        task = self._task
        if task is None:
            return
        await asyncio.wait({task})

    async def __aenter__(self) -> SyncedCollection:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(resource={self._resource!r}, "
            f"records={len(self._data)}, loading={self._loading})"
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _can_load(self) -> bool:
        return True

    async def _reload(self) -> None:
        await self._teardown()
        self._loading = True
        if self._started and self._can_load():
            self._launch()
        self._notify()

    def _launch(self) -> None:
        self._generation += 1
        generation = self._generation
        self._pending = []
        self._loading = True
        self._task = asyncio.get_running_loop().create_task(
            self._load(generation),
            name=f"pysantiye-sync-{self._resource}",
        )

    def _is_current(self, generation: int) -> bool:
        return self._started and generation == self._generation

    async def _teardown(self) -> None:
        self._generation += 1
        self._pending = None

        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        subscription = self._subscription
        self._subscription = None
        if subscription is not None:
            await self._release(subscription)

    async def _release(self, subscription: ChangeSubscription) -> None:
        try:
            await subscription.close()
        except Exception:
            self._logger.debug("Releasing %s subscription failed", self._resource, exc_info=True)

    async def _load(self, generation: int) -> None:
        subscription = await self._open_subscription(generation)
        if not self._is_current(generation):
            if subscription is not None:
                await self._release(subscription)
            return
        self._subscription = subscription

        fetched = True
        records: list[Record] | None = None
        try:
            records = await self._backend.fetch_all(
                self._resource,
                order_by=self._order_by,
                descending=self._descending,
                row_filter=self._row_filter,
            )
        except Exception as exc:
            self._logger.error("Error fetching %s: %s", self._resource, exc)
            self._logger.debug("Fetch failure detail for %s", self._resource, exc_info=True)
            fetched = False

        if not self._is_current(generation):
            self._logger.debug("Discarding stale %s snapshot", self._resource)
            return

        if fetched:
            self._data = list(records or [])

        pending = self._pending or []
        self._pending = None
        for event in pending:
            self._apply(event)

        self._loading = False
        self._notify()

    async def _open_subscription(self, generation: int) -> ChangeSubscription | None:
        handler = functools.partial(self._on_event, generation)
        try:
            return await self._backend.subscribe_to_changes(
                self._resource,
                handler,
                row_filter=self._row_filter,
            )
        except Exception as exc:
            self._logger.error("Error subscribing to %s changes: %s", self._resource, exc)
            self._logger.debug("Subscription failure detail for %s", self._resource, exc_info=True)
            return None

    def _on_event(self, generation: int, event: ChangeEvent) -> None:
        try:
            if not self._is_current(generation):
                self._logger.debug("Dropping %s change from a released subscription", self._resource)
                return
            if self._logger.isEnabledFor(logging.DEBUG):
                self._logger.debug(
                    "%s change: %s",
                    self._resource,
                    redact_for_log(event.model_dump(mode="json")),
                )
            if event.resource != self._resource:
                return
            if self._row_filter is not None and not self._row_filter.matches(event):
                self._logger.debug("Dropping %s change outside %s", self._resource, self._row_filter.to_query())
                return
            if self._pending is not None:
                self._pending.append(event)
                return
            if self._apply(event):
                self._notify()
        except Exception:
            self._logger.error("Error handling %s change", self._resource, exc_info=True)

    def _apply(self, event: ChangeEvent) -> bool:
        try:
            self._data = apply_change(self._data, event)
        except Exception:
            self._logger.error("Error applying %s %s change", self._resource, event.type, exc_info=True)
            return False
        return True

    def _notify(self) -> None:
        snapshot = list(self._data)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                self._logger.error("%s listener failed", self._resource, exc_info=True)
