from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from pysantiye.sync.apply import sort_snapshot
from pysantiye.sync.events import ChangeEvent, RowFilter


class FakeSubscription:
    def __init__(self, resource: str, handler: Callable[[ChangeEvent], None], row_filter: RowFilter | None) -> None:
        self.resource = resource
        self.handler = handler
        self.row_filter = row_filter
        self.closed = False

    @property
    def is_active(self) -> bool:
        return not self.closed

    async def close(self) -> None:
        self.closed = True

    def emit(self, event: ChangeEvent) -> None:
        if not self.closed:
            self.handler(event)


class FakeBackend:
    """In-memory DataBackend; ``emit`` plays the role of the change feed."""

    def __init__(self) -> None:
        self.rows: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple[str, str, RowFilter | None]] = []
        self.subscriptions: list[FakeSubscription] = []
        self.fetch_error: Exception | None = None
        self.subscribe_error: Exception | None = None
        self.fetch_gate: asyncio.Event | None = None

    async def fetch_all(
        self,
        resource: str,
        *,
        order_by: str = "created_at",
        descending: bool = True,
        row_filter: RowFilter | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append(("fetch_all", resource, row_filter))
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        if self.fetch_error is not None:
            raise self.fetch_error
        rows = self.rows.get(resource, [])
        if row_filter is not None:
            rows = [row for row in rows if row_filter.matches_record(row)]
        return sort_snapshot(rows, order_by, descending=descending)

    async def subscribe_to_changes(
        self,
        resource: str,
        on_event: Callable[[ChangeEvent], None],
        *,
        row_filter: RowFilter | None = None,
    ) -> FakeSubscription:
        self.calls.append(("subscribe", resource, row_filter))
        if self.subscribe_error is not None:
            raise self.subscribe_error
        subscription = FakeSubscription(resource, on_event, row_filter)
        self.subscriptions.append(subscription)
        return subscription

    @property
    def active_subscriptions(self) -> list[FakeSubscription]:
        return [sub for sub in self.subscriptions if sub.is_active]

    def calls_of(self, kind: str) -> list[tuple[str, str, RowFilter | None]]:
        return [call for call in self.calls if call[0] == kind]

    def emit(self, event: ChangeEvent) -> None:
        for subscription in list(self.subscriptions):
            if subscription.resource == event.resource:
                subscription.emit(event)


async def _wait_for(predicate: Callable[[], object], *, attempts: int = 100) -> None:
    """Yield to the loop until *predicate* holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.fixture
def wait_for() -> Callable[..., Any]:
    return _wait_for


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def site_rows() -> list[dict[str, Any]]:
    return [
        {"id": "A", "name": "Ankara Plaza", "status": "Aktif", "progress": 45, "created_at": "2026-01-01T08:00:00+00:00"},
        {"id": "B", "name": "İzmir Rezidans", "status": "Planlama", "progress": 15, "created_at": "2026-01-02T08:00:00+00:00"},
    ]
