"""Data backend interface consumed by the synchronization layer.

The sync layer treats the backend as a black box with two operations:
a one-shot ordered fetch and a cancellable change subscription.
:class:`pysantiye.client.SantiyeClient` is the production implementation;
tests pass lightweight fakes.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from pysantiye.sync.events import ChangeEvent, Record, RowFilter

ChangeHandler = Callable[[ChangeEvent], None]


class ChangeSubscription(Protocol):
    """Handle for one live change channel."""

    @property
    def is_active(self) -> bool: ...

    async def close(self) -> None:
        """Release the channel. Closing twice is a no-op."""
        ...


class DataBackend(Protocol):
    """Structural interface for anything a collection can sync from."""

    async def fetch_all(
        self,
        resource: str,
        *,
        order_by: str = "created_at",
        descending: bool = True,
        row_filter: RowFilter | None = None,
    ) -> list[Record]: ...

    async def subscribe_to_changes(
        self,
        resource: str,
        on_event: ChangeHandler,
        *,
        row_filter: RowFilter | None = None,
    ) -> ChangeSubscription: ...


class InactiveSubscription:
    """Subscription that never delivers events.

    Returned when realtime is disabled in the configuration.
    """

    def __init__(self, resource: str) -> None:
        self.resource = resource

    @property
    def is_active(self) -> bool:
        return False

    async def close(self) -> None:
        return None
