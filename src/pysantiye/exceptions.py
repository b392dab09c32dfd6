"""Custom exception hierarchy for pysantiye."""

from __future__ import annotations


class SantiyeError(Exception):
    """Base exception for all pysantiye errors."""


class SantiyeConfigError(SantiyeError):
    """Invalid or missing configuration."""


class SantiyeTransportError(SantiyeError):
    """HTTP-level failure (network, timeout, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class SantiyeApiError(SantiyeError):
    """Backend rejected the request (PostgREST error body)."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
        status_code: int | None = None,
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(message)


class SantiyeResourceNotFoundError(SantiyeApiError):
    """The requested table does not exist in the exposed schema.

    Raised for PostgREST codes such as ``42P01`` (undefined table) and
    ``PGRST205`` (table missing from the schema cache).
    """


class SantiyeRealtimeError(SantiyeError):
    """Realtime websocket failure (connect, send, unexpected close)."""


class SantiyeSubscriptionError(SantiyeRealtimeError):
    """A channel join was rejected or timed out."""

    def __init__(self, message: str, *, topic: str = "") -> None:
        self.topic = topic
        super().__init__(message)
