"""Row-level REST operations.

These helpers build PostgREST query parameters and validate reply shapes.
They raise on any failure; callers in the sync layer decide how to
degrade.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pysantiye._transport import Transport
from pysantiye.exceptions import SantiyeTransportError
from pysantiye.sync.events import Record, RowFilter

_RESOURCE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_RETURN_REPRESENTATION = "return=representation"


def resource_endpoint(resource: str) -> str:
    """Validate a table name and return its REST path."""
    name = str(resource).strip()
    if not _RESOURCE_RE.match(name):
        raise ValueError(f"Invalid resource name: {resource!r}")
    return f"/{name}"


def build_select_params(
    *,
    order_by: str | None = "created_at",
    descending: bool = True,
    row_filter: RowFilter | None = None,
) -> dict[str, str]:
    """Query parameters for ``select=*`` with ordering and an equality filter."""
    params: dict[str, str] = {"select": "*"}
    if order_by:
        params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
    if row_filter is not None:
        params[row_filter.column] = f"eq.{row_filter.value}"
    return params


def _id_params(record_id: Any) -> dict[str, str]:
    return {"id": f"eq.{record_id}"}


def _expect_rows(endpoint: str, body: Any) -> list[Record]:
    if body is None:
        return []
    if not isinstance(body, list):
        raise SantiyeTransportError(f"Expected a JSON array from {endpoint}", endpoint=endpoint)
    return [row for row in body if isinstance(row, dict)]


async def fetch_records(
    transport: Transport,
    resource: str,
    *,
    order_by: str | None = "created_at",
    descending: bool = True,
    row_filter: RowFilter | None = None,
) -> list[Record]:
    """Fetch every row of *resource* in the requested order."""
    endpoint = resource_endpoint(resource)
    body = await transport.request(
        "GET",
        endpoint,
        params=build_select_params(order_by=order_by, descending=descending, row_filter=row_filter),
    )
    return _expect_rows(endpoint, body)


async def insert_record(transport: Transport, resource: str, values: Mapping[str, Any]) -> Record:
    """Insert one row and return it as stored (with generated columns)."""
    endpoint = resource_endpoint(resource)
    body = await transport.request("POST", endpoint, body=dict(values), prefer=_RETURN_REPRESENTATION)
    rows = _expect_rows(endpoint, body)
    if not rows:
        raise SantiyeTransportError(f"Insert into {endpoint} returned no row", endpoint=endpoint)
    return rows[0]


async def update_records(
    transport: Transport,
    resource: str,
    values: Mapping[str, Any],
    *,
    params: Mapping[str, str],
) -> list[Record]:
    """Patch every row matching *params*; returns the updated rows."""
    if not params:
        raise ValueError("Refusing to update without a row filter")
    endpoint = resource_endpoint(resource)
    body = await transport.request(
        "PATCH",
        endpoint,
        params=params,
        body=dict(values),
        prefer=_RETURN_REPRESENTATION,
    )
    return _expect_rows(endpoint, body)


async def update_record(
    transport: Transport,
    resource: str,
    record_id: Any,
    values: Mapping[str, Any],
) -> Record | None:
    """Patch one row by id. Returns ``None`` if no row matched."""
    rows = await update_records(transport, resource, values, params=_id_params(record_id))
    return rows[0] if rows else None


async def delete_record(transport: Transport, resource: str, record_id: Any) -> bool:
    """Delete one row by id. Returns whether a row was removed."""
    endpoint = resource_endpoint(resource)
    body = await transport.request(
        "DELETE",
        endpoint,
        params=_id_params(record_id),
        prefer=_RETURN_REPRESENTATION,
    )
    return bool(_expect_rows(endpoint, body))
