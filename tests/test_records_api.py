from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from pysantiye._api.records import (
    build_select_params,
    delete_record,
    fetch_records,
    insert_record,
    resource_endpoint,
    update_record,
    update_records,
)
from pysantiye._transport import _raise_for_error_body
from pysantiye.exceptions import SantiyeApiError, SantiyeResourceNotFoundError, SantiyeTransportError
from pysantiye.sync.events import RowFilter


class _RecordingTransport:
    def __init__(self, response: Any = None) -> None:
        self.response = response
        self.requests: list[dict[str, Any]] = []

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        body: Any = None,
        prefer: str | None = None,
    ) -> Any:
        self.requests.append(
            {"method": method, "endpoint": endpoint, "params": dict(params or {}), "body": body, "prefer": prefer}
        )
        return self.response


def test_select_params_order_and_filter() -> None:
    assert build_select_params() == {"select": "*", "order": "created_at.desc"}
    assert build_select_params(
        order_by="name",
        descending=False,
        row_filter=RowFilter(column="user_id", value="u1"),
    ) == {"select": "*", "order": "name.asc", "user_id": "eq.u1"}
    assert build_select_params(order_by=None) == {"select": "*"}


@pytest.mark.parametrize("name", ["", "sites/1", "sites?x=1", "../etc", "1sites"])
def test_resource_endpoint_rejects_unsafe_names(name: str) -> None:
    with pytest.raises(ValueError):
        resource_endpoint(name)


@pytest.mark.asyncio
async def test_fetch_records_returns_rows() -> None:
    transport = _RecordingTransport([{"id": "B"}, {"id": "A"}, "junk"])

    rows = await fetch_records(transport, "sites", row_filter=RowFilter(column="site_id", value="S1"))

    assert rows == [{"id": "B"}, {"id": "A"}]
    assert transport.requests[0]["method"] == "GET"
    assert transport.requests[0]["endpoint"] == "/sites"
    assert transport.requests[0]["params"]["site_id"] == "eq.S1"


@pytest.mark.asyncio
async def test_fetch_records_treats_empty_body_as_no_rows() -> None:
    assert await fetch_records(_RecordingTransport(None), "sites") == []


@pytest.mark.asyncio
async def test_fetch_records_rejects_non_array() -> None:
    with pytest.raises(SantiyeTransportError):
        await fetch_records(_RecordingTransport({"id": "A"}), "sites")


@pytest.mark.asyncio
async def test_insert_update_delete_requests() -> None:
    transport = _RecordingTransport([{"id": "N1", "name": "Çimento"}])

    inserted = await insert_record(transport, "materials", {"name": "Çimento"})
    updated = await update_record(transport, "materials", "N1", {"quantity": 5})
    deleted = await delete_record(transport, "materials", "N1")

    assert inserted == {"id": "N1", "name": "Çimento"}
    assert updated == {"id": "N1", "name": "Çimento"}
    assert deleted is True
    assert [r["method"] for r in transport.requests] == ["POST", "PATCH", "DELETE"]
    assert transport.requests[1]["params"] == {"id": "eq.N1"}
    assert all(r["prefer"] == "return=representation" for r in transport.requests)


@pytest.mark.asyncio
async def test_update_without_match_returns_none() -> None:
    assert await update_record(_RecordingTransport([]), "sites", "missing", {"progress": 1}) is None


@pytest.mark.asyncio
async def test_update_records_requires_filter() -> None:
    with pytest.raises(ValueError):
        await update_records(_RecordingTransport([]), "sites", {"progress": 1}, params={})


def test_unknown_table_maps_to_resource_not_found() -> None:
    body = '{"code":"42P01","details":null,"hint":null,"message":"relation \\"public.nope\\" does not exist"}'
    with pytest.raises(SantiyeResourceNotFoundError) as exc_info:
        _raise_for_error_body("/nope", 404, body)
    assert exc_info.value.code == "42P01"
    assert exc_info.value.status_code == 404


def test_api_error_body_maps_to_api_error() -> None:
    with pytest.raises(SantiyeApiError) as exc_info:
        _raise_for_error_body("/sites", 401, '{"code":"PGRST301","message":"JWT expired"}')
    assert not isinstance(exc_info.value, SantiyeResourceNotFoundError)
    assert exc_info.value.endpoint == "/sites"


def test_non_json_error_maps_to_transport_error() -> None:
    with pytest.raises(SantiyeTransportError) as exc_info:
        _raise_for_error_body("/sites", 502, "<html>Bad gateway</html>")
    assert exc_info.value.status_code == 502
