"""Material stock rows."""

from __future__ import annotations

from datetime import datetime

from pysantiye.models._base import RecordModel


class Material(RecordModel):
    """Stock of one material, optionally tied to a site."""

    name: str
    quantity: float = 0
    unit: str = ""
    critical_level: float = 0
    """Quantity at or below which the stock is considered critical."""

    status: str = "Normal"
    site_id: str | None = None
    updated_at: datetime | None = None
