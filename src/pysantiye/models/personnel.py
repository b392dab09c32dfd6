"""Personnel rows."""

from __future__ import annotations

from datetime import datetime

from pysantiye.models._base import RecordModel

PERSONNEL_STATUS_ACTIVE = "Aktif"
PERSONNEL_STATUS_ON_LEAVE = "İzinli"


class Personnel(RecordModel):
    """A worker or staff member assigned to a site."""

    name: str
    role: str
    status: str = PERSONNEL_STATUS_ACTIVE
    email: str | None = None
    phone: str | None = None
    site_id: str | None = None
    user_id: str | None = None
    updated_at: datetime | None = None
