"""Daily site report rows."""

from __future__ import annotations

import datetime as dt
from typing import Any

from pysantiye.models._base import RecordModel

REPORT_STATUS_PENDING = "Bekliyor"
REPORT_STATUS_APPROVED = "Onaylandı"
REPORT_STATUS_REJECTED = "Reddedildi"


class DailyReport(RecordModel):
    """End-of-day report filed for a site."""

    date: dt.date
    site_id: str
    reporter_id: str
    work_description: str
    personnel_count: int = 0
    status: str = REPORT_STATUS_PENDING
    weather: str | None = None
    progress_notes: str | None = None
    images: list[str] | None = None
    materials_used: Any = None
