"""Construction site rows."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from pysantiye.models._base import RecordModel

SITE_STATUS_ACTIVE = "Aktif"
SITE_STATUS_PLANNING = "Planlama"
SITE_STATUS_COMPLETED = "Tamamlandı"


class Site(RecordModel):
    """A construction site (``sites`` table)."""

    name: str
    location: str = ""
    status: str = SITE_STATUS_PLANNING
    progress: int = Field(default=0, ge=0, le=100)
    """Completion percentage."""

    manager_id: str | None = None
    updated_at: datetime | None = None

    @field_validator("progress", mode="before")
    @classmethod
    def _clamp_progress(cls, value: object) -> object:
        if isinstance(value, (int, float)):
            return max(0, min(100, int(value)))
        return value

    @property
    def is_active(self) -> bool:
        return self.status == SITE_STATUS_ACTIVE
