"""User profile rows."""

from __future__ import annotations

from datetime import datetime

from pysantiye.models._base import RecordModel


class Profile(RecordModel):
    name: str
    role: str
    avatar_url: str | None = None
    updated_at: datetime | None = None
