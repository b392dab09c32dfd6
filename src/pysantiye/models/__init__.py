"""Typed models for dashboard tables."""

from pysantiye.models._base import RecordModel, ResourceName, narrow_records
from pysantiye.models.daily_report import DailyReport
from pysantiye.models.material import Material
from pysantiye.models.notification import Notification
from pysantiye.models.personnel import Personnel
from pysantiye.models.profile import Profile
from pysantiye.models.site import Site

__all__ = [
    "DailyReport",
    "Material",
    "Notification",
    "Personnel",
    "Profile",
    "RecordModel",
    "ResourceName",
    "Site",
    "narrow_records",
]
