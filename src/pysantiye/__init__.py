"""pysantiye - Async Python client for a construction-site dashboard backend."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pysantiye")
except PackageNotFoundError:
    __version__ = "0+local"
from pysantiye.backend import ChangeSubscription, DataBackend
from pysantiye.client import SantiyeClient
from pysantiye.config import SantiyeConfig
from pysantiye.exceptions import (
    SantiyeApiError,
    SantiyeConfigError,
    SantiyeError,
    SantiyeRealtimeError,
    SantiyeResourceNotFoundError,
    SantiyeSubscriptionError,
    SantiyeTransportError,
)
from pysantiye.models import (
    DailyReport,
    Material,
    Notification,
    Personnel,
    Profile,
    RecordModel,
    ResourceName,
    Site,
    narrow_records,
)
from pysantiye.stats import DashboardStats, build_dashboard
from pysantiye.sync import ChangeEvent, ChangeType, NotificationChannel, RowFilter, SyncedCollection

__all__ = [
    "__version__",
    "ChangeEvent",
    "ChangeSubscription",
    "ChangeType",
    "DailyReport",
    "DashboardStats",
    "DataBackend",
    "Material",
    "Notification",
    "NotificationChannel",
    "Personnel",
    "Profile",
    "RecordModel",
    "ResourceName",
    "RowFilter",
    "SantiyeApiError",
    "SantiyeClient",
    "SantiyeConfig",
    "SantiyeConfigError",
    "SantiyeError",
    "SantiyeRealtimeError",
    "SantiyeResourceNotFoundError",
    "SantiyeSubscriptionError",
    "SantiyeTransportError",
    "Site",
    "SyncedCollection",
    "build_dashboard",
    "narrow_records",
]
