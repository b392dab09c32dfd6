"""Derived dashboard statistics.

Pure aggregations over raw rows as held by a :class:`SyncedCollection`.
They accept plain dicts so they can be recomputed from a listener on every
collection change without narrowing the rows first.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from datetime import date
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pysantiye.models.daily_report import (
    REPORT_STATUS_APPROVED,
    REPORT_STATUS_PENDING,
    REPORT_STATUS_REJECTED,
)
from pysantiye.models.notification import PRIORITY_CRITICAL
from pysantiye.models.personnel import PERSONNEL_STATUS_ACTIVE, PERSONNEL_STATUS_ON_LEAVE
from pysantiye.models.site import SITE_STATUS_ACTIVE, SITE_STATUS_COMPLETED, SITE_STATUS_PLANNING

Row = Mapping[str, Any]


class StockLevel(StrEnum):
    NORMAL = "Normal"
    CRITICAL = "Kritik"
    OUT_OF_STOCK = "Tükendi"


def _number(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class _Summary(BaseModel):
    model_config = ConfigDict(frozen=True)


class SiteSummary(_Summary):
    total: int = 0
    active: int = 0
    planning: int = 0
    completed: int = 0
    average_progress: float = 0.0


class PersonnelSummary(_Summary):
    total: int = 0
    active: int = 0
    on_leave: int = 0
    by_role: dict[str, int] = Field(default_factory=dict)


class MaterialSummary(_Summary):
    total: int = 0
    normal: int = 0
    critical: int = 0
    out_of_stock: int = 0


class ReportSummary(_Summary):
    total: int = 0
    approved: int = 0
    pending: int = 0
    rejected: int = 0
    today: int = 0


class NotificationSummary(_Summary):
    total: int = 0
    unread: int = 0
    read: int = 0
    critical_unread: int = 0


class DashboardStats(_Summary):
    sites: SiteSummary = Field(default_factory=SiteSummary)
    personnel: PersonnelSummary = Field(default_factory=PersonnelSummary)
    materials: MaterialSummary = Field(default_factory=MaterialSummary)
    reports: ReportSummary = Field(default_factory=ReportSummary)
    notifications: NotificationSummary = Field(default_factory=NotificationSummary)


def summarize_sites(sites: Iterable[Row]) -> SiteSummary:
    rows = list(sites)
    statuses = Counter(row.get("status") for row in rows)
    progress = [_number(row.get("progress")) for row in rows]
    return SiteSummary(
        total=len(rows),
        active=statuses[SITE_STATUS_ACTIVE],
        planning=statuses[SITE_STATUS_PLANNING],
        completed=statuses[SITE_STATUS_COMPLETED],
        average_progress=round(sum(progress) / len(progress), 1) if progress else 0.0,
    )


def summarize_personnel(personnel: Iterable[Row]) -> PersonnelSummary:
    rows = list(personnel)
    statuses = Counter(row.get("status") for row in rows)
    roles = Counter(str(row["role"]) for row in rows if row.get("role"))
    return PersonnelSummary(
        total=len(rows),
        active=statuses[PERSONNEL_STATUS_ACTIVE],
        on_leave=statuses[PERSONNEL_STATUS_ON_LEAVE],
        by_role=dict(roles),
    )


def material_stock_level(material: Row) -> StockLevel:
    """Classify stock by quantity against its critical level."""
    quantity = _number(material.get("quantity"))
    if quantity <= 0:
        return StockLevel.OUT_OF_STOCK
    if quantity <= _number(material.get("critical_level")):
        return StockLevel.CRITICAL
    return StockLevel.NORMAL


def summarize_materials(materials: Iterable[Row]) -> MaterialSummary:
    levels = Counter(material_stock_level(row) for row in materials)
    return MaterialSummary(
        total=sum(levels.values()),
        normal=levels[StockLevel.NORMAL],
        critical=levels[StockLevel.CRITICAL],
        out_of_stock=levels[StockLevel.OUT_OF_STOCK],
    )


def summarize_reports(reports: Iterable[Row], *, today: date | None = None) -> ReportSummary:
    rows = list(reports)
    statuses = Counter(row.get("status") for row in rows)
    day = (today or date.today()).isoformat()
    return ReportSummary(
        total=len(rows),
        approved=statuses[REPORT_STATUS_APPROVED],
        pending=statuses[REPORT_STATUS_PENDING],
        rejected=statuses[REPORT_STATUS_REJECTED],
        # ``date`` columns arrive as ISO strings.
        today=sum(1 for row in rows if str(row.get("date", ""))[:10] == day),
    )


def summarize_notifications(notifications: Iterable[Row]) -> NotificationSummary:
    rows = list(notifications)
    unread = [row for row in rows if not row.get("is_read")]
    return NotificationSummary(
        total=len(rows),
        unread=len(unread),
        read=len(rows) - len(unread),
        critical_unread=sum(1 for row in unread if row.get("priority") == PRIORITY_CRITICAL),
    )


def build_dashboard(
    *,
    sites: Iterable[Row] = (),
    personnel: Iterable[Row] = (),
    materials: Iterable[Row] = (),
    reports: Iterable[Row] = (),
    notifications: Iterable[Row] = (),
    today: date | None = None,
) -> DashboardStats:
    """Aggregate every dashboard card in one pass over the collections."""
    return DashboardStats(
        sites=summarize_sites(sites),
        personnel=summarize_personnel(personnel),
        materials=summarize_materials(materials),
        reports=summarize_reports(reports, today=today),
        notifications=summarize_notifications(notifications),
    )
