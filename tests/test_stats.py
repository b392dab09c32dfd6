from __future__ import annotations

from datetime import date

from pysantiye.stats import (
    StockLevel,
    build_dashboard,
    material_stock_level,
    summarize_materials,
    summarize_notifications,
    summarize_personnel,
    summarize_reports,
    summarize_sites,
)


def test_site_summary() -> None:
    summary = summarize_sites(
        [
            {"id": "1", "status": "Aktif", "progress": 75},
            {"id": "2", "status": "Aktif", "progress": 45},
            {"id": "3", "status": "Planlama", "progress": 0},
            {"id": "4", "status": "Tamamlandı", "progress": 100},
        ]
    )

    assert (summary.total, summary.active, summary.planning, summary.completed) == (4, 2, 1, 1)
    assert summary.average_progress == 55.0


def test_empty_inputs_give_zeroes() -> None:
    assert summarize_sites([]).average_progress == 0.0
    assert build_dashboard().notifications.total == 0


def test_personnel_summary_by_role() -> None:
    summary = summarize_personnel(
        [
            {"id": "1", "role": "İşçi", "status": "Aktif"},
            {"id": "2", "role": "İşçi", "status": "İzinli"},
            {"id": "3", "role": "Mimar", "status": "Aktif"},
        ]
    )

    assert summary.active == 2
    assert summary.on_leave == 1
    assert summary.by_role == {"İşçi": 2, "Mimar": 1}


def test_material_stock_levels() -> None:
    assert material_stock_level({"quantity": 0, "critical_level": 10}) == StockLevel.OUT_OF_STOCK
    assert material_stock_level({"quantity": 10, "critical_level": 10}) == StockLevel.CRITICAL
    assert material_stock_level({"quantity": 11, "critical_level": 10}) == StockLevel.NORMAL
    assert material_stock_level({"quantity": "bad"}) == StockLevel.OUT_OF_STOCK

    summary = summarize_materials(
        [{"quantity": 50, "critical_level": 10}, {"quantity": 5, "critical_level": 10}, {"quantity": 0}]
    )
    assert (summary.total, summary.normal, summary.critical, summary.out_of_stock) == (3, 1, 1, 1)


def test_report_summary_counts_today() -> None:
    summary = summarize_reports(
        [
            {"id": "1", "status": "Onaylandı", "date": "2026-01-05"},
            {"id": "2", "status": "Bekliyor", "date": "2026-01-05"},
            {"id": "3", "status": "Reddedildi", "date": "2026-01-04"},
        ],
        today=date(2026, 1, 5),
    )

    assert (summary.approved, summary.pending, summary.rejected, summary.today) == (1, 1, 1, 2)


def test_notification_summary() -> None:
    summary = summarize_notifications(
        [
            {"id": "1", "is_read": False, "priority": "critical"},
            {"id": "2", "is_read": True, "priority": "critical"},
            {"id": "3", "is_read": False, "priority": "low"},
        ]
    )

    assert (summary.total, summary.unread, summary.read, summary.critical_unread) == (3, 2, 1, 1)


def test_build_dashboard_combines_sections() -> None:
    stats = build_dashboard(
        sites=[{"status": "Aktif", "progress": 10}],
        materials=[{"quantity": 1, "critical_level": 5}],
        today=date(2026, 1, 1),
    )

    assert stats.sites.active == 1
    assert stats.materials.critical == 1
    assert stats.reports.total == 0
