from __future__ import annotations

import logging
from datetime import UTC, date, datetime

import pytest

from pysantiye.models import DailyReport, Material, Notification, ResourceName, Site, narrow_records


def test_site_parses_backend_row() -> None:
    row = {
        "id": "S1",
        "name": "İstanbul Konut Projesi",
        "location": "İstanbul",
        "status": "Aktif",
        "progress": 75,
        "manager_id": None,
        "created_at": "2026-01-01T08:00:00+00:00",
        "updated_at": "2026-01-03T08:00:00+00:00",
        "extra_column": "ignored",
    }

    site = Site.model_validate(row)

    assert site.is_active is True
    assert site.progress == 75
    assert site.created_at == datetime(2026, 1, 1, 8, 0, tzinfo=UTC)
    assert site.raw == row


def test_progress_is_clamped() -> None:
    assert Site.model_validate({"id": "S1", "name": "x", "progress": 140}).progress == 100
    assert Site.model_validate({"id": "S1", "name": "x", "progress": -3}).progress == 0


def test_naive_created_at_becomes_utc() -> None:
    material = Material.model_validate({"id": 7, "name": "Çimento", "created_at": "2026-01-01T08:00:00"})
    assert material.id == "7"
    assert material.created_at is not None
    assert material.created_at.tzinfo is UTC


def test_daily_report_date_field() -> None:
    report = DailyReport.model_validate(
        {
            "id": "R1",
            "date": "2026-01-05",
            "site_id": "S1",
            "reporter_id": "U1",
            "work_description": "Kalıp işleri",
        }
    )
    assert report.date == date(2026, 1, 5)
    assert report.status == "Bekliyor"


def test_notification_critical_flag() -> None:
    notification = Notification.model_validate(
        {"id": "n1", "title": "Stok", "message": "Çimento kritik", "priority": "critical"}
    )
    assert notification.is_critical is True
    assert notification.is_read is False


def test_narrow_records_skips_invalid_rows(caplog: pytest.LogCaptureFixture) -> None:
    rows = [
        {"id": "S2", "name": "Ankara Plaza"},
        {"id": "", "name": "no id"},
        {"id": "S1"},
        {"id": "S0", "name": "Bursa AVM"},
    ]

    with caplog.at_level(logging.WARNING):
        sites = narrow_records(rows, Site)

    assert [site.id for site in sites] == ["S2", "S0"]
    assert "Skipping Site row" in caplog.text


def test_resource_names_are_strings() -> None:
    assert ResourceName.DAILY_REPORTS == "daily_reports"
    assert str(ResourceName.NOTIFICATIONS) == "notifications"
