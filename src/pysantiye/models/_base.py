"""Base model and resource names for dashboard tables.

Every record model inherits from :class:`RecordModel` which provides:

* the two fields the sync layer relies on (``id``, ``created_at``),
* ``extra="ignore"`` so new backend columns never break validation,
* a ``raw`` dict that captures the original row.

The sync core works on plain dicts; these models are for narrowing rows
at the consumer boundary.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

_logger = logging.getLogger(__name__)


class ResourceName(StrEnum):
    """Tables exposed by the dashboard backend."""

    SITES = "sites"
    PERSONNEL = "personnel"
    MATERIALS = "materials"
    DAILY_REPORTS = "daily_reports"
    NOTIFICATIONS = "notifications"
    PROFILES = "profiles"


class RecordModel(BaseModel):
    """Base for typed dashboard rows."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    id: str
    created_at: datetime | None = None

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original row as returned by the backend."""

    @model_validator(mode="before")
    @classmethod
    def _ensure_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        merged = dict(values)
        merged.setdefault("raw", values)
        return merged

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        if value is None or str(value).strip() == "":
            raise ValueError("id must be non-empty")
        return str(value)

    @field_validator("created_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


M = TypeVar("M", bound=RecordModel)


def narrow_records(records: Iterable[dict[str, Any]], model: type[M]) -> list[M]:
    """Validate rows into *model*, skipping (and logging) invalid ones.

    Order is preserved.
    """
    narrowed: list[M] = []
    for record in records:
        try:
            narrowed.append(model.model_validate(record))
        except ValidationError as exc:
            _logger.warning(
                "Skipping %s row id=%s: %s",
                model.__name__,
                record.get("id") if isinstance(record, dict) else None,
                exc.errors(include_url=False),
            )
    return narrowed
