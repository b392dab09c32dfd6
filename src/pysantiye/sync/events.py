"""Normalized change events.

Every backend converts its wire messages into these events. Only the
collection layer is allowed to apply them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Record = dict[str, Any]


class ChangeType(StrEnum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class RowFilter(BaseModel):
    """Equality filter scoping a fetch or subscription to matching rows."""

    model_config = ConfigDict(frozen=True)

    column: str
    value: str

    @field_validator("column", "value", mode="before")
    @classmethod
    def _as_clean_str(cls, value: Any) -> str:
        text = str(value).strip() if value is not None else ""
        if not text:
            raise ValueError("row filter column and value must be non-empty")
        return text

    def to_query(self) -> str:
        """Render as the backend filter syntax, e.g. ``user_id=eq.42``."""
        return f"{self.column}=eq.{self.value}"

    def matches_record(self, record: Record) -> bool | None:
        """Whether *record* satisfies the filter.

        Returns ``None`` when the record does not carry the column at all.
        """
        if self.column not in record:
            return None
        candidate = record[self.column]
        return candidate is not None and str(candidate) == self.value

    def matches(self, event: ChangeEvent) -> bool:
        """Decide whether a change event belongs to this scope.

        DELETE events often carry only the primary key in ``old_record``;
        those are accepted because the backend already scoped them.
        """
        if event.type == ChangeType.DELETE:
            return self.matches_record(event.old_record) is not False
        return self.matches_record(event.record) is True


class ChangeEvent(BaseModel):
    """A single insert/update/delete observed on one resource."""

    model_config = ConfigDict(frozen=True)

    resource: str = Field(..., description="Table the change happened on")
    type: ChangeType
    record: Record = Field(default_factory=dict, description="New row (INSERT/UPDATE)")
    old_record: Record = Field(default_factory=dict, description="Old row; at least the id for DELETE")
    commit_timestamp: datetime | None = None
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("resource")
    @classmethod
    def _normalize_resource(cls, value: str) -> str:
        resource = value.strip()
        if not resource:
            raise ValueError("resource must be non-empty")
        return resource

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @model_validator(mode="after")
    def _require_identity(self) -> ChangeEvent:
        source = self.old_record if self.type == ChangeType.DELETE else self.record
        if source.get("id") is None:
            field = "old_record" if self.type == ChangeType.DELETE else "record"
            raise ValueError(f"{self.type.value} event requires {field}['id']")
        return self

    @property
    def record_id(self) -> Any:
        """Identity of the row this event targets."""
        if self.type == ChangeType.DELETE:
            return self.old_record["id"]
        return self.record["id"]

    @classmethod
    def insert(cls, resource: str, record: Record) -> ChangeEvent:
        return cls(resource=resource, type=ChangeType.INSERT, record=record)

    @classmethod
    def update(cls, resource: str, record: Record) -> ChangeEvent:
        return cls(resource=resource, type=ChangeType.UPDATE, record=record)

    @classmethod
    def delete(cls, resource: str, record_id: Any, **old_fields: Any) -> ChangeEvent:
        return cls(resource=resource, type=ChangeType.DELETE, old_record={**old_fields, "id": record_id})
