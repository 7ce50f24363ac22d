"""Change-event records that announce a new revision of an entity."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator


class EventMeta(BaseModel):
    """The ``meta`` block shared by all event-platform records."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    dt: AwareDatetime
    domain: str | None = None
    stream: str | None = None
    request_id: str | None = None

    @field_validator("dt")
    @classmethod
    def _normalize_dt(cls, value: datetime) -> datetime:
        return value.astimezone(UTC)


class RevisionCreateEvent(BaseModel):
    """Record of the ``mediawiki.revision-create`` stream."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    meta: EventMeta
    revision: int = Field(alias="rev_id", ge=0)
    title: str = Field(alias="page_title", min_length=1)
    namespace: int = Field(alias="page_namespace")


__all__ = ["EventMeta", "RevisionCreateEvent"]
