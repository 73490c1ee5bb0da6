"""Schemas for leads, their enriched view and activity history."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.activity import ActivityType
from .statuses import StatusRead, strip_text


class LeadRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    message: str | None = None
    source: str | None = None
    status_id: str
    created_at: datetime
    updated_at: datetime
    status_updated_at: datetime | None = None


class EnrichedLead(LeadRead):
    """Lead with its status resolved to the full status object."""

    status: StatusRead


class LeadCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str | None = None
    phone: str | None = None
    message: str | None = None
    source: str | None = Field(default="crm")
    status_id: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: object) -> object:
        return strip_text(value)


class LeadUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    email: str | None = None
    phone: str | None = None
    message: str | None = None
    source: str | None = None
    status_id: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: object) -> object:
        return strip_text(value)

    @field_validator("name", "status_id")
    @classmethod
    def _not_null(cls, value: str | None) -> str:
        """Explicit nulls are rejected; omit the field to leave it unchanged."""

        if value is None:
            raise ValueError("field may not be null")
        return value


class ActivityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    lead_id: str
    type: ActivityType
    description: str
    user_name: str | None = None
    created_at: datetime


class ActivityCreate(BaseModel):
    description: str = Field(min_length=1)
    user_name: str | None = None

    @field_validator("description", mode="before")
    @classmethod
    def _strip_description(cls, value: object) -> object:
        return strip_text(value)
