"""Schemas for the lead status registry."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


def strip_text(value: object) -> object:
    if isinstance(value, str):
        return value.strip()
    return value


class StatusRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    color: str
    order_num: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StatusCreate(BaseModel):
    name: str = Field(min_length=2)
    color: str = Field(default="#888888", pattern=HEX_COLOR_PATTERN)
    order_num: int = Field(gt=0)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: object) -> object:
        return strip_text(value)


class StatusUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2)
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)
    order_num: int | None = Field(default=None, gt=0)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: object) -> object:
        return strip_text(value)
