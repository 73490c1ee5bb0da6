"""Schemas for the Kanban board and drag-move sessions."""
from __future__ import annotations

import enum

from pydantic import BaseModel, Field

from .leads import EnrichedLead
from .statuses import StatusRead


class ToastKind(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"


class Toast(BaseModel):
    kind: ToastKind
    title: str
    description: str = ""


class BoardColumn(BaseModel):
    status: StatusRead
    leads: list[EnrichedLead] = Field(default_factory=list)


class BoardResponse(BaseModel):
    columns: list[BoardColumn]


class BoardSessionResponse(BaseModel):
    session_id: str
    state: str
    active_lead_id: str | None = None
    pending_lead_ids: list[str] = Field(default_factory=list)
    columns: list[BoardColumn]
    toasts: list[Toast] = Field(default_factory=list)


class DragStartRequest(BaseModel):
    lead_id: str


class DropRequest(BaseModel):
    over: str | None = Field(default=None, description="Status id of the column under the pointer")


class DropResponse(BaseModel):
    outcome: str
    lead_id: str
    from_status_id: str | None = None
    to_status_id: str | None = None
    board: BoardSessionResponse
