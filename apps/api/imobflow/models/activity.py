"""Lead activity (audit trail) model."""
from __future__ import annotations

from datetime import datetime
import enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, new_id, utcnow

if TYPE_CHECKING:
    from .lead import Lead


class ActivityType(str, enum.Enum):
    STATUS_CHANGE = "status_change"
    NOTE_ADDED = "note_added"
    PROPERTY_LINKED = "property_linked"
    PROPERTY_UNLINKED = "property_unlinked"
    LEAD_CREATED = "lead_created"


class LeadActivity(Base):
    """Append-only entry in a lead's history."""

    __tablename__ = "lead_activities"
    __table_args__ = (Index("ix_lead_activities_lead_created", "lead_id", "created_at"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    lead_id: Mapped[str] = mapped_column(ForeignKey("leads.id", ondelete="CASCADE"), nullable=False)
    type: Mapped[ActivityType] = mapped_column(Enum(ActivityType, name="activity_type"), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    user_name: Mapped[str | None] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    lead: Mapped["Lead"] = relationship("Lead", back_populates="activities")
