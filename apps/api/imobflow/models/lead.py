"""Lead model."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

if TYPE_CHECKING:
    from .activity import LeadActivity
    from .lead_status import LeadStatus

from .base import Base, new_id, utcnow


class Lead(Base):
    """Prospective customer captured from the public site or the CRM."""

    __tablename__ = "leads"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String, nullable=False)
    phone: Mapped[str | None] = mapped_column(String)
    email: Mapped[str | None] = mapped_column(String)
    message: Mapped[str | None] = mapped_column(Text)
    source: Mapped[str | None] = mapped_column(String)
    status_id: Mapped[str] = mapped_column(ForeignKey("lead_statuses.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    status_updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    status: Mapped["LeadStatus"] = relationship("LeadStatus", back_populates="leads")
    activities: Mapped[list["LeadActivity"]] = relationship(
        "LeadActivity", back_populates="lead", cascade="all, delete-orphan", passive_deletes=True
    )
