"""Lead repository helpers."""
from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.lead import Lead

UPDATABLE_FIELDS = frozenset({"name", "email", "phone", "message", "source", "status_id"})


async def list_leads(session: AsyncSession) -> list[Lead]:
    """Return all leads in creation order."""

    stmt: Select[tuple[Lead]] = select(Lead).order_by(Lead.created_at.asc(), Lead.id.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_by_id(session: AsyncSession, lead_id: str) -> Lead | None:
    """Return a lead by identifier."""

    stmt: Select[tuple[Lead]] = select(Lead).where(Lead.id == lead_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_lead(
    session: AsyncSession,
    *,
    name: str,
    status_id: str,
    email: str | None = None,
    phone: str | None = None,
    message: str | None = None,
    source: str | None = None,
) -> Lead:
    """Persist a new lead."""

    now = utcnow()
    lead = Lead(
        name=name,
        email=email or None,
        phone=phone or None,
        message=message or None,
        source=source,
        status_id=status_id,
        created_at=now,
        updated_at=now,
        status_updated_at=now,
    )
    session.add(lead)
    await session.flush()
    return lead


def apply_changes(lead: Lead, changes: dict[str, object]) -> bool:
    """Copy supported fields onto the lead, refreshing timestamps.

    Returns True when the status changed.
    """

    now = utcnow()
    status_changed = False
    for field, value in changes.items():
        if field not in UPDATABLE_FIELDS:
            continue
        if field == "status_id" and value != lead.status_id:
            status_changed = True
        setattr(lead, field, value)

    lead.updated_at = now
    if status_changed:
        lead.status_updated_at = now
    return status_changed


async def delete_lead(session: AsyncSession, lead: Lead) -> None:
    await session.delete(lead)
    await session.flush()
