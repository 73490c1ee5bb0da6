"""Lead status repository helpers."""
from __future__ import annotations

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.lead import Lead
from ..models.lead_status import LeadStatus


async def list_statuses(session: AsyncSession) -> list[LeadStatus]:
    """Return statuses in column order; equal ranks keep insertion order."""

    stmt: Select[tuple[LeadStatus]] = select(LeadStatus).order_by(
        LeadStatus.order_num.asc(), LeadStatus.created_at.asc()
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_by_id(session: AsyncSession, status_id: str) -> LeadStatus | None:
    """Return a status by identifier."""

    return await session.get(LeadStatus, status_id)


async def get_default(session: AsyncSession) -> LeadStatus | None:
    """Return the lowest-ranked status."""

    stmt = select(LeadStatus).order_by(LeadStatus.order_num.asc(), LeadStatus.created_at.asc()).limit(1)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def count_leads(session: AsyncSession, status_id: str) -> int:
    """Return how many leads currently sit in the status."""

    stmt: Select[tuple[int]] = select(func.count(Lead.id)).where(Lead.status_id == status_id)
    result = await session.execute(stmt)
    return result.scalar_one()
