"""Lead activity persistence helpers."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.activity import ActivityType, LeadActivity
from ..models.base import utcnow


async def add_activity(
    session: AsyncSession,
    *,
    lead_id: str,
    type: ActivityType,
    description: str,
    user_name: str | None = None,
) -> LeadActivity:
    """Append an entry to the lead's history."""

    activity = LeadActivity(
        lead_id=lead_id,
        type=type,
        description=description,
        user_name=user_name,
        created_at=utcnow(),
    )
    session.add(activity)
    await session.flush()
    return activity


async def list_for_lead(session: AsyncSession, lead_id: str) -> list[LeadActivity]:
    """Return the lead's history, newest first."""

    stmt = (
        select(LeadActivity)
        .where(LeadActivity.lead_id == lead_id)
        .order_by(LeadActivity.created_at.desc(), LeadActivity.id.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())
