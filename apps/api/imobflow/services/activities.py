"""Lead detail panel: activity history."""
from __future__ import annotations

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.activity import ActivityType
from ..repositories import activities as activities_repo
from ..repositories import leads as leads_repo
from ..schemas import leads as schemas


async def list_activities(lead_id: str, session: AsyncSession) -> list[schemas.ActivityRead]:
    if await leads_repo.get_by_id(session, lead_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")

    rows = await activities_repo.list_for_lead(session, lead_id)
    return [schemas.ActivityRead.model_validate(row) for row in rows]


async def add_note(
    lead_id: str,
    payload: schemas.ActivityCreate,
    session: AsyncSession,
) -> schemas.ActivityRead:
    """Append a free-text note to the lead's history."""

    async with session.begin():
        if await leads_repo.get_by_id(session, lead_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")

        activity = await activities_repo.add_activity(
            session,
            lead_id=lead_id,
            type=ActivityType.NOTE_ADDED,
            description=payload.description,
            user_name=payload.user_name,
        )

    return schemas.ActivityRead.model_validate(activity)
