"""Business logic for the lead status registry."""
from __future__ import annotations

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.lead_status import LeadStatus
from ..repositories import statuses as statuses_repo
from ..schemas import statuses as schemas


async def list_statuses(session: AsyncSession) -> list[schemas.StatusRead]:
    """Return the funnel stages in column order."""

    rows = await statuses_repo.list_statuses(session)
    return [schemas.StatusRead.model_validate(row) for row in rows]


async def create_status(payload: schemas.StatusCreate, session: AsyncSession) -> schemas.StatusRead:
    async with session.begin():
        now = utcnow()
        row = LeadStatus(
            name=payload.name,
            color=payload.color,
            order_num=payload.order_num,
            created_at=now,
            updated_at=now,
        )
        session.add(row)
        await session.flush()

    return schemas.StatusRead.model_validate(row)


async def update_status(
    status_id: str,
    payload: schemas.StatusUpdate,
    session: AsyncSession,
) -> schemas.StatusRead:
    async with session.begin():
        row = await statuses_repo.get_by_id(session, status_id)
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Status not found")

        for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(row, field, value)
        row.updated_at = utcnow()
        session.add(row)

    return schemas.StatusRead.model_validate(row)


async def delete_status(status_id: str, session: AsyncSession) -> None:
    """Delete a status that no lead references anymore."""

    async with session.begin():
        row = await statuses_repo.get_by_id(session, status_id)
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Status not found")

        assigned = await statuses_repo.count_leads(session, status_id)
        if assigned:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Status still has {assigned} lead(s) assigned; move them first",
            )
        await session.delete(row)
