"""Lead status registry endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..schemas import statuses as schemas
from ..services import statuses as statuses_service

router = APIRouter()


@router.get("", response_model=list[schemas.StatusRead])
async def list_statuses(session: AsyncSession = Depends(get_session)) -> list[schemas.StatusRead]:
    """Return funnel stages in column order."""

    return await statuses_service.list_statuses(session)


@router.post("", response_model=schemas.StatusRead, status_code=status.HTTP_201_CREATED)
async def create_status(
    payload: schemas.StatusCreate,
    session: AsyncSession = Depends(get_session),
) -> schemas.StatusRead:
    return await statuses_service.create_status(payload, session)


@router.patch("/{status_id}", response_model=schemas.StatusRead)
async def update_status(
    status_id: str,
    payload: schemas.StatusUpdate,
    session: AsyncSession = Depends(get_session),
) -> schemas.StatusRead:
    return await statuses_service.update_status(status_id, payload, session)


@router.delete("/{status_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_status(status_id: str, session: AsyncSession = Depends(get_session)) -> Response:
    """Delete a stage; refused while leads are still assigned to it."""

    await statuses_service.delete_status(status_id, session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
