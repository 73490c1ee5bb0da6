"""Notification bell endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..schemas import notifications as schemas
from ..services import notifications as notifications_service

router = APIRouter()


@router.get("", response_model=schemas.NotificationListResponse)
async def list_notifications(session: AsyncSession = Depends(get_session)) -> schemas.NotificationListResponse:
    return await notifications_service.list_notifications(session)


@router.post("/read-all")
async def mark_all_read(session: AsyncSession = Depends(get_session)) -> dict[str, int]:
    updated = await notifications_service.mark_all_read(session)
    return {"updated": updated}


@router.post("/{notification_id}/read", response_model=schemas.NotificationRead)
async def mark_read(
    notification_id: str,
    session: AsyncSession = Depends(get_session),
) -> schemas.NotificationRead:
    return await notifications_service.mark_read(notification_id, session)
