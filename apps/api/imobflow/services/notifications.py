"""Back-office notifications."""
from __future__ import annotations

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..repositories import notifications as notifications_repo
from ..schemas import notifications as schemas


async def list_notifications(session: AsyncSession) -> schemas.NotificationListResponse:
    rows = await notifications_repo.list_notifications(session)
    unread = await notifications_repo.count_unread(session)
    return schemas.NotificationListResponse(
        items=[schemas.NotificationRead.model_validate(row) for row in rows],
        unread_count=unread,
    )


async def mark_read(notification_id: str, session: AsyncSession) -> schemas.NotificationRead:
    async with session.begin():
        row = await notifications_repo.get_by_id(session, notification_id)
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
        row.is_read = True
        session.add(row)

    return schemas.NotificationRead.model_validate(row)


async def mark_all_read(session: AsyncSession) -> int:
    async with session.begin():
        return await notifications_repo.mark_all_read(session)
