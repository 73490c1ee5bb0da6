"""Notification persistence helpers."""
from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.notification import Notification


async def create_notification(
    session: AsyncSession,
    *,
    title: str,
    description: str | None = None,
    related_type: str | None = None,
    related_id: str | None = None,
) -> Notification:
    notification = Notification(
        title=title,
        description=description,
        related_type=related_type,
        related_id=related_id,
        created_at=utcnow(),
    )
    session.add(notification)
    await session.flush()
    return notification


async def list_notifications(session: AsyncSession, *, limit: int = 50) -> list[Notification]:
    """Return the newest notifications first."""

    stmt = select(Notification).order_by(Notification.created_at.desc()).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def count_unread(session: AsyncSession) -> int:
    stmt = select(func.count(Notification.id)).where(Notification.is_read.is_(False))
    result = await session.execute(stmt)
    return result.scalar_one()


async def get_by_id(session: AsyncSession, notification_id: str) -> Notification | None:
    return await session.get(Notification, notification_id)


async def mark_all_read(session: AsyncSession) -> int:
    """Flag every unread notification as read and return how many changed."""

    stmt = update(Notification).where(Notification.is_read.is_(False)).values(is_read=True)
    result = await session.execute(stmt)
    return result.rowcount or 0
