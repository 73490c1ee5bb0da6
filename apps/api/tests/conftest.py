"""Shared fixtures: an in-memory database wired into the app."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from imobflow.db.session import enable_sqlite_foreign_keys, get_session, get_session_factory
from imobflow.main import app
from imobflow.models import LeadStatus
from imobflow.models.base import Base
from imobflow.services.board_sessions import board_sessions

SEED_STATUSES = [
    ("s1", "Novo", "#3b82f6", 1),
    ("s2", "Em Atendimento", "#f97316", 2),
    ("s3", "Vendido", "#22c55e", 3),
]


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def seeded(session_factory) -> list[str]:
    """Insert three funnel stages and return their ids in column order."""

    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    async with session_factory() as session:
        async with session.begin():
            for status_id, name, color, order_num in SEED_STATUSES:
                session.add(
                    LeadStatus(
                        id=status_id,
                        name=name,
                        color=color,
                        order_num=order_num,
                        created_at=now,
                        updated_at=now,
                    )
                )
    return [status_id for status_id, *_ in SEED_STATUSES]


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client

    app.dependency_overrides.clear()
    for session_id in list(board_sessions._boards):
        await board_sessions.close(session_id)
