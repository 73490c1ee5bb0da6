"""In-memory registry of open Kanban boards."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.config import settings
from ..schemas.board import Toast, ToastKind
from ..schemas.leads import LeadRead, LeadUpdate
from ..schemas.statuses import StatusRead
from . import leads as leads_service
from . import statuses as statuses_service
from .board import BoardView, DragMoveController, UpdateLead
from .events import LeadChange, LeadChangeBroker, broker as default_broker

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[tuple[list[StatusRead], list[LeadRead]]]]


def make_loader(session_factory: async_sessionmaker[AsyncSession]) -> Loader:
    """Fetch statuses and leads independently, each in its own session."""

    async def load() -> tuple[list[StatusRead], list[LeadRead]]:
        async with session_factory() as session:
            statuses = await statuses_service.list_statuses(session)
        async with session_factory() as session:
            leads = await leads_service.list_leads(session)
        return statuses, leads

    return load


def make_updater(session_factory: async_sessionmaker[AsyncSession]) -> UpdateLead:
    """Bind the lead store's update operation to a fresh session per call."""

    async def update(lead_id: str, changes: dict[str, object]) -> LeadRead:
        async with session_factory() as session:
            return await leads_service.update_lead(lead_id, LeadUpdate(**changes), session)

    return update


class BoardSession:
    """One open board: its view, its drag controller and its pending toasts."""

    def __init__(
        self,
        session_id: str,
        view: BoardView,
        *,
        load: Loader,
        update_lead: UpdateLead,
        timeout: float | None = None,
    ) -> None:
        self.session_id = session_id
        self.view = view
        self._load = load
        self._toasts: list[Toast] = []
        self.controller = DragMoveController(view, update_lead, self.notify, timeout=timeout)

    def notify(self, kind: ToastKind, title: str, description: str = "") -> None:
        self._toasts.append(Toast(kind=kind, title=title, description=description))

    def drain_toasts(self) -> list[Toast]:
        toasts, self._toasts = self._toasts, []
        return toasts

    async def refresh(self) -> None:
        statuses, leads = await self._load()
        self.view.replace_statuses(statuses)
        self.view.apply_refresh(leads)

    async def on_change(self, change: LeadChange) -> None:
        self.view.apply_change(change)


@dataclass
class _BoardEntry:
    board: BoardSession
    last_seen: float


class BoardSessionStore:
    """Very small in-memory board registry with TTL eviction."""

    def __init__(
        self,
        ttl_seconds: int = 900,
        *,
        update_timeout: float | None = None,
        change_broker: LeadChangeBroker | None = None,
    ) -> None:
        self._ttl = ttl_seconds
        self._update_timeout = update_timeout
        self._broker = change_broker or default_broker
        self._boards: Dict[str, _BoardEntry] = {}

    async def open(self, session_factory: async_sessionmaker[AsyncSession]) -> BoardSession:
        """Load a fresh board and subscribe it to the change feed."""

        await self._evict_expired()
        load = make_loader(session_factory)
        statuses, leads = await load()
        board = BoardSession(
            str(uuid4()),
            BoardView(statuses, leads),
            load=load,
            update_lead=make_updater(session_factory),
            timeout=self._update_timeout,
        )
        self._boards[board.session_id] = _BoardEntry(board=board, last_seen=time.time())
        await self._broker.subscribe(board.session_id, board.on_change)
        logger.info("Opened board session %s with %d leads", board.session_id, len(leads))
        return board

    async def get(self, session_id: str) -> Optional[BoardSession]:
        await self._evict_expired()
        entry = self._boards.get(session_id)
        if not entry:
            return None
        entry.last_seen = time.time()
        return entry.board

    async def close(self, session_id: str) -> bool:
        entry = self._boards.pop(session_id, None)
        await self._broker.unsubscribe(session_id)
        return entry is not None

    def __len__(self) -> int:
        return len(self._boards)

    async def _evict_expired(self) -> None:
        now = time.time()
        expired = [key for key, entry in self._boards.items() if now - entry.last_seen > self._ttl]
        for key in expired:
            logger.info("Evicting idle board session %s", key)
            await self.close(key)


board_sessions = BoardSessionStore(
    settings.board_session_ttl_seconds,
    update_timeout=settings.lead_update_timeout_seconds,
)
