from __future__ import annotations

import pytest

from imobflow.schemas.leads import LeadCreate
from imobflow.services import board_sessions as board_sessions_module
from imobflow.services.board import DropOutcome
from imobflow.services.board_sessions import BoardSessionStore
from imobflow.services.events import LeadChangeBroker
from imobflow.services.leads import create_lead


@pytest.mark.asyncio
async def test_open_subscribes_and_close_unsubscribes(session_factory, seeded) -> None:
    broker = LeadChangeBroker()
    store = BoardSessionStore(60, change_broker=broker)

    board = await store.open(session_factory)

    assert len(store) == 1
    assert [status.id for status in board.view.statuses] == seeded
    assert broker.subscriber_ids() == [board.session_id]
    assert await store.get(board.session_id) is board

    assert await store.close(board.session_id) is True
    assert await store.close(board.session_id) is False
    assert broker.subscriber_ids() == []


@pytest.mark.asyncio
async def test_idle_boards_are_evicted(session_factory, seeded) -> None:
    broker = LeadChangeBroker()
    store = BoardSessionStore(60, change_broker=broker)
    board = await store.open(session_factory)

    store._boards[board.session_id].last_seen -= 120

    assert await store.get(board.session_id) is None
    assert len(store) == 0
    assert broker.subscriber_ids() == []


@pytest.mark.asyncio
async def test_store_failure_reverts_board(session_factory, seeded, monkeypatch) -> None:
    async with session_factory() as session:
        lead = await create_lead(LeadCreate(name="Ana"), session)

    async def failing_update(lead_id, payload, session, **kwargs):
        raise ConnectionError("database unavailable")

    monkeypatch.setattr(board_sessions_module.leads_service, "update_lead", failing_update)

    store = BoardSessionStore(60, change_broker=LeadChangeBroker())
    board = await store.open(session_factory)
    board.controller.start(lead.id)
    result = await board.controller.drop("s2")

    assert result.outcome is DropOutcome.REVERTED
    assert board.view.column_of(lead.id) == "s1"
    toasts = board.drain_toasts()
    assert [toast.kind.value for toast in toasts] == ["error"]
    assert board.drain_toasts() == []
    await store.close(board.session_id)
