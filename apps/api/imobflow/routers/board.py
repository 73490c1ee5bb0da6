"""Kanban board endpoints and the lead change feed."""
from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, Response, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db.session import get_session, get_session_factory
from ..schemas import board as schemas
from ..schemas.leads import EnrichedLead
from ..schemas.statuses import StatusRead
from ..services import leads as leads_service
from ..services import statuses as statuses_service
from ..services.board import BoardError, LeadNotOnBoardError
from ..services.board_sessions import BoardSession, board_sessions
from ..services.events import LeadChange, broker as change_broker
from ..services.pipeline import LeadFilters, build_board

router = APIRouter()


def _filters(
    q: str | None = None,
    from_: datetime | None = Query(default=None, alias="from"),
    to: datetime | None = None,
) -> LeadFilters:
    return LeadFilters(q=q, date_from=from_, date_to=to)


def _columns(statuses: list[StatusRead], grouped: dict[str, list[EnrichedLead]]) -> list[schemas.BoardColumn]:
    by_id = {status_.id: status_ for status_ in statuses}
    return [schemas.BoardColumn(status=by_id[status_id], leads=leads) for status_id, leads in grouped.items()]


def _session_response(board: BoardSession, filters: LeadFilters | None = None) -> schemas.BoardSessionResponse:
    controller = board.controller
    return schemas.BoardSessionResponse(
        session_id=board.session_id,
        state=controller.state.value,
        active_lead_id=controller.active_lead_id,
        pending_lead_ids=board.view.pending_lead_ids,
        columns=_columns(board.view.statuses, board.view.columns(filters)),
        toasts=board.drain_toasts(),
    )


async def _require_board(session_id: str) -> BoardSession:
    board = await board_sessions.get(session_id)
    if board is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board session not found")
    return board


def _board_error(exc: BoardError) -> HTTPException:
    if isinstance(exc, LeadNotOnBoardError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get("", response_model=schemas.BoardResponse)
async def get_board(
    filters: LeadFilters = Depends(_filters),
    session: AsyncSession = Depends(get_session),
) -> schemas.BoardResponse:
    """Return the grouped board without opening a drag session."""

    statuses = await statuses_service.list_statuses(session)
    leads = await leads_service.list_leads(session)
    return schemas.BoardResponse(columns=_columns(statuses, build_board(leads, statuses, filters)))


@router.post("/sessions", response_model=schemas.BoardSessionResponse, status_code=status.HTTP_201_CREATED)
async def open_board_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> schemas.BoardSessionResponse:
    """Open a board for one browser tab."""

    board = await board_sessions.open(session_factory)
    return _session_response(board)


@router.get("/sessions/{session_id}", response_model=schemas.BoardSessionResponse)
async def get_board_session(
    session_id: str,
    filters: LeadFilters = Depends(_filters),
) -> schemas.BoardSessionResponse:
    board = await _require_board(session_id)
    return _session_response(board, filters)


@router.post("/sessions/{session_id}/refresh", response_model=schemas.BoardSessionResponse)
async def refresh_board_session(session_id: str) -> schemas.BoardSessionResponse:
    """Re-fetch statuses and leads, keeping moves that are still in flight."""

    board = await _require_board(session_id)
    await board.refresh()
    return _session_response(board)


@router.post("/sessions/{session_id}/drag/start", response_model=schemas.BoardSessionResponse)
async def start_drag(session_id: str, payload: schemas.DragStartRequest) -> schemas.BoardSessionResponse:
    board = await _require_board(session_id)
    try:
        board.controller.start(payload.lead_id)
    except BoardError as exc:
        raise _board_error(exc) from exc
    return _session_response(board)


@router.post("/sessions/{session_id}/drag/cancel", response_model=schemas.BoardSessionResponse)
async def cancel_drag(session_id: str) -> schemas.BoardSessionResponse:
    board = await _require_board(session_id)
    try:
        board.controller.cancel()
    except BoardError as exc:
        raise _board_error(exc) from exc
    return _session_response(board)


@router.post("/sessions/{session_id}/drag/drop", response_model=schemas.DropResponse)
async def drop(session_id: str, payload: schemas.DropRequest) -> schemas.DropResponse:
    """Drop the dragged card over a column and wait for the store to settle it."""

    board = await _require_board(session_id)
    try:
        result = await board.controller.drop(payload.over)
    except BoardError as exc:
        raise _board_error(exc) from exc

    return schemas.DropResponse(
        outcome=result.outcome.value,
        lead_id=result.lead_id,
        from_status_id=result.from_status_id,
        to_status_id=result.to_status_id,
        board=_session_response(board),
    )


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_board_session(session_id: str) -> Response:
    if not await board_sessions.close(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/changes")
async def lead_changes(websocket: WebSocket) -> None:
    """Push lead row changes to connected back-office tabs."""

    listener_id = f"ws-{uuid4()}"
    await websocket.accept()

    async def forward(change: LeadChange) -> None:
        await websocket.send_json(change.to_message())

    await change_broker.subscribe(listener_id, forward)
    await websocket.send_json({"type": "subscribed", "listener_id": listener_id})

    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await change_broker.unsubscribe(listener_id)
