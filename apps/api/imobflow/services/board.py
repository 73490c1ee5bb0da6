"""Kanban board view state and the drag-move state machine.

``BoardView`` is the optimistic copy of the lead store held by one board
(one browser tab). ``DragMoveController`` turns a drag gesture into at most
one store update:

    idle --start--> dragging --drop--> committing --settle--> idle
    dragging --noop or cancel--> idle

The view is mutated before the update is awaited so the card moves at once.
Whatever the store answers, the controller settles back to ``idle``; on
failure the lead's previous status is restored.
"""
from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Sequence

from ..schemas.board import ToastKind
from ..schemas.leads import EnrichedLead, LeadRead
from ..schemas.statuses import StatusRead
from . import pipeline
from .events import LeadChange, LeadChangeKind

logger = logging.getLogger(__name__)

UpdateLead = Callable[[str, dict[str, object]], Awaitable[LeadRead]]
Notify = Callable[[ToastKind, str, str], None]

SUCCESS_TITLE = "Status Atualizado!"
ERROR_TITLE = "Erro ao Atualizar"
ERROR_DESCRIPTION = "Não foi possível alterar o status do lead. Tente novamente."


class DragState(str, enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTING = "committing"


class DragEvent(str, enum.Enum):
    START = "start"
    CANCEL = "cancel"
    DROP = "drop"
    NOOP = "noop"
    SETTLE = "settle"


TRANSITIONS: dict[tuple[DragState, DragEvent], DragState] = {
    (DragState.IDLE, DragEvent.START): DragState.DRAGGING,
    (DragState.DRAGGING, DragEvent.CANCEL): DragState.IDLE,
    (DragState.DRAGGING, DragEvent.NOOP): DragState.IDLE,
    (DragState.DRAGGING, DragEvent.DROP): DragState.COMMITTING,
    (DragState.COMMITTING, DragEvent.SETTLE): DragState.IDLE,
}


class BoardError(Exception):
    """Base class for board misuse errors."""


class DragInProgressError(BoardError):
    """Raised when a gesture is attempted while another one is unfinished."""


class NoActiveDragError(BoardError):
    """Raised when dropping without a drag in progress."""


class LeadNotOnBoardError(BoardError):
    """Raised when starting a drag on a lead the board does not show."""


class DropOutcome(str, enum.Enum):
    NOOP = "noop"
    COMMITTED = "committed"
    REVERTED = "reverted"


@dataclass(slots=True)
class DropResult:
    outcome: DropOutcome
    lead_id: str
    from_status_id: str | None = None
    to_status_id: str | None = None


class BoardView:
    """Statuses plus the board's working copy of the leads."""

    def __init__(self, statuses: Sequence[StatusRead], leads: Iterable[LeadRead]) -> None:
        self._statuses = pipeline.sort_statuses(statuses)
        self._leads: dict[str, LeadRead] = {lead.id: lead for lead in leads}
        self._pending: dict[str, str] = {}

    @property
    def statuses(self) -> list[StatusRead]:
        return list(self._statuses)

    @property
    def pending_lead_ids(self) -> list[str]:
        return list(self._pending)

    def has_column(self, status_id: str) -> bool:
        return any(status.id == status_id for status in self._statuses)

    def get_status(self, status_id: str) -> StatusRead | None:
        for status in self._statuses:
            if status.id == status_id:
                return status
        return None

    def get_lead(self, lead_id: str) -> LeadRead | None:
        return self._leads.get(lead_id)

    def enriched(self, lead_id: str) -> EnrichedLead | None:
        lead = self._leads.get(lead_id)
        if lead is None:
            return None
        return pipeline.enrich([lead], self._statuses)[0]

    def columns(self, filters: pipeline.LeadFilters | None = None) -> dict[str, list[EnrichedLead]]:
        return pipeline.build_board(self._leads.values(), self._statuses, filters)

    def column_of(self, lead_id: str) -> str | None:
        """Return the status id of the column currently showing the lead."""

        for status_id, leads in self.columns().items():
            if any(lead.id == lead_id for lead in leads):
                return status_id
        return None

    def move(self, lead_id: str, status_id: str) -> None:
        """Optimistically place the lead in a column and mark it pending."""

        self._pending[lead_id] = status_id
        lead = self._leads.get(lead_id)
        if lead is not None:
            self._leads[lead_id] = lead.model_copy(update={"status_id": status_id})

    def settle(self, lead_id: str, authoritative: LeadRead) -> None:
        """Replace the optimistic copy with the store's answer."""

        self._pending.pop(lead_id, None)
        if lead_id in self._leads:
            self._leads[lead_id] = authoritative

    def revert(self, lead_id: str, previous_status_id: str | None) -> None:
        """Drop the pending marker and put the lead back where it was."""

        self._pending.pop(lead_id, None)
        lead = self._leads.get(lead_id)
        if lead is not None and previous_status_id is not None:
            self._leads[lead_id] = lead.model_copy(update={"status_id": previous_status_id})

    def replace_statuses(self, statuses: Sequence[StatusRead]) -> None:
        self._statuses = pipeline.sort_statuses(statuses)

    def apply_refresh(self, leads: Iterable[LeadRead]) -> None:
        """Adopt a fresh lead list without undoing moves still in flight."""

        self._leads = {lead.id: self._keep_pending(lead) for lead in leads}

    def apply_change(self, change: LeadChange) -> None:
        """Apply one change-feed event under the same pending rule."""

        if change.kind is LeadChangeKind.DELETED:
            self._leads.pop(change.lead_id, None)
            return
        if change.lead is not None:
            self._leads[change.lead_id] = self._keep_pending(change.lead)

    def _keep_pending(self, lead: LeadRead) -> LeadRead:
        optimistic = self._pending.get(lead.id)
        if optimistic is None or optimistic == lead.status_id:
            return lead
        return lead.model_copy(update={"status_id": optimistic})


class DragMoveController:
    """Single-gesture state machine moving one lead between columns."""

    def __init__(
        self,
        view: BoardView,
        update_lead: UpdateLead,
        notify: Notify,
        *,
        timeout: float | None = None,
    ) -> None:
        self._view = view
        self._update_lead = update_lead
        self._notify = notify
        self._timeout = timeout
        self.state = DragState.IDLE
        self.active_lead_id: str | None = None
        self._snapshot: LeadRead | None = None

    def _transition(self, event: DragEvent) -> None:
        try:
            self.state = TRANSITIONS[(self.state, event)]
        except KeyError:
            if self.state is DragState.IDLE:
                raise NoActiveDragError(f"Cannot {event.value}: no drag in progress") from None
            raise DragInProgressError(
                f"Cannot {event.value} while {self.state.value} lead {self.active_lead_id}"
            ) from None

    def start(self, lead_id: str) -> EnrichedLead:
        """Begin dragging a card; returns the lead for the drag overlay."""

        if self.state is not DragState.IDLE:
            raise DragInProgressError(f"Lead {self.active_lead_id} is still {self.state.value}")

        enriched = self._view.enriched(lead_id)
        if enriched is None:
            raise LeadNotOnBoardError(f"Lead {lead_id} is not on the board")

        self._transition(DragEvent.START)
        self.active_lead_id = lead_id
        self._snapshot = self._view.get_lead(lead_id)
        return enriched

    def cancel(self) -> None:
        """Release the card outside the board; idle boards ignore this."""

        if self.state is DragState.IDLE:
            return
        self._transition(DragEvent.CANCEL)
        self._clear()

    async def drop(self, over: str | None) -> DropResult:
        """Finish the gesture over the column ``over`` (None when outside every column)."""

        if self.state is not DragState.DRAGGING:
            # rejected by the transition table
            self._transition(DragEvent.DROP)

        lead_id = self.active_lead_id
        if lead_id is None or self._snapshot is None:
            self.state = DragState.IDLE
            self._clear()
            raise NoActiveDragError("Cannot drop: no lead is being dragged")
        lead = self._view.get_lead(lead_id) or self._snapshot
        current_status_id = pipeline.resolve_status(lead.status_id, self._view.statuses).id

        if over is None or not self._view.has_column(over) or over == current_status_id:
            self._transition(DragEvent.NOOP)
            self._clear()
            return DropResult(DropOutcome.NOOP, lead_id, current_status_id, over)

        previous_status_id = lead.status_id
        target = self._view.get_status(over)
        target_name = target.name if target is not None else over

        self._transition(DragEvent.DROP)
        self._view.move(lead_id, over)
        try:
            updated = await asyncio.wait_for(
                self._update_lead(lead_id, {"status_id": over}), timeout=self._timeout
            )
        except asyncio.CancelledError:
            self._view.revert(lead_id, previous_status_id)
            raise
        except Exception as exc:  # noqa: BLE001
            logger.warning("Moving lead %s to %s failed, reverting: %r", lead_id, over, exc)
            self._view.revert(lead_id, previous_status_id)
            self._notify(ToastKind.ERROR, ERROR_TITLE, ERROR_DESCRIPTION)
            outcome = DropOutcome.REVERTED
        else:
            self._view.settle(lead_id, updated)
            self._notify(
                ToastKind.SUCCESS,
                SUCCESS_TITLE,
                f'O lead "{lead.name}" foi movido para "{target_name}".',
            )
            outcome = DropOutcome.COMMITTED
        finally:
            self._transition(DragEvent.SETTLE)
            self._clear()

        return DropResult(outcome, lead_id, current_status_id, over)

    def _clear(self) -> None:
        self.active_lead_id = None
        self._snapshot = None
