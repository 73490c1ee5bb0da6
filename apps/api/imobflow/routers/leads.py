"""Lead store and lead detail panel endpoints."""
from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..schemas import leads as schemas
from ..services import activities as activities_service
from ..services import leads as leads_service
from ..services.pipeline import LeadFilters

router = APIRouter()


@router.get("", response_model=list[schemas.LeadRead])
async def list_leads(session: AsyncSession = Depends(get_session)) -> list[schemas.LeadRead]:
    """Return raw leads in creation order."""

    return await leads_service.list_leads(session)


@router.get("/enriched", response_model=list[schemas.EnrichedLead])
async def list_enriched_leads(
    q: str | None = None,
    status_id: str | None = None,
    from_: datetime | None = Query(default=None, alias="from"),
    to: datetime | None = None,
    session: AsyncSession = Depends(get_session),
) -> list[schemas.EnrichedLead]:
    """Contacts table: leads with their status, filtered by text, stage and period."""

    filters = LeadFilters(q=q, date_from=from_, date_to=to, status_id=status_id)
    return await leads_service.list_enriched_leads(session, filters)


@router.post("", response_model=schemas.LeadRead, status_code=status.HTTP_201_CREATED)
async def create_lead(
    payload: schemas.LeadCreate,
    session: AsyncSession = Depends(get_session),
) -> schemas.LeadRead:
    """Capture a lead from the public site or the CRM."""

    return await leads_service.create_lead(payload, session)


@router.get("/{lead_id}", response_model=schemas.EnrichedLead)
async def get_lead(lead_id: str, session: AsyncSession = Depends(get_session)) -> schemas.EnrichedLead:
    return await leads_service.get_enriched_lead(lead_id, session)


@router.patch("/{lead_id}", response_model=schemas.LeadRead)
async def update_lead(
    lead_id: str,
    payload: schemas.LeadUpdate,
    session: AsyncSession = Depends(get_session),
) -> schemas.LeadRead:
    return await leads_service.update_lead(lead_id, payload, session)


@router.delete("/{lead_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lead(lead_id: str, session: AsyncSession = Depends(get_session)) -> Response:
    await leads_service.delete_lead(lead_id, session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{lead_id}/activities", response_model=list[schemas.ActivityRead])
async def list_activities(
    lead_id: str,
    session: AsyncSession = Depends(get_session),
) -> list[schemas.ActivityRead]:
    """Return the lead's history, newest first."""

    return await activities_service.list_activities(lead_id, session)


@router.post(
    "/{lead_id}/activities",
    response_model=schemas.ActivityRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_activity(
    lead_id: str,
    payload: schemas.ActivityCreate,
    session: AsyncSession = Depends(get_session),
) -> schemas.ActivityRead:
    """Append a note to the lead's history."""

    return await activities_service.add_note(lead_id, payload, session)
