"""Lead store: the system of record for leads and their status."""
from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.activity import ActivityType
from ..repositories import activities as activities_repo
from ..repositories import leads as leads_repo
from ..repositories import notifications as notifications_repo
from ..repositories import statuses as statuses_repo
from ..schemas import leads as schemas
from ..schemas.statuses import StatusRead
from . import pipeline
from .events import LeadChange, LeadChangeKind, broker as change_broker

logger = logging.getLogger(__name__)


async def list_leads(session: AsyncSession) -> list[schemas.LeadRead]:
    """Return raw leads in creation order."""

    rows = await leads_repo.list_leads(session)
    return [schemas.LeadRead.model_validate(row) for row in rows]


async def list_enriched_leads(
    session: AsyncSession,
    filters: pipeline.LeadFilters | None = None,
) -> list[schemas.EnrichedLead]:
    """Return leads joined to their statuses, filtered for the contacts table."""

    statuses = [StatusRead.model_validate(row) for row in await statuses_repo.list_statuses(session)]
    leads = await list_leads(session)
    return pipeline.filter_leads(pipeline.enrich(leads, statuses), filters)


async def get_enriched_lead(lead_id: str, session: AsyncSession) -> schemas.EnrichedLead:
    lead = await leads_repo.get_by_id(session, lead_id)
    if lead is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")

    statuses = [StatusRead.model_validate(row) for row in await statuses_repo.list_statuses(session)]
    return pipeline.enrich([schemas.LeadRead.model_validate(lead)], statuses)[0]


async def create_lead(payload: schemas.LeadCreate, session: AsyncSession) -> schemas.LeadRead:
    """Create a lead, landing it in the first column unless a valid status is given."""

    async with session.begin():
        target = None
        if payload.status_id:
            target = await statuses_repo.get_by_id(session, payload.status_id)
        if target is None:
            target = await statuses_repo.get_default(session)
        if target is None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No lead statuses configured")

        lead = await leads_repo.create_lead(
            session,
            name=payload.name,
            email=payload.email,
            phone=payload.phone,
            message=payload.message,
            source=payload.source,
            status_id=target.id,
        )
        await activities_repo.add_activity(
            session,
            lead_id=lead.id,
            type=ActivityType.LEAD_CREATED,
            description=f'Lead criado em "{target.name}".',
        )
        await notifications_repo.create_notification(
            session,
            title="Novo Lead Criado",
            description=f'Um novo lead "{lead.name}" foi adicionado.',
            related_type="lead",
            related_id=lead.id,
        )

    created = schemas.LeadRead.model_validate(lead)
    logger.info("Lead %s created in status %s", created.id, created.status_id)
    await change_broker.publish(LeadChange(kind=LeadChangeKind.CREATED, lead_id=created.id, lead=created))
    return created


async def update_lead(
    lead_id: str,
    payload: schemas.LeadUpdate,
    session: AsyncSession,
    *,
    user_name: str | None = None,
) -> schemas.LeadRead:
    """Apply a partial update; status changes are recorded in the lead's history."""

    changes = payload.model_dump(exclude_unset=True)

    async with session.begin():
        lead = await leads_repo.get_by_id(session, lead_id)
        if lead is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")

        previous_status_id = lead.status_id
        new_status = None
        if "status_id" in changes and changes["status_id"] != previous_status_id:
            new_status = await statuses_repo.get_by_id(session, changes["status_id"])
            if new_status is None:
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Status not found")

        status_changed = leads_repo.apply_changes(lead, changes)
        session.add(lead)

        if status_changed and new_status is not None:
            previous = await statuses_repo.get_by_id(session, previous_status_id)
            previous_name = previous.name if previous is not None else previous_status_id
            await activities_repo.add_activity(
                session,
                lead_id=lead.id,
                type=ActivityType.STATUS_CHANGE,
                description=f'Status alterado de "{previous_name}" para "{new_status.name}".',
                user_name=user_name,
            )

    updated = schemas.LeadRead.model_validate(lead)
    await change_broker.publish(LeadChange(kind=LeadChangeKind.UPDATED, lead_id=updated.id, lead=updated))
    return updated


async def delete_lead(lead_id: str, session: AsyncSession) -> None:
    async with session.begin():
        lead = await leads_repo.get_by_id(session, lead_id)
        if lead is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")
        await leads_repo.delete_lead(session, lead)

    logger.info("Lead %s deleted", lead_id)
    await change_broker.publish(LeadChange(kind=LeadChangeKind.DELETED, lead_id=lead_id))
