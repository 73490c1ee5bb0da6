"""Pure lead pipeline helpers: enrichment, filtering and board grouping.

Nothing here performs I/O. The board view, the HTTP routers and the contacts
listing all derive their output from these functions so every surface agrees
on which column a lead belongs to.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Sequence

from ..schemas.leads import EnrichedLead, LeadRead
from ..schemas.statuses import StatusRead

logger = logging.getLogger(__name__)

UNKNOWN_STATUS = StatusRead(id="unknown", name="Desconhecido", color="#808080", order_num=999)


@dataclass(slots=True)
class LeadFilters:
    """Client-side board filters applied before grouping."""

    q: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    status_id: str | None = None


def sort_statuses(statuses: Iterable[StatusRead]) -> list[StatusRead]:
    """Return statuses by ascending rank; equal ranks keep their fetch order."""

    return sorted(statuses, key=lambda status: status.order_num)


def default_status(statuses: Sequence[StatusRead]) -> StatusRead | None:
    """Return the lowest-ranked status, the landing column for new and orphaned leads."""

    ordered = sort_statuses(statuses)
    return ordered[0] if ordered else None


def resolve_status(status_id: str | None, statuses: Sequence[StatusRead]) -> StatusRead:
    """Resolve a status id to its status, falling back to the first column."""

    for status in statuses:
        if status.id == status_id:
            return status

    fallback = default_status(statuses)
    if fallback is None:
        return UNKNOWN_STATUS
    logger.warning("Lead references unknown status %r; showing it under %r", status_id, fallback.name)
    return fallback


def enrich(leads: Iterable[LeadRead], statuses: Sequence[StatusRead]) -> list[EnrichedLead]:
    """Join each lead to its full status object, preserving input order."""

    enriched: list[EnrichedLead] = []
    for lead in leads:
        status = resolve_status(lead.status_id, statuses)
        enriched.append(EnrichedLead(**lead.model_dump(exclude={"status"}), status=status))
    return enriched


def filter_leads(leads: Iterable[EnrichedLead], filters: LeadFilters | None) -> list[EnrichedLead]:
    """Drop leads that do not match the search text, date range or status."""

    result = list(leads)
    if filters is None:
        return result

    term = (filters.q or "").strip()
    if term:
        lowered = term.lower()
        result = [
            lead
            for lead in result
            if lowered in (lead.name or "").lower()
            or lowered in (lead.email or "").lower()
            or term in (lead.phone or "")
        ]

    if filters.date_from is not None:
        lower_bound = _ensure_tz(filters.date_from)
        result = [lead for lead in result if _ensure_tz(lead.created_at) >= lower_bound]
    if filters.date_to is not None:
        upper_bound = _ensure_tz(filters.date_to)
        result = [lead for lead in result if _ensure_tz(lead.created_at) <= upper_bound]

    if filters.status_id:
        result = [lead for lead in result if lead.status.id == filters.status_id]

    return result


def group(leads: Iterable[EnrichedLead], statuses: Sequence[StatusRead]) -> dict[str, list[EnrichedLead]]:
    """Partition leads into one bucket per status, in column order.

    Every status gets a bucket even when empty. Within a bucket the most
    recently updated lead comes first; leads updated at the same instant keep
    their input order.
    """

    buckets: dict[str, list[EnrichedLead]] = {status.id: [] for status in sort_statuses(statuses)}
    for lead in leads:
        bucket = buckets.get(lead.status.id)
        if bucket is not None:
            bucket.append(lead)

    for status_id, bucket in buckets.items():
        buckets[status_id] = sorted(bucket, key=lambda lead: _ensure_tz(lead.updated_at), reverse=True)
    return buckets


def build_board(
    leads: Iterable[LeadRead],
    statuses: Sequence[StatusRead],
    filters: LeadFilters | None = None,
) -> dict[str, list[EnrichedLead]]:
    """Enrich, filter, then group."""

    return group(filter_leads(enrich(leads, statuses), filters), statuses)


def _ensure_tz(value: datetime) -> datetime:
    """Ensure the provided datetime is timezone-aware in UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
