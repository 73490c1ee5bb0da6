"""Tests for lead enrichment, filtering and board grouping."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from imobflow.schemas.leads import LeadRead
from imobflow.schemas.statuses import StatusRead
from imobflow.services import pipeline

BASE_TS = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

NEW = StatusRead(id="s1", name="New", color="#3b82f6", order_num=1)
CONTACTED = StatusRead(id="s2", name="Contacted", color="#f97316", order_num=2)
WON = StatusRead(id="s3", name="Won", color="#22c55e", order_num=3)


def make_lead(lead_id: str, status_id: str, **overrides) -> LeadRead:
    fields = {
        "id": lead_id,
        "name": f"Lead {lead_id}",
        "email": None,
        "phone": None,
        "status_id": status_id,
        "created_at": BASE_TS,
        "updated_at": BASE_TS,
    }
    fields.update(overrides)
    return LeadRead(**fields)


def test_enrich_resolves_matching_status() -> None:
    leads = [make_lead("l1", "s2"), make_lead("l2", "s1")]

    enriched = pipeline.enrich(leads, [NEW, CONTACTED])

    assert [lead.id for lead in enriched] == ["l1", "l2"]
    assert enriched[0].status == CONTACTED
    assert enriched[1].status == NEW


def test_enrich_falls_back_to_first_status_for_dangling_reference() -> None:
    # statuses deliberately out of order: fallback is by rank, not position
    enriched = pipeline.enrich([make_lead("l2", "s9")], [CONTACTED, NEW])

    assert enriched[0].status.id == "s1"
    assert enriched[0].status_id == "s9"


def test_enrich_without_statuses_uses_placeholder() -> None:
    enriched = pipeline.enrich([make_lead("l1", "s1")], [])

    assert len(enriched) == 1
    assert enriched[0].status.id == "unknown"
    assert enriched[0].status.name == "Desconhecido"


def test_enrich_empty_leads() -> None:
    assert pipeline.enrich([], [NEW]) == []


def test_group_places_lead_and_keeps_empty_columns() -> None:
    grouped = pipeline.build_board([make_lead("l1", "s1")], [NEW, CONTACTED])

    assert {key: [lead.id for lead in leads] for key, leads in grouped.items()} == {"s1": ["l1"], "s2": []}


def test_group_orders_columns_by_rank() -> None:
    grouped = pipeline.group([], [WON, NEW, CONTACTED])

    assert list(grouped) == ["s1", "s2", "s3"]


def test_group_equal_ranks_keep_fetch_order() -> None:
    first = StatusRead(id="a", name="A", color="#000000", order_num=1)
    second = StatusRead(id="b", name="B", color="#000000", order_num=1)

    assert list(pipeline.group([], [first, second])) == ["a", "b"]
    assert list(pipeline.group([], [second, first])) == ["b", "a"]


def test_group_neither_drops_nor_duplicates() -> None:
    statuses = [NEW, CONTACTED, WON]
    leads = [make_lead(f"l{i}", statuses[i % 3].id) for i in range(10)] + [make_lead("orphan", "gone")]

    grouped = pipeline.build_board(leads, statuses)
    placed = [lead.id for bucket in grouped.values() for lead in bucket]

    assert sorted(placed) == sorted(lead.id for lead in leads)
    assert [lead.id for lead in grouped["s1"]].count("orphan") == 1


def test_group_sorts_most_recently_updated_first() -> None:
    leads = [
        make_lead("old", "s1", updated_at=BASE_TS),
        make_lead("newest", "s1", updated_at=BASE_TS + timedelta(hours=2)),
        make_lead("tie-a", "s1", updated_at=BASE_TS + timedelta(hours=1)),
        make_lead("tie-b", "s1", updated_at=BASE_TS + timedelta(hours=1)),
    ]

    grouped = pipeline.build_board(leads, [NEW])

    assert [lead.id for lead in grouped["s1"]] == ["newest", "tie-a", "tie-b", "old"]


def test_filter_by_search_text_matches_name_email_and_phone() -> None:
    leads = pipeline.enrich(
        [
            make_lead("l1", "s1", name="Maria Oliveira"),
            make_lead("l2", "s1", email="JOAO@exemplo.com"),
            make_lead("l3", "s1", phone="(11) 99999-0003"),
            make_lead("l4", "s1", name="Pedro"),
        ],
        [NEW],
    )

    def ids(q: str) -> list[str]:
        return [lead.id for lead in pipeline.filter_leads(leads, pipeline.LeadFilters(q=q))]

    assert ids("maria") == ["l1"]
    assert ids("joao@") == ["l2"]
    assert ids("99999-0003") == ["l3"]
    assert ids("   ") == ["l1", "l2", "l3", "l4"]


def test_filtered_leads_disappear_from_their_column() -> None:
    leads = [make_lead("keep", "s1", name="Ana"), make_lead("drop", "s1", name="Carlos")]

    grouped = pipeline.build_board(leads, [NEW, CONTACTED], pipeline.LeadFilters(q="ana"))

    assert [lead.id for lead in grouped["s1"]] == ["keep"]
    assert grouped["s2"] == []


def test_filter_by_date_range_is_inclusive_and_accepts_naive_bounds() -> None:
    leads = pipeline.enrich(
        [
            make_lead("before", "s1", created_at=BASE_TS - timedelta(days=2)),
            make_lead("start", "s1", created_at=BASE_TS),
            make_lead("inside", "s1", created_at=BASE_TS + timedelta(days=1)),
            make_lead("after", "s1", created_at=BASE_TS + timedelta(days=5)),
        ],
        [NEW],
    )
    filters = pipeline.LeadFilters(
        date_from=BASE_TS.replace(tzinfo=None),
        date_to=BASE_TS + timedelta(days=1),
    )

    assert [lead.id for lead in pipeline.filter_leads(leads, filters)] == ["start", "inside"]


def test_filter_by_status() -> None:
    leads = pipeline.enrich([make_lead("l1", "s1"), make_lead("l2", "s2")], [NEW, CONTACTED])

    result = pipeline.filter_leads(leads, pipeline.LeadFilters(status_id="s2"))

    assert [lead.id for lead in result] == ["l2"]


def test_default_status_is_lowest_rank() -> None:
    assert pipeline.default_status([WON, CONTACTED, NEW]) == NEW
    assert pipeline.default_status([]) is None
