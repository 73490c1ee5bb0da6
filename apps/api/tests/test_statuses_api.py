from __future__ import annotations

import pytest


@pytest.mark.asyncio
async def test_list_statuses_in_column_order(client, seeded) -> None:
    response = await client.get("/api/statuses")

    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == seeded


@pytest.mark.asyncio
async def test_create_status_defaults_color(client, seeded) -> None:
    response = await client.post("/api/statuses", json={"name": "  Visita Agendada ", "order_num": 4})

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Visita Agendada"
    assert body["color"] == "#888888"

    listing = await client.get("/api/statuses")
    assert listing.json()[-1]["id"] == body["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"name": "A", "order_num": 1},
        {"name": "   ", "order_num": 9},
        {"name": " A ", "order_num": 9},
        {"name": "Perdido", "order_num": 0},
        {"name": "Perdido", "order_num": 5, "color": "red"},
    ],
)
async def test_create_status_validation(client, payload) -> None:
    response = await client.post("/api/statuses", json=payload)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_status_reorders_columns(client, seeded) -> None:
    response = await client.patch("/api/statuses/s1", json={"order_num": 5, "color": "#000000"})
    assert response.status_code == 200
    assert response.json()["color"] == "#000000"

    listing = await client.get("/api/statuses")
    assert [item["id"] for item in listing.json()] == ["s2", "s3", "s1"]


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["   ", " x "])
async def test_update_status_rejects_blank_name(client, seeded, name) -> None:
    response = await client.patch("/api/statuses/s2", json={"name": name})

    assert response.status_code == 422
    listing = await client.get("/api/statuses")
    assert listing.json()[1]["name"] == "Em Atendimento"


@pytest.mark.asyncio
async def test_update_unknown_status_returns_404(client, seeded) -> None:
    response = await client.patch("/api/statuses/missing", json={"name": "Nada"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_unused_status(client, seeded) -> None:
    response = await client.delete("/api/statuses/s3")
    assert response.status_code == 204

    listing = await client.get("/api/statuses")
    assert [item["id"] for item in listing.json()] == ["s1", "s2"]


@pytest.mark.asyncio
async def test_delete_status_in_use_is_refused(client, seeded) -> None:
    created = await client.post("/api/leads", json={"name": "Ana"})
    assert created.json()["status_id"] == "s1"

    response = await client.delete("/api/statuses/s1")

    assert response.status_code == 409
    assert "1 lead" in response.json()["detail"]


@pytest.mark.asyncio
async def test_delete_unknown_status_returns_404(client, seeded) -> None:
    response = await client.delete("/api/statuses/missing")

    assert response.status_code == 404
