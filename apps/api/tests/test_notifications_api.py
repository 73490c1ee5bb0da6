from __future__ import annotations

import pytest


@pytest.mark.asyncio
async def test_mark_one_and_all_read(client, seeded) -> None:
    for name in ("Ana", "Bruno", "Carla"):
        await client.post("/api/leads", json={"name": name})

    listing = (await client.get("/api/notifications")).json()
    assert listing["unread_count"] == 3

    first_id = listing["items"][0]["id"]
    marked = await client.post(f"/api/notifications/{first_id}/read")
    assert marked.status_code == 200
    assert marked.json()["is_read"] is True
    assert (await client.get("/api/notifications")).json()["unread_count"] == 2

    cleared = await client.post("/api/notifications/read-all")
    assert cleared.json() == {"updated": 2}
    assert (await client.get("/api/notifications")).json()["unread_count"] == 0


@pytest.mark.asyncio
async def test_mark_unknown_notification_returns_404(client) -> None:
    response = await client.post("/api/notifications/missing/read")

    assert response.status_code == 404
