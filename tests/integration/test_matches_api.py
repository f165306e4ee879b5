"""Match requests API: paid posting drains the balance."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

SPEC = {"game": "BGMI", "mode": "Squad", "platform": "Mobile", "language": "Hindi", "description": "Need 2 rushers"}


@pytest.mark.asyncio
async def test_ten_posts_drain_balance_eleventh_fails(client: AsyncClient, make_user) -> None:
    _, headers = await make_user(coins=100)

    for expected in range(90, -1, -10):
        response = await client.post("/api/match-requests", json=SPEC, headers=headers)
        assert response.status_code == 201
        assert response.json()["newBalance"] == expected

    response = await client.post("/api/match-requests", json=SPEC, headers=headers)
    assert response.status_code == 400
    assert response.json() == {"message": "Insufficient credits"}

    listing = await client.get("/api/match-requests")
    assert listing.json()["total"] == 10


@pytest.mark.asyncio
async def test_list_filters_and_pagination(client: AsyncClient, make_user) -> None:
    _, headers = await make_user(coins=100)
    await client.post("/api/match-requests", json=SPEC, headers=headers)
    await client.post("/api/match-requests", json={**SPEC, "game": "Valorant", "platform": "PC"}, headers=headers)
    await client.post("/api/match-requests", json={**SPEC, "game": "Free Fire", "description": None}, headers=headers)

    by_game = await client.get("/api/match-requests", params={"game": "valo"})
    assert [r["game"] for r in by_game.json()["requests"]] == ["Valorant"]

    by_platform = await client.get("/api/match-requests", params={"platform": "Mobile"})
    assert by_platform.json()["total"] == 2

    by_search = await client.get("/api/match-requests", params={"search": "rushers"})
    assert by_search.json()["total"] == 2

    page = await client.get("/api/match-requests", params={"page": 2, "limit": 2})
    data = page.json()
    assert data["totalPages"] == 2
    assert len(data["requests"]) == 1


@pytest.mark.asyncio
async def test_only_owner_deletes(client: AsyncClient, make_user) -> None:
    _, owner = await make_user("owner")
    _, other = await make_user("other")
    created = await client.post("/api/match-requests", json=SPEC, headers=owner)
    request_id = created.json()["id"]

    assert (await client.delete(f"/api/match-requests/{request_id}", headers=other)).status_code == 403
    assert (await client.delete(f"/api/match-requests/{request_id}", headers=owner)).status_code == 200
    assert (await client.delete(f"/api/match-requests/{request_id}", headers=owner)).status_code == 404
