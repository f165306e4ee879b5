"""Game profile API."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_put_and_list(client: AsyncClient, make_user) -> None:
    _, headers = await make_user()
    assert (await client.get("/api/user/game-profiles", headers=headers)).json() == {}

    response = await client.put(
        "/api/user/game-profiles/Valorant",
        json={"inGameName": "Jett Main", "inGameId": "jett#0001"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json() == {"Valorant": {"inGameName": "Jett Main", "inGameId": "jett#0001"}}

    await client.put(
        "/api/user/game-profiles/Valorant",
        json={"inGameName": "Sage Main", "inGameId": "sage#0002"},
        headers=headers,
    )
    profiles = (await client.get("/api/user/game-profiles", headers=headers)).json()
    assert profiles == {"Valorant": {"inGameName": "Sage Main", "inGameId": "sage#0002"}}
