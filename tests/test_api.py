"""HTTP API tests against the in-memory backend."""

from datetime import timedelta
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from studydeck.app import StudyApp
from studydeck.config import StudyDeckConfig
from studydeck.loaders import load_seed_from_json
from studydeck.server import create_api
from studydeck.testing import ScriptedRandom

SEED_PATH = Path(__file__).resolve().parent.parent / "examples" / "seed.json"


@pytest.fixture
async def study():
    app = StudyApp(StudyDeckConfig(), rng=ScriptedRandom([0.5] * 20))
    await load_seed_from_json(app, SEED_PATH)
    await app.user_service.register("u1", "ash", coins=30)
    return app


@pytest.fixture
async def client(study):
    transport = ASGITransport(app=create_api(study))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestHealth:
    async def test_health_returns_healthy(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestPacks:
    async def test_list_packs(self, client: AsyncClient) -> None:
        response = await client.get("/pack")
        assert response.status_code == 200
        assert {pack["code"] for pack in response.json()} == {"eevee", "starter"}

    async def test_get_pack_uses_camel_case(self, client: AsyncClient) -> None:
        response = await client.get("/pack/eevee")
        assert response.status_code == 200
        body = response.json()
        assert body["numOfCards"] == 6
        assert body["slots"][5]["probabilities"][3] == {
            "rarity": "Special Illustration Rare",
            "chance": 5.0,
        }

    async def test_get_unknown_pack(self, client: AsyncClient) -> None:
        response = await client.get("/pack/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "CardPack not found", "kind": "not_found"}

    async def test_open_pack(self, client: AsyncClient, study: StudyApp) -> None:
        response = await client.post("/pack/open/starter/u1")
        assert response.status_code == 200
        cards = response.json()
        assert len(cards) == 1
        assert cards[0]["rarity"] == "Common"
        assert cards[0]["small"].startswith("https://")
        assert (await study.user_store.get("u1")).coins == 25

    async def test_open_pack_without_coins(self, client: AsyncClient) -> None:
        await client.post("/pack/open/eevee/u1")
        response = await client.post("/pack/open/eevee/u1")
        assert response.status_code == 403
        assert response.json()["kind"] == "forbidden"


class TestSessions:
    async def test_full_session_flow(self, client: AsyncClient, study: StudyApp) -> None:
        response = await client.post("/session/start", json={"userId": "u1", "duration": 25})
        assert response.status_code == 200
        session = response.json()
        assert session["status"] == "active"
        assert session["plannedDuration"] == 25

        stored = await study.session_store.get(session["id"])
        stored.start_time -= timedelta(minutes=25)
        await study.session_store.save(stored)

        response = await client.post(f"/session/complete/{session['id']}")
        assert response.status_code == 200
        body = response.json()
        assert body["session"]["status"] == "completed"
        assert body["session"]["actualDuration"] == 25
        assert body["session"]["rewards"] == {"coins": 50, "experience": 20}
        info = body["userLevelInfo"]
        assert info["isLevelUp"] is True
        assert info["level"] == 1
        assert info["levelUpCoins"] == 50
        assert info["coins"] == 130
        assert info["nextLevelExperience"] == 100

        response = await client.post(f"/session/complete/{session['id']}")
        assert response.status_code == 409
        assert response.json() == {"error": "Session is not active", "kind": "invalid_state"}

    async def test_cancel_session(self, client: AsyncClient) -> None:
        started = (await client.post("/session/start", json={"userId": "u1", "duration": 25})).json()
        response = await client.post(f"/session/cancel/{started['id']}")
        assert response.status_code == 200
        assert response.json() == {
            "message": "Session canceled successfully",
            "sessionId": started["id"],
        }

    async def test_start_rejects_bad_duration(self, client: AsyncClient) -> None:
        response = await client.post("/session/start", json={"userId": "u1", "duration": 0})
        assert response.status_code == 422

    async def test_unknown_session(self, client: AsyncClient) -> None:
        response = await client.post("/session/cancel/missing")
        assert response.status_code == 404


class TestUsers:
    async def test_register_and_fetch(self, client: AsyncClient) -> None:
        response = await client.post("/user", json={"id": "u2", "username": "misty", "coins": 5})
        assert response.status_code == 200
        response = await client.get("/user/u2")
        assert response.json()["coins"] == 5
        assert response.json()["activeSessionId"] is None

    async def test_unknown_user(self, client: AsyncClient) -> None:
        response = await client.get("/user/ghost")
        assert response.status_code == 404

    async def test_user_cards_sorted_by_duplicates(self, client: AsyncClient) -> None:
        await client.post("/pack/open/starter/u1")
        await client.post("/pack/open/starter/u1")
        response = await client.get("/user/u1/cards", params={"sortBy": "duplicates", "order": "desc"})
        assert response.status_code == 200
        cards = response.json()
        assert cards[0]["copies"] == 2
        assert cards[0]["collectedAt"] is not None

    async def test_catalog_search(self, client: AsyncClient) -> None:
        response = await client.get("/card", params={"rarity": "Double Rare", "name": "ex"})
        assert response.status_code == 200
        assert {card["name"] for card in response.json()} == {"Tyranitar ex", "Charizard ex"}


class TestCardDisplay:
    async def test_update_and_read_showcase(self, client: AsyncClient) -> None:
        await client.post("/pack/open/starter/u1")

        response = await client.put("/user/card-display/u1", json={"cardDisplay": ["sv9-77"]})
        assert response.status_code == 200
        assert response.json() == ["sv9-77"]

        response = await client.get("/user/card-display/u1")
        assert response.json() == ["sv9-77"]
        assert (await client.get("/user/u1")).json()["cardDisplay"] == ["sv9-77"]

    async def test_unowned_cards_are_rejected(self, client: AsyncClient) -> None:
        response = await client.put("/user/card-display/u1", json={"cardDisplay": ["sv3pt5-6"]})
        assert response.status_code == 400
        assert response.json() == {
            "error": "Invalid card IDs: sv3pt5-6",
            "kind": "invalid_argument",
        }

    async def test_unknown_user(self, client: AsyncClient) -> None:
        response = await client.get("/user/card-display/ghost")
        assert response.status_code == 404
