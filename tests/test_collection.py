from datetime import datetime, timedelta, timezone

import pytest

from studydeck.app import StudyApp
from studydeck.config import StudyDeckConfig
from studydeck.domain.cards import Card, Rarity
from studydeck.domain.collection import OwnedCard, sort_owned
from studydeck.domain.exceptions import ErrorKind, InvalidArgument, NotFound
from studydeck.storage.base import CollectedCard

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)

SWINUB = Card(card_id="sv9-77", name="Swinub", rarity=Rarity.COMMON, types=("Water",))
FLAREON = Card(card_id="sv8pt5-13", name="Flareon", rarity=Rarity.RARE, types=("Fire",))
CHARIZARD = Card(
    card_id="sv3pt5-6", name="Charizard ex", rarity=Rarity.DOUBLE_RARE, types=("Fire",)
)


@pytest.fixture()
async def app():
    app = StudyApp(StudyDeckConfig())
    for card in (SWINUB, FLAREON, CHARIZARD):
        await app.card_store.add(card)
    await app.user_service.register("u1", "ash")
    record = await app.user_store.get("u1")
    record.inventory = {
        SWINUB.card_id: CollectedCard(copies=3, collected_at=NOW - timedelta(days=2)),
        FLAREON.card_id: CollectedCard(copies=1, collected_at=NOW),
        CHARIZARD.card_id: CollectedCard(copies=2, collected_at=NOW - timedelta(days=1)),
    }
    await app.user_store.save(record)
    return app


def _ids(owned):
    return [item.card.card_id for item in owned]


@pytest.mark.asyncio()
async def test_user_cards_sorting(app):
    service = app.collection_service
    assert _ids(await service.user_cards("u1", sort_by="recent")) == [
        "sv8pt5-13",
        "sv3pt5-6",
        "sv9-77",
    ]
    assert _ids(await service.user_cards("u1", sort_by="duplicates", order="desc")) == [
        "sv9-77",
        "sv3pt5-6",
        "sv8pt5-13",
    ]
    assert _ids(await service.user_cards("u1", sort_by="rarity")) == [
        "sv9-77",
        "sv8pt5-13",
        "sv3pt5-6",
    ]


@pytest.mark.asyncio()
async def test_user_cards_filters(app):
    zard = await app.collection_service.user_cards("u1", name="ZARD")
    assert _ids(zard) == ["sv3pt5-6"]
    rare = await app.collection_service.user_cards("u1", rarity=Rarity.RARE)
    assert rare[0].copies == 1
    with pytest.raises(NotFound):
        await app.collection_service.user_cards("ghost")


@pytest.mark.asyncio()
async def test_search_catalog(app):
    assert _ids_of(await app.collection_service.search_catalog(name="eon")) == ["sv8pt5-13"]
    assert len(await app.collection_service.search_catalog()) == 3


def _ids_of(cards):
    return [card.card_id for card in cards]


def test_sort_owned_unknown_key_keeps_order():
    owned = [
        OwnedCard(card=FLAREON, copies=1, collected_at=None),
        OwnedCard(card=SWINUB, copies=1, collected_at=None),
    ]
    assert sort_owned(owned, "color") == owned
    assert _ids(sort_owned(owned, "types")) == ["sv8pt5-13", "sv9-77"]


@pytest.mark.asyncio()
async def test_register_is_idempotent(app):
    profile = await app.user_service.register("u1", "someone-else", coins=999)
    assert profile.username == "ash"
    assert profile.coins == 0
    assert profile.inventory["sv9-77"] == 3

    with pytest.raises(ValueError):
        await app.user_service.register("u2", coins=-1)
    with pytest.raises(NotFound, match="User not found"):
        await app.user_service.fetch("u2")


@pytest.mark.asyncio()
async def test_card_display_accepts_owned_cards(app):
    assert await app.user_service.get_card_display("u1") == []

    shown = await app.user_service.update_card_display("u1", ["sv3pt5-6", "sv9-77"])

    assert shown == ["sv3pt5-6", "sv9-77"]
    assert await app.user_service.get_card_display("u1") == ["sv3pt5-6", "sv9-77"]
    assert (await app.user_service.fetch("u1")).card_display == ["sv3pt5-6", "sv9-77"]


@pytest.mark.asyncio()
async def test_card_display_rejects_unowned_cards(app):
    await app.user_service.update_card_display("u1", ["sv9-77"])

    with pytest.raises(InvalidArgument) as excinfo:
        await app.user_service.update_card_display("u1", ["sv9-77", "sv8pt5-156", "nope"])

    assert excinfo.value.kind is ErrorKind.INVALID_ARGUMENT
    assert excinfo.value.reason == "Invalid card IDs: sv8pt5-156, nope"
    assert await app.user_service.get_card_display("u1") == ["sv9-77"]
    with pytest.raises(NotFound, match="User not found"):
        await app.user_service.get_card_display("ghost")
    with pytest.raises(NotFound, match="User not found"):
        await app.user_service.update_card_display("ghost", [])
