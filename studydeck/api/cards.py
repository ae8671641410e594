"""Card catalog endpoint."""

from fastapi import APIRouter

from ..domain.cards import Rarity
from .deps import StudyAppDep
from .schemas import CardResponse

router = APIRouter(prefix="/card", tags=["cards"])


@router.get("", response_model=list[CardResponse])
async def search_cards(
    study: StudyAppDep,
    rarity: Rarity | None = None,
    name: str | None = None,
) -> list[CardResponse]:
    cards = await study.collection_service.search_catalog(rarity=rarity, name=name)
    return [CardResponse.from_card(card) for card in cards]
