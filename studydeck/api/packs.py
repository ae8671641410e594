"""
Card pack endpoints.

Listing, lookup and opening of packs. Opening debits the pack cost and
returns the drawn cards in slot order.
"""

from fastapi import APIRouter

from .deps import StudyAppDep
from .schemas import CardResponse, ErrorResponse, PackResponse, PackSummaryResponse

router = APIRouter(prefix="/pack", tags=["packs"])


@router.get("", response_model=list[PackSummaryResponse])
async def list_packs(study: StudyAppDep) -> list[PackSummaryResponse]:
    packs = await study.pack_service.list_packs()
    return [PackSummaryResponse.from_summary(pack) for pack in packs]


@router.get(
    "/{code}",
    response_model=PackResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_pack(code: str, study: StudyAppDep) -> PackResponse:
    pack = await study.pack_service.get_pack(code)
    return PackResponse.from_pack(pack)


@router.post(
    "/open/{code}/{user_id}",
    response_model=list[CardResponse],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def open_pack(code: str, user_id: str, study: StudyAppDep) -> list[CardResponse]:
    cards = await study.pack_service.open_pack(code, user_id)
    return [CardResponse.from_card(card) for card in cards]
