"""
User endpoints.

Account creation is driven by the identity provider; the card showcase is
the only other write.
"""

from typing import Literal

from fastapi import APIRouter, Query

from ..domain.cards import Rarity
from .deps import StudyAppDep
from .schemas import (
    CardDisplayRequest,
    ErrorResponse,
    OwnedCardResponse,
    RegisterUserRequest,
    UserResponse,
)

router = APIRouter(prefix="/user", tags=["users"])


@router.post("", response_model=UserResponse)
async def register_user(request: RegisterUserRequest, study: StudyAppDep) -> UserResponse:
    profile = await study.user_service.register(request.id, request.username, coins=request.coins)
    return UserResponse.from_profile(profile)


@router.get(
    "/card-display/{user_id}",
    response_model=list[str],
    responses={404: {"model": ErrorResponse}},
)
async def get_card_display(user_id: str, study: StudyAppDep) -> list[str]:
    return await study.user_service.get_card_display(user_id)


@router.put(
    "/card-display/{user_id}",
    response_model=list[str],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_card_display(
    user_id: str, request: CardDisplayRequest, study: StudyAppDep
) -> list[str]:
    return await study.user_service.update_card_display(user_id, request.card_display)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_user(user_id: str, study: StudyAppDep) -> UserResponse:
    profile = await study.user_service.fetch(user_id)
    return UserResponse.from_profile(profile)


@router.get(
    "/{user_id}/cards",
    response_model=list[OwnedCardResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_user_cards(
    user_id: str,
    study: StudyAppDep,
    rarity: Rarity | None = None,
    name: str | None = None,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    order: Literal["asc", "desc"] = "asc",
) -> list[OwnedCardResponse]:
    owned = await study.collection_service.user_cards(
        user_id, rarity=rarity, name=name, sort_by=sort_by, order=order
    )
    return [OwnedCardResponse.from_owned(item) for item in owned]
