"""Request and response models for the HTTP API (camelCase on the wire)."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..domain.cards import Card, CardPack, PackSummary, Rarity
from ..domain.collection import OwnedCard
from ..domain.leveling import UserLevelInfo
from ..domain.users import UserProfile
from ..storage.base import SessionRecord, SessionStatus


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(ApiModel):
    error: str
    kind: str


class CardResponse(ApiModel):
    id: str
    name: str
    rarity: Rarity
    types: list[str] = Field(default_factory=list)
    small: str | None = None
    large: str | None = None

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            id=card.card_id,
            name=card.name,
            rarity=card.rarity,
            types=list(card.types),
            small=card.image_small,
            large=card.image_large,
        )


class OwnedCardResponse(CardResponse):
    copies: int
    collected_at: datetime | None = None

    @classmethod
    def from_owned(cls, owned: OwnedCard) -> "OwnedCardResponse":
        base = CardResponse.from_card(owned.card)
        return cls(**base.model_dump(), copies=owned.copies, collected_at=owned.collected_at)


class PackSummaryResponse(ApiModel):
    code: str
    name: str
    cost: int
    description: str = ""

    @classmethod
    def from_summary(cls, summary: PackSummary) -> "PackSummaryResponse":
        return cls(
            code=summary.code, name=summary.name, cost=summary.cost, description=summary.description
        )


class RarityChanceResponse(ApiModel):
    rarity: Rarity
    chance: float


class SlotResponse(ApiModel):
    slot: int
    probabilities: list[RarityChanceResponse]


class PackResponse(PackSummaryResponse):
    cards: list[str]
    slots: list[SlotResponse]
    num_of_cards: int

    @classmethod
    def from_pack(cls, pack: CardPack) -> "PackResponse":
        return cls(
            code=pack.code,
            name=pack.name,
            cost=pack.cost,
            description=pack.description,
            cards=list(pack.cards),
            slots=[
                SlotResponse(
                    slot=slot.slot,
                    probabilities=[
                        RarityChanceResponse(rarity=entry.rarity, chance=entry.chance)
                        for entry in slot.probabilities
                    ],
                )
                for slot in pack.slots
            ],
            num_of_cards=pack.num_of_cards,
        )


class RewardResponse(ApiModel):
    coins: int
    experience: int


class SessionResponse(ApiModel):
    id: str
    user_id: str
    planned_duration: int
    status: SessionStatus
    start_time: datetime
    end_time: datetime | None = None
    actual_duration: int | None = None
    rewards: RewardResponse | None = None

    @classmethod
    def from_record(cls, record: SessionRecord) -> "SessionResponse":
        return cls(
            id=record.session_id,
            user_id=record.user_id,
            planned_duration=record.planned_duration,
            status=record.status,
            start_time=record.start_time,
            end_time=record.end_time,
            actual_duration=record.actual_duration,
            rewards=(
                RewardResponse(coins=record.rewards.coins, experience=record.rewards.experience)
                if record.rewards
                else None
            ),
        )


class UserLevelInfoResponse(ApiModel):
    id: str
    level: int
    coins: int
    level_up_coins: int
    experience: int
    is_level_up: bool
    next_level_needed_experience: int
    next_level_experience: int | None = None

    @classmethod
    def from_info(cls, info: UserLevelInfo) -> "UserLevelInfoResponse":
        return cls(
            id=info.user_id,
            level=info.level,
            coins=info.coins,
            level_up_coins=info.level_up_coins,
            experience=info.experience,
            is_level_up=info.is_level_up,
            next_level_needed_experience=info.next_level_needed_experience,
            next_level_experience=info.next_level_experience,
        )


class StartSessionRequest(ApiModel):
    user_id: str = Field(..., min_length=1)
    duration: int = Field(..., gt=0, description="Planned duration in minutes")


class CompleteSessionResponse(ApiModel):
    session: SessionResponse
    user_level_info: UserLevelInfoResponse


class CancelSessionResponse(ApiModel):
    message: str
    session_id: str


class RegisterUserRequest(ApiModel):
    id: str = Field(..., min_length=1)
    username: str | None = None
    coins: int = Field(default=0, ge=0)


class CardDisplayRequest(ApiModel):
    card_display: list[str]


class UserResponse(ApiModel):
    id: str
    username: str | None = None
    coins: int
    experience: int
    level: int
    active_session_id: str | None = None
    inventory: dict[str, int] = Field(default_factory=dict)
    card_display: list[str] = Field(default_factory=list)

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserResponse":
        return cls(
            id=profile.user_id,
            username=profile.username,
            coins=profile.coins,
            experience=profile.experience,
            level=profile.level,
            active_session_id=profile.active_session_id,
            inventory=dict(profile.inventory),
            card_display=list(profile.card_display),
        )
