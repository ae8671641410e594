"""SQLAlchemy storage backend for StudyDeck."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Sequence
from uuid import uuid4

from sqlalchemy import DateTime, Integer, JSON, String, Text, and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..domain.cards import Card, CardPack, LevelRequirement, PackSlot, Rarity, RarityChance
from ..domain.exceptions import ConcurrentModification
from .base import (
    CardStore,
    CollectedCard,
    LevelStore,
    PackStore,
    SessionRecord,
    SessionReward,
    SessionStatus,
    SessionStore,
    UserRecord,
    UserStore,
)


class Base(DeclarativeBase):
    pass


class UserTable(Base):
    __tablename__ = "studydeck_users"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    coins: Mapped[int] = mapped_column(Integer, default=0)
    experience: Mapped[int] = mapped_column(Integer, default=0)
    level: Mapped[int] = mapped_column(Integer, default=0)
    inventory: Mapped[dict] = mapped_column(JSON, default=dict)
    friends: Mapped[list] = mapped_column(JSON, default=list)
    card_display: Mapped[list] = mapped_column(JSON, default=list)
    active_session_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    version: Mapped[int] = mapped_column(Integer, default=1)


class CardTable(Base):
    __tablename__ = "studydeck_cards"

    card_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    rarity: Mapped[str] = mapped_column(String(64), index=True)
    types: Mapped[list] = mapped_column(JSON, default=list)
    image_small: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_large: Mapped[str | None] = mapped_column(Text, nullable=True)


class PackTable(Base):
    __tablename__ = "studydeck_packs"

    code: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    cost: Mapped[int] = mapped_column(Integer)
    description: Mapped[str] = mapped_column(Text, default="")
    cards: Mapped[list] = mapped_column(JSON)
    slots: Mapped[list] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class SessionTable(Base):
    __tablename__ = "studydeck_sessions"

    session_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    planned_duration: Mapped[int] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(String(16), index=True)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    actual_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reward_coins: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reward_experience: Mapped[int | None] = mapped_column(Integer, nullable=True)
    version: Mapped[int] = mapped_column(Integer, default=1)


class LevelTable(Base):
    __tablename__ = "studydeck_level_requirements"

    level: Mapped[int] = mapped_column(Integer, primary_key=True)
    experience_required: Mapped[int] = mapped_column(Integer)
    reward_coins: Mapped[int] = mapped_column(Integer, default=0)


class AsyncSQLAlchemyStorage:
    """Bundle of async stores backed by SQLAlchemy."""

    def __init__(self, dsn: str, *, echo: bool = False) -> None:
        self._engine = create_async_engine(dsn, echo=echo, future=True)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)

    async def init_models(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()

    def user_store(self) -> "AsyncSQLAlchemyUserStore":
        return AsyncSQLAlchemyUserStore(self._session_factory)

    def card_store(self) -> "AsyncSQLAlchemyCardStore":
        return AsyncSQLAlchemyCardStore(self._session_factory)

    def pack_store(self) -> "AsyncSQLAlchemyPackStore":
        return AsyncSQLAlchemyPackStore(self._session_factory)

    def session_store(self) -> "AsyncSQLAlchemySessionStore":
        return AsyncSQLAlchemySessionStore(self._session_factory)

    def level_store(self) -> "AsyncSQLAlchemyLevelStore":
        return AsyncSQLAlchemyLevelStore(self._session_factory)


class AsyncSQLAlchemyUserStore(UserStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, user_id: str) -> UserRecord | None:
        async with self._session_factory() as session:
            row = await session.get(UserTable, user_id)
            if not row:
                return None
            return UserRecord(
                user_id=row.user_id,
                username=row.username,
                coins=row.coins,
                experience=row.experience,
                level=row.level,
                inventory=_inventory_from_json(row.inventory or {}),
                friends=set(row.friends or ()),
                card_display=list(row.card_display or ()),
                active_session_id=row.active_session_id,
                version=row.version,
            )

    async def save(self, record: UserRecord) -> None:
        values = dict(
            username=record.username,
            coins=record.coins,
            experience=record.experience,
            level=record.level,
            inventory=_inventory_to_json(record.inventory),
            friends=sorted(record.friends),
            card_display=list(record.card_display),
            active_session_id=record.active_session_id,
        )
        async with self._session_factory() as session:
            if record.version == 0:
                if await session.get(UserTable, record.user_id):
                    raise ConcurrentModification("User", record.user_id, record.version)
                session.add(UserTable(user_id=record.user_id, version=1, **values))
            else:
                stmt = (
                    update(UserTable)
                    .where(
                        and_(
                            UserTable.user_id == record.user_id,
                            UserTable.version == record.version,
                        )
                    )
                    .values(version=record.version + 1, **values)
                )
                result = await session.execute(stmt)
                if result.rowcount == 0:
                    raise ConcurrentModification("User", record.user_id, record.version)
            await session.commit()
        record.version += 1


class AsyncSQLAlchemyCardStore(CardStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_ids(self, card_ids: Iterable[str]) -> Sequence[Card]:
        ids = list(dict.fromkeys(card_ids))
        if not ids:
            return []
        async with self._session_factory() as session:
            stmt = select(CardTable).where(CardTable.card_id.in_(ids))
            rows = {row.card_id: row for row in (await session.execute(stmt)).scalars().all()}
        return [_card_from_row(rows[card_id]) for card_id in ids if card_id in rows]

    async def all(self) -> Sequence[Card]:
        async with self._session_factory() as session:
            stmt = select(CardTable).order_by(CardTable.card_id)
            rows = (await session.execute(stmt)).scalars().all()
        return [_card_from_row(row) for row in rows]

    async def add(self, card: Card) -> None:
        async with self._session_factory() as session:
            await session.merge(
                CardTable(
                    card_id=card.card_id,
                    name=card.name,
                    rarity=card.rarity.value,
                    types=list(card.types),
                    image_small=card.image_small,
                    image_large=card.image_large,
                )
            )
            await session.commit()


class AsyncSQLAlchemyPackStore(PackStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_code(self, code: str) -> CardPack | None:
        async with self._session_factory() as session:
            row = await session.get(PackTable, code)
            return _pack_from_row(row) if row else None

    async def all(self) -> Sequence[CardPack]:
        async with self._session_factory() as session:
            stmt = select(PackTable).order_by(PackTable.created_at.desc())
            rows = (await session.execute(stmt)).scalars().all()
        return [_pack_from_row(row) for row in rows]

    async def add(self, pack: CardPack) -> None:
        async with self._session_factory() as session:
            if await session.get(PackTable, pack.code):
                raise ValueError(f"Pack {pack.code} already registered")
            session.add(_pack_to_row(pack, datetime.now(timezone.utc)))
            await session.commit()

    async def upsert(self, pack: CardPack) -> None:
        async with self._session_factory() as session:
            existing = await session.get(PackTable, pack.code)
            created_at = existing.created_at if existing else datetime.now(timezone.utc)
            await session.merge(_pack_to_row(pack, created_at))
            await session.commit()


class AsyncSQLAlchemySessionStore(SessionStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, session_id: str) -> SessionRecord | None:
        async with self._session_factory() as session:
            row = await session.get(SessionTable, session_id)
            return _session_from_row(row) if row else None

    async def create(
        self, user_id: str, planned_duration: int, start_time: datetime
    ) -> SessionRecord:
        record = SessionRecord(
            session_id=uuid4().hex,
            user_id=user_id,
            planned_duration=planned_duration,
            start_time=start_time,
            version=1,
        )
        async with self._session_factory() as session:
            session.add(
                SessionTable(
                    session_id=record.session_id,
                    user_id=user_id,
                    planned_duration=planned_duration,
                    status=record.status.value,
                    start_time=start_time,
                    version=record.version,
                )
            )
            await session.commit()
        return record

    async def save(self, record: SessionRecord) -> None:
        rewards = record.rewards
        async with self._session_factory() as session:
            stmt = (
                update(SessionTable)
                .where(
                    and_(
                        SessionTable.session_id == record.session_id,
                        SessionTable.version == record.version,
                    )
                )
                .values(
                    planned_duration=record.planned_duration,
                    status=record.status.value,
                    start_time=record.start_time,
                    end_time=record.end_time,
                    actual_duration=record.actual_duration,
                    reward_coins=rewards.coins if rewards else None,
                    reward_experience=rewards.experience if rewards else None,
                    version=record.version + 1,
                )
            )
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise ConcurrentModification("Session", record.session_id, record.version)
            await session.commit()
        record.version += 1

    async def fail_active_for_user(self, user_id: str, ended_at: datetime) -> int:
        async with self._session_factory() as session:
            stmt = (
                update(SessionTable)
                .where(
                    and_(
                        SessionTable.user_id == user_id,
                        SessionTable.status == SessionStatus.ACTIVE.value,
                        SessionTable.end_time.is_(None),
                    )
                )
                .values(
                    status=SessionStatus.FAILED.value,
                    end_time=ended_at,
                    actual_duration=0,
                    version=SessionTable.version + 1,
                )
            )
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount or 0


class AsyncSQLAlchemyLevelStore(LevelStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find(self, level: int) -> LevelRequirement | None:
        async with self._session_factory() as session:
            row = await session.get(LevelTable, level)
            if not row:
                return None
            return LevelRequirement(
                level=row.level,
                experience_required=row.experience_required,
                reward_coins=row.reward_coins,
            )

    async def add(self, requirement: LevelRequirement) -> None:
        async with self._session_factory() as session:
            if await session.get(LevelTable, requirement.level):
                raise ValueError(f"Level {requirement.level} already defined")
            session.add(_level_to_row(requirement))
            await session.commit()

    async def upsert(self, requirement: LevelRequirement) -> None:
        async with self._session_factory() as session:
            await session.merge(_level_to_row(requirement))
            await session.commit()


def _inventory_to_json(inventory: dict[str, CollectedCard]) -> dict:
    return {
        card_id: {"copies": entry.copies, "collectedAt": entry.collected_at.isoformat()}
        for card_id, entry in inventory.items()
    }


def _inventory_from_json(data: dict) -> dict[str, CollectedCard]:
    inventory: dict[str, CollectedCard] = {}
    for card_id, entry in data.items():
        collected_at = datetime.fromisoformat(entry["collectedAt"])
        if collected_at.tzinfo is None:
            collected_at = collected_at.replace(tzinfo=timezone.utc)
        inventory[card_id] = CollectedCard(copies=int(entry["copies"]), collected_at=collected_at)
    return inventory


def _card_from_row(row: CardTable) -> Card:
    return Card(
        card_id=row.card_id,
        name=row.name,
        rarity=Rarity(row.rarity),
        types=tuple(row.types or ()),
        image_small=row.image_small,
        image_large=row.image_large,
    )


def _pack_to_row(pack: CardPack, created_at: datetime) -> PackTable:
    return PackTable(
        code=pack.code,
        name=pack.name,
        cost=pack.cost,
        description=pack.description,
        cards=list(pack.cards),
        slots=[
            {
                "slot": slot.slot,
                "probabilities": [
                    {"rarity": entry.rarity.value, "chance": entry.chance}
                    for entry in slot.probabilities
                ],
            }
            for slot in pack.slots
        ],
        created_at=created_at,
    )


def _pack_from_row(row: PackTable) -> CardPack:
    return CardPack(
        code=row.code,
        name=row.name,
        cost=row.cost,
        description=row.description or "",
        cards=tuple(row.cards),
        slots=tuple(
            PackSlot(
                slot=int(slot["slot"]),
                probabilities=tuple(
                    RarityChance(rarity=Rarity(entry["rarity"]), chance=float(entry["chance"]))
                    for entry in slot["probabilities"]
                ),
            )
            for slot in row.slots
        ),
    )


def _level_to_row(requirement: LevelRequirement) -> LevelTable:
    return LevelTable(
        level=requirement.level,
        experience_required=requirement.experience_required,
        reward_coins=requirement.reward_coins,
    )


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on round-trip.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _session_from_row(row: SessionTable) -> SessionRecord:
    rewards = None
    if row.reward_coins is not None or row.reward_experience is not None:
        rewards = SessionReward(
            coins=row.reward_coins or 0, experience=row.reward_experience or 0
        )
    return SessionRecord(
        session_id=row.session_id,
        user_id=row.user_id,
        planned_duration=row.planned_duration,
        start_time=_as_utc(row.start_time),
        status=SessionStatus(row.status),
        end_time=_as_utc(row.end_time),
        actual_duration=row.actual_duration,
        rewards=rewards,
        version=row.version,
    )
