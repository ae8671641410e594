"""Load cards, packs and level requirements from JSON seed data."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Sequence, TYPE_CHECKING

from ..domain.cards import Card, CardPack, LevelRequirement, PackSlot, Rarity, RarityChance

if TYPE_CHECKING:
    from ..app import StudyApp

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SeedDefinition:
    cards: Sequence[Card]
    packs: Sequence[CardPack]
    levels: Sequence[LevelRequirement]


async def load_seed_from_json(app: "StudyApp", path: str | Path) -> SeedDefinition:
    """Load seed data from a JSON file and write it into the app's stores."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    definition = parse_seed_dict(data)
    await load_seed(app, definition)
    logger.info(
        "Loaded %s cards, %s packs and %s levels from %s.",
        len(definition.cards),
        len(definition.packs),
        len(definition.levels),
        path,
    )
    return definition


async def load_seed(app: "StudyApp", definition: SeedDefinition) -> None:
    """Write the definition into the stores, replacing entries with the same key.

    Reloading the same seed on every startup is safe.
    """
    for card in definition.cards:
        await app.card_store.add(card)
    for pack in definition.packs:
        await app.pack_store.upsert(pack)
    for requirement in definition.levels:
        await app.level_store.upsert(requirement)


def parse_seed_dict(data: dict[str, Any]) -> SeedDefinition:
    """Parse a JSON dict (already decoded) into domain objects."""
    errors = validate_seed_dict(data)
    if errors:
        raise ValueError(_format_errors("Seed validation failed", errors))
    cards = tuple(parse_card(entry) for entry in data.get("cards", []))
    packs = tuple(parse_pack(entry) for entry in data.get("packs", []))
    levels = tuple(parse_level(entry) for entry in data.get("levels", []))
    return SeedDefinition(cards=cards, packs=packs, levels=levels)


def parse_card(entry: dict[str, Any]) -> Card:
    images = entry.get("images", {})
    return Card(
        card_id=entry["id"],
        name=entry["name"],
        rarity=Rarity(entry["rarity"]),
        types=tuple(map(str, entry.get("types", ()))),
        image_small=images.get("small"),
        image_large=images.get("large"),
    )


def parse_pack(entry: dict[str, Any]) -> CardPack:
    return CardPack(
        code=entry["code"],
        name=entry.get("name", entry["code"]),
        cost=int(entry["cost"]),
        description=entry.get("description", ""),
        cards=tuple(entry["cards"]),
        slots=tuple(
            PackSlot(
                slot=int(slot.get("slot", position)),
                probabilities=tuple(
                    RarityChance(rarity=Rarity(prob["rarity"]), chance=float(prob["chance"]))
                    for prob in slot["probabilities"]
                ),
            )
            for position, slot in enumerate(entry["slots"], start=1)
        ),
    )


def parse_level(entry: dict[str, Any]) -> LevelRequirement:
    return LevelRequirement(
        level=int(entry["level"]),
        experience_required=int(entry["experienceRequired"]),
        reward_coins=int(entry.get("rewardCoins", 0)),
    )


def validate_seed_file(path: str | Path) -> list[str]:
    """Validate seed JSON file and return a list of errors."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return validate_seed_dict(data)


def validate_seed_dict(data: dict[str, Any]) -> list[str]:
    errors: list[str] = []
    if not isinstance(data, dict):
        return ["Seed document must be a JSON object."]

    cards_raw = data.get("cards")
    card_ids: set[str] = set()
    if not isinstance(cards_raw, list) or not cards_raw:
        errors.append("Seed must contain non-empty 'cards' array.")
    else:
        for idx, entry in enumerate(cards_raw, start=1):
            if not isinstance(entry, dict):
                errors.append(f"Card #{idx} must be an object.")
                continue
            card_id = entry.get("id")
            if not isinstance(card_id, str) or not card_id.strip():
                errors.append(f"Card #{idx} must define non-empty 'id'.")
                continue
            if card_id in card_ids:
                errors.append(f"Card id '{card_id}' defined multiple times.")
            card_ids.add(card_id)

            name = entry.get("name")
            if not isinstance(name, str) or not name.strip():
                errors.append(f"Card '{card_id}' must define non-empty 'name'.")
            if not _is_rarity(entry.get("rarity")):
                errors.append(f"Card '{card_id}' has invalid rarity '{entry.get('rarity')}'.")

            types = entry.get("types", [])
            if not isinstance(types, list) or not all(isinstance(t, str) for t in types):
                errors.append(f"Card '{card_id}' 'types' must be an array of strings.")

            images = entry.get("images")
            if images is not None:
                if not isinstance(images, dict):
                    errors.append(f"Card '{card_id}' images must be an object.")
                else:
                    for size in ("small", "large"):
                        url = images.get(size)
                        if url is not None and (not isinstance(url, str) or not url.strip()):
                            errors.append(f"Card '{card_id}' images.{size} must be a non-empty string.")

    packs_raw = data.get("packs")
    pack_codes: set[str] = set()
    if not isinstance(packs_raw, list) or not packs_raw:
        errors.append("Seed must contain non-empty 'packs' array.")
    else:
        for idx, entry in enumerate(packs_raw, start=1):
            if not isinstance(entry, dict):
                errors.append(f"Pack #{idx} must be an object.")
                continue
            code = entry.get("code")
            if not isinstance(code, str) or not code.strip():
                errors.append(f"Pack #{idx} must define non-empty 'code'.")
                continue
            if code in pack_codes:
                errors.append(f"Pack code '{code}' defined multiple times.")
            pack_codes.add(code)

            cost = entry.get("cost")
            if not isinstance(cost, int) or isinstance(cost, bool) or cost <= 0:
                errors.append(f"Pack '{code}' must define positive integer 'cost'.")

            cards = entry.get("cards")
            if not isinstance(cards, list) or not cards:
                errors.append(f"Pack '{code}' must define non-empty 'cards' array.")
            else:
                for card_id in cards:
                    if card_ids and card_id not in card_ids:
                        errors.append(f"Pack '{code}' references unknown card '{card_id}'.")

            errors.extend(_validate_slots(code, entry.get("slots")))

    levels_raw = data.get("levels", [])
    if not isinstance(levels_raw, list):
        errors.append("'levels' must be an array.")
    else:
        seen_levels: set[int] = set()
        for idx, entry in enumerate(levels_raw, start=1):
            if not isinstance(entry, dict):
                errors.append(f"Level #{idx} must be an object.")
                continue
            level = entry.get("level")
            if not isinstance(level, int) or level < 1:
                errors.append(f"Level #{idx} must define positive integer 'level'.")
                continue
            if level in seen_levels:
                errors.append(f"Level {level} defined multiple times.")
            seen_levels.add(level)
            for field_name in ("experienceRequired", "rewardCoins"):
                value = entry.get(field_name, 0)
                if not isinstance(value, int) or value < 0:
                    errors.append(f"Level {level} '{field_name}' must be non-negative integer.")
            if "experienceRequired" not in entry:
                errors.append(f"Level {level} must define 'experienceRequired'.")

    return errors


def _validate_slots(code: str, slots: Any) -> list[str]:
    errors: list[str] = []
    if not isinstance(slots, list) or not slots:
        return [f"Pack '{code}' must define non-empty 'slots' array."]
    for position, slot in enumerate(slots, start=1):
        if not isinstance(slot, dict):
            errors.append(f"Pack '{code}' slot #{position} must be an object.")
            continue
        probabilities = slot.get("probabilities")
        if not isinstance(probabilities, list) or not probabilities:
            errors.append(f"Pack '{code}' slot #{position} must define non-empty 'probabilities'.")
            continue
        for prob in probabilities:
            if not isinstance(prob, dict) or not _is_rarity(prob.get("rarity")):
                errors.append(f"Pack '{code}' slot #{position} has invalid rarity entry {prob!r}.")
                continue
            chance = prob.get("chance")
            if not isinstance(chance, (int, float)) or isinstance(chance, bool) or chance < 0:
                errors.append(
                    f"Pack '{code}' slot #{position} chance for '{prob['rarity']}' must be non-negative."
                )
    return errors


def _is_rarity(value: Any) -> bool:
    try:
        Rarity(value)
    except ValueError:
        return False
    return True


def _format_errors(prefix: str, errors: Iterable[str]) -> str:
    formatted = "\n".join(f"- {err}" for err in errors)
    return f"{prefix}:\n{formatted}"
