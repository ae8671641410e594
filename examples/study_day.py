"""Walk one user through a study session and a pack opening against the example seed."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from pathlib import Path

from studydeck import StudyApp, StudyDeckConfig
from studydeck.cli import configure_logging
from studydeck.loaders import load_seed_from_json


async def main() -> None:
    configure_logging("INFO")
    app = StudyApp(StudyDeckConfig(rng_seed=42))
    await load_seed_from_json(app, Path(__file__).with_name("seed.json"))

    await app.user_service.register("demo-user", "ash", coins=10)
    session = await app.session_service.start_session("demo-user", planned_duration=25)

    # Pretend the Pomodoro ran its full length.
    stored = await app.session_store.get(session.session_id)
    stored.start_time -= timedelta(minutes=25)
    await app.session_store.save(stored)

    outcome = await app.session_service.complete_session(session.session_id)
    logging.info("Level info: %s", outcome.level_info)

    cards = await app.pack_service.open_pack("eevee", "demo-user")
    for position, card in enumerate(cards, start=1):
        logging.info("%s. %s (%s)", position, card.name, card.rarity.value)

    profile = await app.user_service.fetch("demo-user")
    logging.info("Coins left: %s, cards owned: %s", profile.coins, sum(profile.inventory.values()))


if __name__ == "__main__":
    asyncio.run(main())
