"""Command line helpers for StudyDeck."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from random import Random

import uvicorn
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .app import StudyApp
from .config import StudyDeckConfig
from .diagnostics.checklist import run_checklist as checklist_run
from .diagnostics.pack_simulator import PackSimulator
from .domain.cards import Rarity
from .loaders import parse_seed_dict, validate_seed_file
from .server import create_api

console = Console()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def run_validate() -> None:
    parser = argparse.ArgumentParser(description="StudyDeck seed validator")
    parser.add_argument("seed", help="Path to seed JSON file")
    args = parser.parse_args()

    errors = validate_seed_file(Path(args.seed))
    if errors:
        console.print("[bold red]Seed errors:[/bold red]")
        for err in errors:
            console.print(f"- {err}")
        sys.exit(1)
    console.print("[bold green]Seed is valid.[/bold green]")


def run_checklist() -> None:
    parser = argparse.ArgumentParser(description="StudyDeck balancing checks")
    parser.add_argument("seed", help="Path to seed JSON file")
    args = parser.parse_args()

    definition = parse_seed_dict(_read_json(args.seed))
    issues = checklist_run(definition)
    if not issues:
        console.print("[bold green]No issues found.[/bold green]")
        return
    for issue in issues:
        style = "red" if issue.severity == "error" else "yellow"
        console.print(f"[{style}][{issue.severity.upper()}][/{style}] {issue.message}")
    if any(issue.severity == "error" for issue in issues):
        sys.exit(1)


def run_simulator() -> None:
    parser = argparse.ArgumentParser(description="StudyDeck pack opening simulator")
    parser.add_argument("seed", help="Path to seed JSON file")
    parser.add_argument("pack_code", help="Pack code to simulate")
    parser.add_argument("--pulls", type=int, default=1000, help="Number of packs to open")
    parser.add_argument("--seed-rng", type=int, default=None, help="Random seed for repeatable runs")
    args = parser.parse_args()

    definition = parse_seed_dict(_read_json(args.seed))
    rng_seed = args.seed_rng if args.seed_rng is not None else StudyDeckConfig.from_env().rng_seed
    simulator = PackSimulator(definition, rng=Random(rng_seed))
    result = simulator.simulate(args.pack_code, pulls=args.pulls)

    table = Table(title=f"{result.pulls} x {result.pack_code}")
    table.add_column("Rarity")
    table.add_column("Cards", justify="right")
    table.add_column("Share", justify="right")
    for rarity in Rarity:
        count = result.rarities.get(rarity, 0)
        if count:
            table.add_row(rarity.value, str(count), f"{result.share(rarity):.2%}")
    console.print(table)
    console.print(
        f"Unique cards: {result.unique_cards}, fallback draws: {result.fallbacks}, "
        f"coins spent: {result.coins_spent}"
    )


def run_server() -> None:
    parser = argparse.ArgumentParser(description="StudyDeck HTTP API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--seed", default=None, help="Seed JSON loaded on startup")
    args = parser.parse_args()

    config = StudyDeckConfig.from_env()
    if args.seed:
        config.seed_path = args.seed
    configure_logging(config.log_level)
    uvicorn.run(create_api(StudyApp(config)), host=args.host, port=args.port, log_config=None)


def _read_json(path: str) -> dict:
    return json.loads(Path(path).read_text(encoding="utf-8"))
