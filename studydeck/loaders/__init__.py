"""Loaders for declarative seed data."""

from .json_loader import (
    SeedDefinition,
    load_seed,
    load_seed_from_json,
    parse_seed_dict,
    validate_seed_dict,
    validate_seed_file,
)

__all__ = [
    "SeedDefinition",
    "load_seed",
    "load_seed_from_json",
    "parse_seed_dict",
    "validate_seed_dict",
    "validate_seed_file",
]
