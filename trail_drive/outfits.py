"""Outfit validation and starting-ledger seeding."""

from __future__ import annotations

from typing import Dict, List

from .config import OutfitTables, Settings
from .ledger import ResourceLedger
from .models import OutfitConfig


class OutfitError(ValueError):
    """Raised when an outfit asks for something the trail boss can't hire."""


def validate_outfit(outfit: OutfitConfig, tables: OutfitTables) -> List[str]:
    errors: List[str] = []
    if outfit.herd_size not in tables.herd_sizes:
        sizes = ", ".join(str(size) for size in tables.herd_sizes)
        errors.append(f"herd_size must be one of {sizes}")
    for name, value, maximum in (
        ("extra_crew", outfit.extra_crew, tables.extra_crew_max),
        ("extra_horses", outfit.extra_horses, tables.extra_horses_max),
        ("extra_supplies", outfit.extra_supplies, tables.extra_supplies_max),
        ("spare_parts", outfit.spare_parts, tables.spare_parts_max),
    ):
        if not 0 <= value <= maximum:
            errors.append(f"{name} must be between 0 and {maximum}")
    if outfit.armament not in tables.armament:
        errors.append(f"Unknown armament: {outfit.armament!r}")
    if outfit.wage_tier not in tables.wage_tiers:
        errors.append(f"Unknown wage tier: {outfit.wage_tier!r}")
    return errors


def starting_herd_condition(herd: int, crew: int, wage_tier: str, tables: OutfitTables) -> int:
    """Herd condition from the crew-to-herd ratio, nudged by wages."""

    crew_per_thousand = crew / (herd / 1000)
    rating = tables.condition_base + round(
        (crew_per_thousand - tables.reference_crew_per_thousand)
        * tables.points_per_crew_per_thousand
    )
    rating += int(tables.wage_tiers[wage_tier].get("herd_condition", 0))
    return max(tables.condition_min, min(tables.condition_max, rating))


def seed_resources(outfit: OutfitConfig, settings: Settings) -> ResourceLedger:
    """Build the starting ledger for ``outfit``.

    Herd, crew and horse caps become the outfit's own starting numbers, so
    nothing can grow past what left San Antonio.
    """

    tables = settings.outfit
    errors = validate_outfit(outfit, tables)
    if errors:
        raise OutfitError("; ".join(errors))

    crew = tables.base_crew + outfit.extra_crew
    horses = tables.base_horses + outfit.extra_horses
    armament = tables.armament[outfit.armament]
    wages = tables.wage_tiers[outfit.wage_tier]

    caps: Dict[str, int] = dict(settings.resource_caps)
    caps.update(herd=outfit.herd_size, crew=crew, horses=horses)
    values = {
        "herd": outfit.herd_size,
        "crew": crew,
        "horses": horses,
        "supplies": tables.base_supplies + outfit.extra_supplies,
        "morale": int(wages.get("morale", 0)) + int(armament.get("morale", 0)),
        "herd_condition": starting_herd_condition(
            outfit.herd_size, crew, outfit.wage_tier, tables
        ),
        "ammo": int(armament.get("ammo", 0)),
        "spare_parts": outfit.spare_parts,
    }
    return ResourceLedger(caps, values)


__all__ = ["OutfitError", "seed_resources", "starting_herd_condition", "validate_outfit"]
