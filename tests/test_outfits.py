"""Tests for outfit validation and starting ledgers."""
from __future__ import annotations

import dataclasses

import pytest

from trail_drive.config import get_settings
from trail_drive.models import OutfitConfig
from trail_drive.outfits import OutfitError, seed_resources, starting_herd_condition, validate_outfit


def test_default_outfit_matches_classic_start():
    ledger = seed_resources(OutfitConfig(), get_settings())
    assert ledger.snapshot() == {
        "herd": 2500,
        "crew": 12,
        "horses": 60,
        "supplies": 65,
        "morale": 55,
        "herd_condition": 60,
        "ammo": 40,
        "spare_parts": 0,
    }


def test_outfit_numbers_become_caps():
    outfit = OutfitConfig(herd_size=2000, extra_crew=2, extra_horses=10)
    ledger = seed_resources(outfit, get_settings())
    assert ledger.bounds("herd") == (0, 2000)
    assert ledger.bounds("crew") == (0, 14)
    assert ledger.bounds("horses") == (0, 70)
    assert ledger.bounds("morale") == (0, 100)


@pytest.mark.parametrize(
    "herd, crew, wage_tier, expected",
    [
        (2500, 12, "standard", 60),
        (3000, 12, "low", 51),
        (1500, 16, "standard", 85),
        (3000, 12, "high", 61),
        (2000, 12, "standard", 66),
    ],
)
def test_starting_herd_condition(herd, crew, wage_tier, expected):
    tables = get_settings().outfit
    assert starting_herd_condition(herd, crew, wage_tier, tables) == expected


def test_condition_floor_applies():
    tables = dataclasses.replace(get_settings().outfit, points_per_crew_per_thousand=10)
    assert starting_herd_condition(3000, 1, "low", tables) == tables.condition_min


def test_armament_and_wages_shape_morale():
    settings = get_settings()
    ledger = seed_resources(OutfitConfig(armament="repeaters", wage_tier="high"), settings)
    assert ledger["morale"] == 73
    assert ledger["ammo"] == 80

    ledger = seed_resources(OutfitConfig(armament="none", wage_tier="low"), settings)
    assert ledger["morale"] == 37
    assert ledger["ammo"] == 0


def test_extras_are_added_to_base():
    outfit = OutfitConfig(extra_supplies=35, spare_parts=5)
    ledger = seed_resources(outfit, get_settings())
    assert ledger["supplies"] == 100
    assert ledger["spare_parts"] == 5


@pytest.mark.parametrize(
    "outfit, fragment",
    [
        (OutfitConfig(herd_size=2750), "herd_size"),
        (OutfitConfig(extra_crew=5), "extra_crew"),
        (OutfitConfig(extra_horses=-1), "extra_horses"),
        (OutfitConfig(extra_supplies=36), "extra_supplies"),
        (OutfitConfig(spare_parts=6), "spare_parts"),
        (OutfitConfig(armament="cannon"), "armament"),
        (OutfitConfig(wage_tier="generous"), "wage tier"),
    ],
)
def test_invalid_outfits_are_rejected(outfit, fragment):
    settings = get_settings()
    assert any(fragment in error for error in validate_outfit(outfit, settings.outfit))
    with pytest.raises(OutfitError):
        seed_resources(outfit, settings)


def test_valid_outfit_has_no_errors():
    assert validate_outfit(OutfitConfig(), get_settings().outfit) == []
