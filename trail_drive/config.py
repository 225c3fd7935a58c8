"""Configuration loading utilities for the trail drive."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml


DEFAULT_SETTINGS_PATH = Path(__file__).parent / "data" / "settings.yaml"
DEFAULT_EVENTS_PATH = Path(__file__).parent / "data" / "events.yaml"


@dataclass(frozen=True)
class Pace:
    id: str
    label: str
    description: str
    miles_per_day: int
    supply_drain: int
    effects: Mapping[str, int]


@dataclass(frozen=True)
class AttritionRule:
    """If ``source`` is below ``below``, ``target`` loses ``loss`` head/hands."""

    id: str
    source: str
    below: int
    target: str
    loss_min: int
    loss_max: int
    chance: float = 1.0
    group: Optional[str] = None


@dataclass(frozen=True)
class GradeBand:
    grade: str
    min_fraction: float


@dataclass(frozen=True)
class OutfitTables:
    herd_sizes: Tuple[int, ...]
    base_crew: int
    base_horses: int
    base_supplies: int
    extra_crew_max: int
    extra_horses_max: int
    extra_supplies_max: int
    spare_parts_max: int
    armament: Mapping[str, Mapping[str, int]]
    wage_tiers: Mapping[str, Mapping[str, int]]
    condition_base: int
    reference_crew_per_thousand: float
    points_per_crew_per_thousand: float
    condition_min: int
    condition_max: int


@dataclass(frozen=True)
class Settings:
    """Typed view over the settings YAML file."""

    total_days: int
    days_per_turn: int
    total_distance: int
    start_day: int
    default_pace: str
    resource_caps: Mapping[str, int]
    paces: Tuple[Pace, ...]
    attrition: Tuple[AttritionRule, ...]
    failure_thresholds: Mapping[str, int]
    grades: Tuple[GradeBand, ...]
    failing_grade: str
    market_price: int
    early_sale_price: int
    trail_phrases: Tuple[Tuple[float, str], ...]
    final_phrase: str
    outfit: OutfitTables

    @property
    def resource_keys(self) -> Tuple[str, ...]:
        return tuple(self.resource_caps)

    def pace(self, pace_id: str) -> Pace:
        for pace in self.paces:
            if pace.id == pace_id:
                return pace
        raise ValueError(f"Unknown pace: {pace_id!r}")

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Settings":
        campaign = data["campaign"]
        caps = {key: int(entry["max"]) for key, entry in data["resources"].items()}
        paces = tuple(
            Pace(
                id=entry["id"],
                label=entry.get("label", entry["id"].title()),
                description=entry.get("description", ""),
                miles_per_day=int(entry["miles_per_day"]),
                supply_drain=int(entry.get("supply_drain", 1)),
                effects=MappingProxyType(
                    {k: int(v) for k, v in entry.get("effects", {}).items()}
                ),
            )
            for entry in data["paces"]
        )
        attrition = tuple(
            AttritionRule(
                id=entry["id"],
                source=entry["source"],
                below=int(entry["below"]),
                target=entry["target"],
                loss_min=int(entry["loss"][0]),
                loss_max=int(entry["loss"][1]),
                chance=float(entry.get("chance", 1.0)),
                group=entry.get("group"),
            )
            for entry in data.get("attrition", [])
        )
        scoring = data.get("scoring", {})
        grades = tuple(
            GradeBand(grade=entry["grade"], min_fraction=float(entry["min_fraction"]))
            for entry in scoring.get("grades", [])
        )
        phrases = tuple(
            (float(entry["below"]), str(entry["text"]))
            for entry in data.get("trail_phrases", [])
        )
        settings = Settings(
            total_days=int(campaign["total_days"]),
            days_per_turn=int(campaign["days_per_turn"]),
            total_distance=int(campaign["total_distance"]),
            start_day=int(campaign.get("start_day", 1)),
            default_pace=campaign.get("default_pace", "normal"),
            resource_caps=MappingProxyType(caps),
            paces=paces,
            attrition=attrition,
            failure_thresholds=MappingProxyType(
                {k: int(v) for k, v in data.get("failure_thresholds", {}).items()}
            ),
            grades=tuple(sorted(grades, key=lambda band: band.min_fraction, reverse=True)),
            failing_grade=scoring.get("failing_grade", "F"),
            market_price=int(scoring.get("market_price", 40)),
            early_sale_price=int(scoring.get("early_sale_price", 30)),
            trail_phrases=phrases,
            final_phrase=data.get("final_phrase", ""),
            outfit=_outfit_tables(data["outfit"]),
        )
        settings.pace(settings.default_pace)
        return settings


def _outfit_tables(data: Dict[str, Any]) -> OutfitTables:
    base = data.get("base", {})
    condition = data.get("herd_condition", {})
    return OutfitTables(
        herd_sizes=tuple(int(size) for size in data["herd_sizes"]),
        base_crew=int(base.get("crew", 12)),
        base_horses=int(base.get("horses", 60)),
        base_supplies=int(base.get("supplies", 65)),
        extra_crew_max=int(data.get("extra_crew_max", 0)),
        extra_horses_max=int(data.get("extra_horses_max", 0)),
        extra_supplies_max=int(data.get("extra_supplies_max", 0)),
        spare_parts_max=int(data.get("spare_parts_max", 0)),
        armament=MappingProxyType(
            {name: MappingProxyType(dict(values)) for name, values in data["armament"].items()}
        ),
        wage_tiers=MappingProxyType(
            {name: MappingProxyType(dict(values)) for name, values in data["wage_tiers"].items()}
        ),
        condition_base=int(condition.get("base", 60)),
        reference_crew_per_thousand=float(condition.get("reference_crew_per_thousand", 4.8)),
        points_per_crew_per_thousand=float(condition.get("points_per_crew_per_thousand", 5)),
        condition_min=int(condition.get("min", 0)),
        condition_max=int(condition.get("max", 100)),
    )


class SettingsLoader:
    """Loads and caches settings from YAML configuration files."""

    def __init__(self, path: Path | None = None) -> None:
        env_path = os.getenv("TRAIL_DRIVE_SETTINGS")
        self._path = path or (Path(env_path) if env_path else DEFAULT_SETTINGS_PATH)
        self._cache: Settings | None = None

    @property
    def path(self) -> Path:
        return self._path

    def load(self, force: bool = False) -> Settings:
        if self._cache is not None and not force:
            return self._cache
        with self._path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        self._cache = Settings.from_dict(data)
        return self._cache


def get_settings() -> Settings:
    """Convenience accessor for default settings."""

    return SettingsLoader().load()


def phrase_for(settings: Settings, progress: float) -> str:
    for below, text in settings.trail_phrases:
        if progress < below:
            return text
    return settings.final_phrase


__all__ = [
    "AttritionRule",
    "DEFAULT_EVENTS_PATH",
    "DEFAULT_SETTINGS_PATH",
    "GradeBand",
    "OutfitTables",
    "Pace",
    "Settings",
    "SettingsLoader",
    "get_settings",
    "phrase_for",
]
