"""Core data models for the trail drive."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from .ledger import ResourceLedger


class Phase(str, Enum):
    CONFIGURING = "configuring"
    TRAVELING = "traveling"
    EVENT_PRESENTED = "event_presented"
    RESULT_SHOWN = "result_shown"
    TERMINAL = "terminal"


class TurnStatus(str, Enum):
    QUIET = "quiet"
    EVENT = "event"
    FAILED = "failed"
    ARRIVED = "arrived"


@dataclass(frozen=True)
class Outcome:
    weight: float
    effects: Mapping[str, int]
    result: str
    early_end: bool = False


@dataclass(frozen=True)
class Choice:
    """A player option: either a fixed effect/result or weighted outcomes."""

    text: str
    effects: Mapping[str, int] = field(default_factory=dict)
    result: str = ""
    outcomes: Tuple[Outcome, ...] = ()
    early_end: bool = False

    @property
    def is_branching(self) -> bool:
        return bool(self.outcomes)


@dataclass(frozen=True)
class TrailEvent:
    id: str
    title: str
    text: str
    phase_min: float
    phase_max: float
    choices: Tuple[Choice, ...]
    weight: float = 1

    def covers(self, progress: float) -> bool:
        return self.phase_min <= progress <= self.phase_max


@dataclass(frozen=True)
class ResolvedOutcome:
    effects: Mapping[str, int]
    result: str
    early_end: bool = False
    applied: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class Decision:
    event_id: str
    event_title: str
    choice: str
    day: int


@dataclass(frozen=True)
class OutfitConfig:
    herd_size: int = 2500
    extra_crew: int = 0
    extra_horses: int = 0
    extra_supplies: int = 0
    armament: str = "rifles"
    spare_parts: int = 0
    wage_tier: str = "standard"


@dataclass
class AttritionLoss:
    rule_id: str
    target: str
    amount: int


@dataclass
class TurnReport:
    turn: int
    day: int
    distance: int
    status: TurnStatus
    event: Optional[TrailEvent] = None
    losses: List[AttritionLoss] = field(default_factory=list)


@dataclass
class RunState:
    """Everything that describes one drive in progress."""

    resources: ResourceLedger
    day: int = 1
    turn: int = 0
    distance: int = 0
    phase: Phase = Phase.CONFIGURING
    pace: str = "normal"
    current_event: Optional[TrailEvent] = None
    result_text: str = ""
    decisions: List[Decision] = field(default_factory=list)
    used_event_ids: FrozenSet[str] = frozenset()
    game_over: bool = False
    survived: bool = False
    early_sale: bool = False
    starting_resources: Dict[str, int] = field(default_factory=dict)

    def mark_used(self, event_id: str) -> None:
        self.used_event_ids = self.used_event_ids | {event_id}

    def finish(self, survived: bool) -> None:
        self.game_over = True
        self.survived = survived
        self.phase = Phase.TERMINAL


__all__ = [
    "AttritionLoss",
    "Choice",
    "Decision",
    "Outcome",
    "OutfitConfig",
    "Phase",
    "ResolvedOutcome",
    "RunState",
    "TrailEvent",
    "TurnReport",
    "TurnStatus",
]
