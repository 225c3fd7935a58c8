"""High-level game service orchestrating a drive."""
from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional

from .config import Settings, get_settings
from .events import EventCatalog, EventSelector
from .ledger import ResourceLedger
from .models import (
    Decision,
    OutfitConfig,
    Phase,
    ResolvedOutcome,
    RunState,
    TurnReport,
    TurnStatus,
)
from .outcomes import OutcomeResolver
from .outfits import seed_resources
from .rng import DeterministicRNG
from .scoring import drive_summary, final_grade, trail_phrase
from .turns import TurnEngine


logger = logging.getLogger(__name__)


class GameService:
    """Owns the run state and routes player actions through the engine.

    Phases run configuring -> traveling -> event_presented -> result_shown
    and back to traveling, until a terminal check ends the drive.
    """

    class InvalidPhaseError(RuntimeError):
        """Raised when an action is issued in a phase that does not accept it."""

    class InvalidChoiceError(ValueError):
        """Raised when a choice index does not exist on the current event."""

    def __init__(
        self,
        settings: Settings | None = None,
        catalog: EventCatalog | None = None,
        seed: Optional[int] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.catalog = catalog or EventCatalog.load(resource_keys=self.settings.resource_keys)
        if seed is None:
            seed = random.SystemRandom().randrange(1 << 32)
        self._rng = DeterministicRNG(seed)
        self.selector = EventSelector(self.catalog)
        self.engine = TurnEngine(self.settings, self.selector)
        self.resolver = OutcomeResolver()
        self.state = self._fresh_state()

    @property
    def seed(self) -> int:
        return self._rng.seed

    def _fresh_state(self) -> RunState:
        return RunState(
            resources=ResourceLedger(self.settings.resource_caps),
            day=self.settings.start_day,
            pace=self.settings.default_pace,
        )

    def _require(self, *phases: Phase) -> None:
        if self.state.phase not in phases:
            allowed = ", ".join(phase.value for phase in phases)
            raise GameService.InvalidPhaseError(
                f"Action requires phase {allowed}; drive is {self.state.phase.value}"
            )

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------
    def start(self, outfit: OutfitConfig | None = None) -> RunState:
        """Seed the ledger from ``outfit`` and hit the trail."""

        self._require(Phase.CONFIGURING)
        outfit = outfit or OutfitConfig()
        resources = seed_resources(outfit, self.settings)
        state = self.state
        state.resources = resources
        state.starting_resources = resources.snapshot()
        state.phase = Phase.TRAVELING
        logger.info(
            "Drive started (seed %s): %d head, %d hands, %d horses",
            self.seed,
            resources["herd"],
            resources["crew"],
            resources["horses"],
        )
        return state

    def set_pace(self, pace_id: str) -> None:
        self._require(Phase.CONFIGURING, Phase.TRAVELING)
        self.settings.pace(pace_id)
        self.state.pace = pace_id

    def advance(self) -> TurnReport:
        self._require(Phase.TRAVELING)
        report = self.engine.advance(self._rng, self.state)
        if report.status is TurnStatus.EVENT:
            self.state.phase = Phase.EVENT_PRESENTED
        elif report.status is TurnStatus.FAILED:
            self._finish(survived=False)
        elif report.status is TurnStatus.ARRIVED:
            self._finish(survived=True)
        return report

    def choose(self, index: int) -> ResolvedOutcome:
        self._require(Phase.EVENT_PRESENTED)
        state = self.state
        event = state.current_event
        assert event is not None
        if not 0 <= index < len(event.choices):
            raise GameService.InvalidChoiceError(
                f"Event {event.id} has no choice {index}"
            )
        choice = event.choices[index]
        outcome = self.resolver.apply(self._rng, choice, state.resources)
        state.decisions.append(
            Decision(event_id=event.id, event_title=event.title, choice=choice.text, day=state.day)
        )
        if outcome.early_end:
            state.early_sale = True
        state.result_text = outcome.result
        state.phase = Phase.RESULT_SHOWN
        logger.debug("Event %s choice %d applied %s", event.id, index, outcome.applied)
        return outcome

    def continue_trail(self) -> Phase:
        self._require(Phase.RESULT_SHOWN)
        state = self.state
        state.current_event = None
        state.result_text = ""
        terminal = self.engine.check_terminal(state)
        if terminal is TurnStatus.FAILED:
            self._finish(survived=False)
        elif terminal is TurnStatus.ARRIVED:
            self._finish(survived=True)
        else:
            state.phase = Phase.TRAVELING
        return state.phase

    def restart(self) -> RunState:
        self.state = self._fresh_state()
        return self.state

    def _finish(self, survived: bool) -> None:
        self.state.finish(survived)
        logger.info(
            "Drive over on day %d: %s, %d head, grade %s",
            self.state.day,
            "survived" if survived else "failed",
            self.state.resources["herd"],
            final_grade(self.state, self.settings),
        )

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------
    def view(self) -> Dict[str, Any]:
        """Snapshot of everything a renderer needs; mutating it has no effect."""

        state = self.state
        settings = self.settings
        event = state.current_event
        data: Dict[str, Any] = {
            "phase": state.phase.value,
            "day": min(state.day, settings.total_days),
            "turn": state.turn,
            "distance": state.distance,
            "total_distance": settings.total_distance,
            "progress_percent": min(state.distance / settings.total_distance * 100, 100),
            "pace": state.pace,
            "paces": [
                {"id": pace.id, "label": pace.label, "description": pace.description}
                for pace in settings.paces
            ],
            "resources": state.resources.snapshot(),
            "phrase": trail_phrase(state, settings),
            "event": None,
            "result_text": state.result_text,
            "decisions": [
                {
                    "event_id": decision.event_id,
                    "event": decision.event_title,
                    "choice": decision.choice,
                    "day": decision.day,
                }
                for decision in state.decisions
            ],
            "game_over": state.game_over,
            "survived": state.survived,
            "early_sale": state.early_sale,
        }
        if event is not None:
            data["event"] = {
                "id": event.id,
                "title": event.title,
                "text": event.text,
                "choices": [choice.text for choice in event.choices],
            }
        if state.phase is Phase.TERMINAL:
            summary = drive_summary(state, settings)
            data["grade"] = summary["grade"]
            data["summary"] = summary
        return data


__all__ = ["GameService"]
