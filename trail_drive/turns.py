"""Turn advancement: travel, pace costs, attrition and terminal checks."""

from __future__ import annotations

import logging
from typing import List, Optional

from .config import Settings
from .events import EventSelector
from .models import AttritionLoss, RunState, TurnReport, TurnStatus
from .rng import DeterministicRNG

logger = logging.getLogger(__name__)


class TurnEngine:
    """Advances a :class:`RunState` by one turn of ``days_per_turn`` days."""

    def __init__(self, settings: Settings, selector: EventSelector) -> None:
        self.settings = settings
        self.selector = selector

    def advance(self, rng: DeterministicRNG, state: RunState) -> TurnReport:
        settings = self.settings
        pace = settings.pace(state.pace)
        resources = state.resources

        state.turn += 1
        state.distance = min(
            state.distance + pace.miles_per_day * settings.days_per_turn,
            settings.total_distance,
        )
        state.day = min(state.day + settings.days_per_turn, settings.total_days + 1)

        resources.apply(pace.effects)
        resources.delta("supplies", -pace.supply_drain)
        losses = self.apply_attrition(rng, state)

        report = TurnReport(
            turn=state.turn,
            day=state.day,
            distance=state.distance,
            status=TurnStatus.QUIET,
            losses=losses,
        )
        terminal = self.check_terminal(state)
        if terminal is not None:
            report.status = terminal
            logger.debug("Turn %d ended the drive: %s", state.turn, terminal.value)
            return report

        event = self.selector.pick(rng, state.day, settings.total_days, state.used_event_ids)
        if event is not None:
            state.mark_used(event.id)
            state.current_event = event
            report.status = TurnStatus.EVENT
            report.event = event
        logger.debug(
            "Turn %d: day %d, %d mi, %s",
            state.turn,
            state.day,
            state.distance,
            event.id if event else "quiet",
        )
        return report

    def apply_attrition(self, rng: DeterministicRNG, state: RunState) -> List[AttritionLoss]:
        """Run each attrition rule in order against the current ledger.

        Thresholds are read before any rule applies its loss.
        """

        resources = state.resources
        levels = resources.snapshot()
        claimed: set[str] = set()
        losses: List[AttritionLoss] = []
        for rule in self.settings.attrition:
            if rule.group is not None and rule.group in claimed:
                continue
            if rule.source not in resources or levels[rule.source] >= rule.below:
                continue
            if rule.group is not None:
                claimed.add(rule.group)
            if rule.chance < 1.0 and not rng.chance(rule.chance):
                continue
            amount = rng.randint(rule.loss_min, rule.loss_max)
            applied = resources.delta(rule.target, -amount)
            if applied is None:
                continue
            losses.append(AttritionLoss(rule_id=rule.id, target=rule.target, amount=-applied))
        return losses

    def is_failed(self, state: RunState) -> bool:
        resources = state.resources
        return any(
            key in resources and resources[key] <= minimum
            for key, minimum in self.settings.failure_thresholds.items()
        )

    def check_terminal(self, state: RunState) -> Optional[TurnStatus]:
        """Failure wins over arrival; an early sale counts as arrival."""

        if self.is_failed(state):
            return TurnStatus.FAILED
        if state.distance >= self.settings.total_distance or state.early_sale:
            return TurnStatus.ARRIVED
        return None


__all__ = ["TurnEngine"]
