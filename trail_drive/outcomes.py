"""Resolution of a chosen option into a concrete effect."""

from __future__ import annotations

from .ledger import ResourceLedger
from .models import Choice, ResolvedOutcome
from .rng import DeterministicRNG, weighted_pick


class OutcomeResolver:
    """Turns a :class:`Choice` into a :class:`ResolvedOutcome`.

    Branching choices are drawn fresh on every call, so the same option can
    play out differently on another drive.
    """

    def resolve(self, rng: DeterministicRNG, choice: Choice) -> ResolvedOutcome:
        if not choice.is_branching:
            return ResolvedOutcome(
                effects=choice.effects,
                result=choice.result,
                early_end=choice.early_end,
            )
        outcome = weighted_pick(rng, choice.outcomes)
        return ResolvedOutcome(
            effects=outcome.effects,
            result=outcome.result,
            early_end=choice.early_end or outcome.early_end,
        )

    def apply(
        self, rng: DeterministicRNG, choice: Choice, ledger: ResourceLedger
    ) -> ResolvedOutcome:
        """Resolve ``choice`` and apply its effects to ``ledger``."""

        resolved = self.resolve(rng, choice)
        applied = ledger.apply(resolved.effects)
        return ResolvedOutcome(
            effects=resolved.effects,
            result=resolved.result,
            early_end=resolved.early_end,
            applied=applied,
        )


__all__ = ["OutcomeResolver"]
