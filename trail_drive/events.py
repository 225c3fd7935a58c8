"""Trail event catalog and next-event selection."""

from __future__ import annotations

import logging
from numbers import Real
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

import yaml

from .config import DEFAULT_EVENTS_PATH
from .models import Choice, Outcome, TrailEvent
from .rng import DeterministicRNG, weighted_pick

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised when event data is structurally unusable."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid event catalog:\n" + "\n".join(self.errors))


def _positive_weight(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and value > 0


def _check_effects(
    effects: Any,
    context: str,
    resource_keys: Optional[Iterable[str]],
    errors: List[str],
    warnings: List[str],
) -> None:
    if effects is None:
        return
    if not isinstance(effects, dict):
        errors.append(f"{context}.effects must be a mapping")
        return
    known = set(resource_keys) if resource_keys is not None else None
    for key, amount in effects.items():
        if not isinstance(amount, int) or isinstance(amount, bool):
            errors.append(f"{context}.effects.{key} must be an integer")
        if known is not None and key not in known:
            warnings.append(f"{context}.effects.{key} is not a tracked resource and will be ignored")


def validate_catalog_data(
    data: Any, resource_keys: Optional[Iterable[str]] = None
) -> Tuple[List[str], List[str]]:
    """Return ``(errors, warnings)`` for raw catalog data."""

    errors: List[str] = []
    warnings: List[str] = []
    root = data.get("events") if isinstance(data, dict) else None
    if not isinstance(root, list) or not root:
        return ["top-level 'events' must be a non-empty list"], warnings

    seen: set[str] = set()
    for idx, event in enumerate(root):
        if not isinstance(event, dict):
            errors.append(f"events[{idx}] must be a mapping")
            continue
        event_id = event.get("id")
        context = f"events[{idx}]" if not event_id else f"events.{event_id}"
        if not isinstance(event_id, str) or not event_id.strip():
            errors.append(f"{context}: missing id")
        elif event_id in seen:
            errors.append(f"{context}: duplicate id")
        else:
            seen.add(event_id)
        for key in ("title", "text"):
            if not isinstance(event.get(key), str) or not event[key].strip():
                errors.append(f"{context}: '{key}' must be a non-empty string")

        phase_min = event.get("phase_min", 0)
        phase_max = event.get("phase_max", 1)
        if not isinstance(phase_min, Real) or not isinstance(phase_max, Real):
            errors.append(f"{context}: phase bounds must be numbers")
        elif not (0 <= phase_min <= phase_max <= 1):
            errors.append(
                f"{context}: phase window [{phase_min}, {phase_max}] must satisfy 0 <= min <= max <= 1"
            )
        if not _positive_weight(event.get("weight", 1)):
            errors.append(f"{context}: weight must be a positive number")

        choices = event.get("choices")
        if not isinstance(choices, list) or not choices:
            errors.append(f"{context}: must offer at least one choice")
            continue
        for c_idx, choice in enumerate(choices):
            c_context = f"{context}.choices[{c_idx}]"
            if not isinstance(choice, dict):
                errors.append(f"{c_context} must be a mapping")
                continue
            if not isinstance(choice.get("text"), str) or not choice["text"].strip():
                errors.append(f"{c_context}: 'text' must be a non-empty string")
            if "outcomes" in choice:
                outcomes = choice["outcomes"]
                if not isinstance(outcomes, list) or not outcomes:
                    errors.append(f"{c_context}: outcomes must be a non-empty list")
                    continue
                for o_idx, outcome in enumerate(outcomes):
                    o_context = f"{c_context}.outcomes[{o_idx}]"
                    if not isinstance(outcome, dict):
                        errors.append(f"{o_context} must be a mapping")
                        continue
                    if not _positive_weight(outcome.get("weight", 1)):
                        errors.append(f"{o_context}: weight must be a positive number")
                    if not isinstance(outcome.get("result"), str):
                        errors.append(f"{o_context}: 'result' must be a string")
                    _check_effects(outcome.get("effects"), o_context, resource_keys, errors, warnings)
            elif "result" in choice:
                if not isinstance(choice["result"], str):
                    errors.append(f"{c_context}: 'result' must be a string")
                _check_effects(choice.get("effects"), c_context, resource_keys, errors, warnings)
            else:
                errors.append(f"{c_context}: needs either 'outcomes' or a 'result'")
    return errors, warnings


def _freeze(effects: Optional[Dict[str, int]]):
    return MappingProxyType(dict(effects or {}))


def _build_choice(data: Dict[str, Any]) -> Choice:
    outcomes = tuple(
        Outcome(
            weight=entry.get("weight", 1),
            effects=_freeze(entry.get("effects")),
            result=entry.get("result", ""),
            early_end=bool(entry.get("early_end", False)),
        )
        for entry in data.get("outcomes", [])
    )
    return Choice(
        text=data["text"],
        effects=_freeze(data.get("effects")),
        result=data.get("result", ""),
        outcomes=outcomes,
        early_end=bool(data.get("early_end", False)),
    )


def _build_event(data: Dict[str, Any]) -> TrailEvent:
    return TrailEvent(
        id=data["id"],
        title=data["title"],
        text=data["text"],
        phase_min=float(data.get("phase_min", 0)),
        phase_max=float(data.get("phase_max", 1)),
        weight=data.get("weight", 1),
        choices=tuple(_build_choice(choice) for choice in data["choices"]),
    )


class EventCatalog:
    """Immutable, validated collection of trail events."""

    def __init__(self, events: Iterable[TrailEvent]) -> None:
        self._events: Tuple[TrailEvent, ...] = tuple(events)
        self._by_id = {event.id: event for event in self._events}

    @classmethod
    def from_dict(
        cls, data: Any, resource_keys: Optional[Iterable[str]] = None
    ) -> "EventCatalog":
        errors, warnings = validate_catalog_data(data, resource_keys)
        if errors:
            raise CatalogError(errors)
        for message in warnings:
            logger.warning("Event catalog: %s", message)
        return cls(_build_event(entry) for entry in data["events"])

    @classmethod
    def load(
        cls, path: Path | None = None, resource_keys: Optional[Iterable[str]] = None
    ) -> "EventCatalog":
        path = path or DEFAULT_EVENTS_PATH
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        catalog = cls.from_dict(data, resource_keys)
        logger.info("Loaded %d trail events from %s", len(catalog), path)
        return catalog

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[TrailEvent]:
        return iter(self._events)

    def get(self, event_id: str) -> Optional[TrailEvent]:
        return self._by_id.get(event_id)


class EventSelector:
    """Chooses the next event for a given point on the trail."""

    def __init__(self, catalog: EventCatalog) -> None:
        self._catalog = catalog

    def eligible(self, progress: float, used_ids: FrozenSet[str] = frozenset()) -> List[TrailEvent]:
        """Events whose window covers ``progress``, unused ones if any remain."""

        in_window = [event for event in self._catalog if event.covers(progress)]
        fresh = [event for event in in_window if event.id not in used_ids]
        return fresh or in_window

    def pick(
        self,
        rng: DeterministicRNG,
        day: int,
        total_days: int,
        used_ids: FrozenSet[str] = frozenset(),
    ) -> Optional[TrailEvent]:
        progress = day / total_days
        pool = self.eligible(progress, used_ids)
        if not pool:
            logger.debug("Quiet stretch at progress %.3f", progress)
            return None
        return weighted_pick(rng, pool)


__all__ = ["CatalogError", "EventCatalog", "EventSelector", "validate_catalog_data"]
