"""Batch drive simulator for tuning pace, attrition and event weights."""

from __future__ import annotations

import argparse
import json
import logging
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..config import Settings, get_settings
from ..events import EventCatalog
from ..models import OutfitConfig, Phase
from ..rng import DeterministicRNG
from ..service import GameService

logger = logging.getLogger(__name__)

CHOICE_POLICIES = ("first", "random")


@dataclass
class SimulationConfig:
    runs: int = 100
    seed: int = 1867
    pace: str = "normal"
    policy: str = "random"
    outfit: OutfitConfig = field(default_factory=OutfitConfig)

    @classmethod
    def from_mapping(cls, payload: Dict[str, Any]) -> "SimulationConfig":
        return cls(
            runs=int(payload.get("runs", 100)),
            seed=int(payload.get("seed", 1867)),
            pace=payload.get("pace", "normal"),
            policy=payload.get("policy", "random"),
            outfit=OutfitConfig(**payload.get("outfit", {})),
        )


def play_drive(service: GameService, pace: str, policy: str, policy_rng: DeterministicRNG) -> None:
    """Drive ``service`` from configuring to terminal without a player."""

    service.set_pace(pace)
    while service.state.phase is not Phase.TERMINAL:
        phase = service.state.phase
        if phase is Phase.TRAVELING:
            service.advance()
        elif phase is Phase.EVENT_PRESENTED:
            event = service.state.current_event
            assert event is not None
            if policy == "first":
                index = 0
            else:
                index = policy_rng.randint(0, len(event.choices) - 1)
            service.choose(index)
        elif phase is Phase.RESULT_SHOWN:
            service.continue_trail()
        else:  # pragma: no cover - configuring is handled by the caller
            raise RuntimeError(f"Unexpected phase {phase}")


def run_simulation(
    config: SimulationConfig,
    settings: Settings | None = None,
    catalog: EventCatalog | None = None,
    output_dir: Optional[Path] = None,
) -> Dict[str, Any]:
    """Play ``config.runs`` seeded drives and summarise the results."""

    if config.policy not in CHOICE_POLICIES:
        raise ValueError(f"Unknown choice policy: {config.policy!r}")
    settings = settings or get_settings()
    catalog = catalog or EventCatalog.load(resource_keys=settings.resource_keys)
    policy_rng = DeterministicRNG(config.seed ^ 0x5EED)

    grades: Counter[str] = Counter()
    events: Counter[str] = Counter()
    survived = early_sales = 0
    delivered_total = 0
    for run in range(config.runs):
        service = GameService(settings=settings, catalog=catalog, seed=config.seed + run)
        service.start(config.outfit)
        play_drive(service, config.pace, config.policy, policy_rng)
        summary = service.view()["summary"]
        grades[summary["grade"]] += 1
        for decision in service.state.decisions:
            events[decision.event_id] += 1
        if summary["survived"]:
            survived += 1
            delivered_total += summary["delivered"]
        if summary["early_sale"]:
            early_sales += 1

    runs = max(config.runs, 1)
    result: Dict[str, Any] = {
        "config": {
            "runs": config.runs,
            "seed": config.seed,
            "pace": config.pace,
            "policy": config.policy,
            "outfit": asdict(config.outfit),
        },
        "survival_rate": survived / runs,
        "early_sale_rate": early_sales / runs,
        "mean_delivered": delivered_total / survived if survived else 0.0,
        "grades": dict(sorted(grades.items())),
        "event_counts": dict(events.most_common()),
    }
    logger.info(
        "Simulated %d drives at %s pace: %.0f%% survived",
        config.runs,
        config.pace,
        result["survival_rate"] * 100,
    )

    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        output_path = output_dir / f"drive_simulation_{timestamp}.json"
        output_path.write_text(json.dumps(result, indent=2), encoding="utf-8")
        result["output_path"] = str(output_path)
    return result


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate many seeded cattle drives.")
    parser.add_argument("--config", type=Path, help="JSON file describing the scenario.")
    parser.add_argument("--runs", type=int, help="Number of drives (overrides config).")
    parser.add_argument("--seed", type=int, help="Base seed (overrides config).")
    parser.add_argument("--pace", help="Pace id for every turn (overrides config).")
    parser.add_argument("--policy", choices=CHOICE_POLICIES, help="How choices are made.")
    parser.add_argument("--output-dir", type=Path, help="Write the JSON report here.")
    return parser.parse_args(argv)


def main(argv=None) -> int:  # pragma: no cover - CLI entry point
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    payload = json.loads(args.config.read_text()) if args.config else {}
    config = SimulationConfig.from_mapping(payload)
    if args.runs is not None:
        config.runs = args.runs
    if args.seed is not None:
        config.seed = args.seed
    if args.pace:
        config.pace = args.pace
    if args.policy:
        config.policy = args.policy
    result = run_simulation(config, output_dir=args.output_dir)
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
