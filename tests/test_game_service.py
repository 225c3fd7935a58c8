"""Tests covering the high level game service orchestration."""

from __future__ import annotations

from typing import Any, Dict

import pytest

from trail_drive.events import EventCatalog
from trail_drive.models import OutfitConfig, Phase, TurnStatus
from trail_drive.outfits import OutfitError
from trail_drive.service import GameService


def single_event_catalog(choice: Dict[str, Any], phase_min: float = 0.0, phase_max: float = 1.0) -> EventCatalog:
    return EventCatalog.from_dict(
        {
            "events": [
                {
                    "id": "only_event",
                    "title": "A Fork in the Trail",
                    "text": "Something needs deciding.",
                    "phase_min": phase_min,
                    "phase_max": phase_max,
                    "weight": 1,
                    "choices": [choice, {"text": "Ignore it.", "effects": {}, "result": "Nothing happens."}],
                }
            ]
        }
    )


def build_service(catalog: EventCatalog | None = None, seed: int = 1867) -> GameService:
    """Helper that initialises a fresh :class:`GameService`."""

    return GameService(catalog=catalog, seed=seed)


def play_out(service: GameService, choice: int = 0) -> Dict[str, Any]:
    while not service.state.game_over:
        phase = service.state.phase
        if phase is Phase.TRAVELING:
            service.advance()
        elif phase is Phase.EVENT_PRESENTED:
            service.choose(choice)
        elif phase is Phase.RESULT_SHOWN:
            service.continue_trail()
    return service.view()


def test_new_service_starts_configuring():
    service = build_service()
    view = service.view()
    assert view["phase"] == "configuring"
    assert view["day"] == 1
    assert view["distance"] == 0
    assert view["pace"] == "normal"
    assert [pace["id"] for pace in view["paces"]] == ["easy", "normal", "push"]
    assert view["game_over"] is False


def test_start_seeds_ledger_and_travels():
    service = build_service()
    state = service.start(OutfitConfig(herd_size=3000, wage_tier="high"))
    assert state.phase is Phase.TRAVELING
    assert state.resources["herd"] == 3000
    assert state.resources["morale"] == 70
    assert state.starting_resources["herd"] == 3000


def test_invalid_outfit_leaves_service_configuring():
    service = build_service()
    with pytest.raises(OutfitError):
        service.start(OutfitConfig(herd_size=42))
    assert service.state.phase is Phase.CONFIGURING


@pytest.mark.parametrize(
    "action",
    [
        lambda service: service.advance(),
        lambda service: service.choose(0),
        lambda service: service.continue_trail(),
    ],
)
def test_actions_rejected_before_start(action):
    service = build_service()
    with pytest.raises(GameService.InvalidPhaseError):
        action(service)


def test_start_twice_is_rejected():
    service = build_service()
    service.start()
    with pytest.raises(GameService.InvalidPhaseError):
        service.start()


def test_set_pace_validates_and_respects_phase():
    service = build_service(single_event_catalog({"text": "Go.", "effects": {}, "result": "Gone."}))
    service.set_pace("push")
    assert service.state.pace == "push"
    with pytest.raises(ValueError):
        service.set_pace("gallop")

    service.start()
    service.set_pace("easy")
    service.advance()
    assert service.state.phase is Phase.EVENT_PRESENTED
    with pytest.raises(GameService.InvalidPhaseError):
        service.set_pace("normal")
    assert service.state.pace == "easy"


def test_event_choice_and_continue_flow():
    catalog = single_event_catalog({"text": "Trade for flour.", "effects": {"supplies": 10, "morale": -2}, "result": "Flour."})
    service = build_service(catalog)
    service.start()

    report = service.advance()
    assert report.status is TurnStatus.EVENT
    view = service.view()
    assert view["phase"] == "event_presented"
    assert view["event"]["id"] == "only_event"
    assert view["event"]["choices"] == ["Trade for flour.", "Ignore it."]

    with pytest.raises(GameService.InvalidPhaseError):
        service.advance()

    outcome = service.choose(0)
    assert outcome.result == "Flour."
    view = service.view()
    assert view["phase"] == "result_shown"
    assert view["result_text"] == "Flour."
    assert view["resources"]["supplies"] == 70
    assert view["resources"]["morale"] == 52
    assert view["decisions"] == [
        {"event_id": "only_event", "event": "A Fork in the Trail", "choice": "Trade for flour.", "day": 6}
    ]

    with pytest.raises(GameService.InvalidPhaseError):
        service.choose(0)

    assert service.continue_trail() is Phase.TRAVELING
    view = service.view()
    assert view["event"] is None
    assert view["result_text"] == ""


@pytest.mark.parametrize("index", [-1, 2, 10])
def test_choice_index_must_exist(index):
    service = build_service(single_event_catalog({"text": "Go.", "effects": {}, "result": "Gone."}))
    service.start()
    service.advance()
    with pytest.raises(GameService.InvalidChoiceError):
        service.choose(index)
    assert service.state.phase is Phase.EVENT_PRESENTED
    assert service.state.decisions == []


def test_quiet_turn_stays_traveling():
    catalog = single_event_catalog({"text": "Go.", "effects": {}, "result": "Gone."}, phase_min=0.9, phase_max=1.0)
    service = build_service(catalog)
    service.start()
    report = service.advance()
    assert report.status is TurnStatus.QUIET
    assert service.state.phase is Phase.TRAVELING
    assert service.view()["event"] is None


def test_early_sale_ends_drive_after_continue():
    catalog = single_event_catalog(
        {"text": "Take the deal.", "effects": {"morale": 8}, "result": "Sold.", "early_end": True}
    )
    service = build_service(catalog)
    service.start()
    service.advance()
    service.choose(0)

    assert service.state.early_sale is True
    assert service.state.phase is Phase.RESULT_SHOWN

    assert service.continue_trail() is Phase.TERMINAL
    view = service.view()
    assert view["game_over"] is True
    assert view["survived"] is True
    assert view["summary"]["headline"] == "SOLD ON THE TRAIL"
    assert view["summary"]["price_per_head"] == 30
    assert view["grade"] == "A"


def test_catastrophic_outcome_fails_on_continue():
    catalog = single_event_catalog({"text": "Ford it blind.", "effects": {"crew": -10}, "result": "The river wins."})
    service = build_service(catalog)
    service.start()
    service.advance()
    service.choose(0)

    assert service.continue_trail() is Phase.TERMINAL
    view = service.view()
    assert view["survived"] is False
    assert view["grade"] == "F"
    assert view["summary"]["headline"] == "THE TRAIL WINS"
    assert view["summary"]["revenue"] == 0


@pytest.mark.parametrize("key, value", [("crew", 2), ("herd", 100), ("horses", 5)])
def test_failure_threshold_ends_drive_with_distance_remaining(key, value):
    service = build_service()
    service.start()
    service.state.resources.set(key, value)

    report = service.advance()

    assert report.status is TurnStatus.FAILED
    assert service.state.distance < service.settings.total_distance
    assert service.state.phase is Phase.TERMINAL
    assert service.state.survived is False


def test_failure_beats_arrival_on_final_stretch():
    service = build_service()
    service.start()
    service.state.distance = 790
    service.state.resources.set("crew", 2)

    report = service.advance()

    assert service.state.distance == 800
    assert report.status is TurnStatus.FAILED
    assert service.view()["survived"] is False


def test_arrival_at_abilene():
    service = build_service()
    service.start()
    service.state.distance = 790

    report = service.advance()

    assert report.status is TurnStatus.ARRIVED
    view = service.view()
    assert view["phase"] == "terminal"
    assert view["survived"] is True
    assert view["progress_percent"] == 100
    assert view["summary"]["headline"] == "ABILENE"
    assert view["summary"]["revenue"] == 2500 * 40
    assert view["grade"] == "A"


def test_terminal_rejects_further_actions():
    service = build_service()
    service.start()
    service.state.distance = 790
    service.advance()
    with pytest.raises(GameService.InvalidPhaseError):
        service.advance()
    with pytest.raises(GameService.InvalidPhaseError):
        service.set_pace("push")


def test_restart_resets_state():
    service = build_service()
    service.start()
    play_out(service)

    state = service.restart()

    assert state.phase is Phase.CONFIGURING
    assert state.turn == 0
    assert state.distance == 0
    assert state.decisions == []
    assert state.used_event_ids == frozenset()
    assert not state.game_over
    service.start()
    assert service.state.phase is Phase.TRAVELING


def test_view_is_a_copy():
    service = build_service()
    service.start()
    view = service.view()
    view["resources"]["herd"] = 0
    view["decisions"].append("tampered")
    assert service.state.resources["herd"] == 2500
    assert service.state.decisions == []


def test_full_drive_terminates_and_invariants_hold():
    service = build_service(seed=4242)
    service.start()
    view = play_out(service)

    assert view["phase"] == "terminal"
    assert view["day"] <= service.settings.total_days
    assert view["distance"] <= service.settings.total_distance
    for key, value in service.state.resources.snapshot().items():
        low, high = service.state.resources.bounds(key)
        assert low <= value <= high
    assert view["decisions"] == service.view()["decisions"]


def test_same_seed_reproduces_drive():
    first = play_out(_started(build_service(seed=77)))
    second = play_out(_started(build_service(seed=77)))
    assert first == second


def _started(service: GameService) -> GameService:
    service.start()
    return service
