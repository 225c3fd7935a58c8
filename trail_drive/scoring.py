"""End-of-drive grading and summary."""

from __future__ import annotations

from typing import Any, Dict

from .config import Settings, phrase_for
from .models import RunState


def delivered_fraction(state: RunState) -> float:
    started = state.starting_resources.get("herd") or state.resources.bounds("herd")[1]
    if not started:
        return 0.0
    return state.resources["herd"] / started


def final_grade(state: RunState, settings: Settings) -> str:
    if not state.survived:
        return settings.failing_grade
    fraction = delivered_fraction(state)
    for band in settings.grades:
        if fraction >= band.min_fraction:
            return band.grade
    return settings.failing_grade


def headline(state: RunState) -> str:
    if not state.survived:
        return "THE TRAIL WINS"
    if state.early_sale:
        return "SOLD ON THE TRAIL"
    return "ABILENE"


def drive_summary(state: RunState, settings: Settings) -> Dict[str, Any]:
    """Numbers for the end screen."""

    herd = state.resources["herd"]
    started = state.starting_resources.get("herd", herd)
    crew_started = state.starting_resources.get("crew", state.resources["crew"])
    if not state.survived:
        price = 0
    elif state.early_sale:
        price = settings.early_sale_price
    else:
        price = settings.market_price
    return {
        "headline": headline(state),
        "survived": state.survived,
        "early_sale": state.early_sale,
        "started": started,
        "delivered": herd if state.survived else 0,
        "lost": started - herd if state.survived else started,
        "percent_delivered": round(delivered_fraction(state) * 100),
        "crew_lost": crew_started - state.resources["crew"],
        "price_per_head": price,
        "revenue": herd * price,
        "grade": final_grade(state, settings),
        "days": min(state.day, settings.total_days),
        "decisions": len(state.decisions),
    }


def trail_phrase(state: RunState, settings: Settings) -> str:
    return phrase_for(settings, state.day / settings.total_days)


__all__ = ["delivered_fraction", "drive_summary", "final_grade", "headline", "trail_phrase"]
