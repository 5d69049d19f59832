#!/usr/bin/env python3
"""
Scoring engine.

    distance  = 0                                  if closest/safe < 2
              = base + (max - base) * min((ratio - 2) / 8, 1)   otherwise
    fuel      = remaining / budget * max_fuel_bonus
    time_mult = 1 + time_to_impact / total_time_to_impact
    score     = floor((distance + fuel) * time_mult * difficulty_mult)

Recomputed every tick once the spacecraft is deployed so the host can show a live score.
"""
import math
from typing import Tuple

from .config_loader import ScoringConstants
from .data_models import MissionState, Spacecraft
from .vector_utils import clamp

MIN_DISTANCE_RATIO = 2.0
MAX_DISTANCE_RATIO = 10.0


def distance_score(closest_approach: float, scoring: ScoringConstants) -> float:
    if math.isinf(closest_approach):
        return 0.0
    ratio = closest_approach / scoring.safe_distance
    if ratio < MIN_DISTANCE_RATIO:
        return 0.0
    t = clamp((ratio - MIN_DISTANCE_RATIO) / (MAX_DISTANCE_RATIO - MIN_DISTANCE_RATIO), 0.0, 1.0)
    return scoring.base_score + (scoring.max_score - scoring.base_score) * t


def fuel_bonus(spacecraft: Spacecraft, scoring: ScoringConstants) -> float:
    if spacecraft.delta_v_budget <= 0:
        return 0.0
    return spacecraft.delta_v_remaining / spacecraft.delta_v_budget * scoring.max_fuel_bonus


def compute_score(state: MissionState, spacecraft: Spacecraft, scoring: ScoringConstants,
                  difficulty_multiplier: float) -> Tuple[int, float]:
    """Return (score, multiplier) for the current state."""
    time_multiplier = 1.0 + state.time_to_impact / state.total_time_to_impact
    multiplier = time_multiplier * difficulty_multiplier
    raw = distance_score(state.closest_approach, scoring) + fuel_bonus(spacecraft, scoring)
    return int(math.floor(raw * time_multiplier * difficulty_multiplier)), multiplier
