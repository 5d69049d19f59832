#!/usr/bin/env python3
"""
Outcome evaluator: decides whether the mission has ended.

Checked in order:
1. Impact   - asteroid centre within earth_radius + asteroid radius of Earth's centre.
2. Time-up  - countdown reached zero; success only if the spacecraft was deployed and
              the closest approach stayed beyond the safe distance.
"""
from typing import Optional

from .data_models import MissionBodies, MissionOutcome, MissionState, OutcomeReason
from .vector_utils import vec_dist


def asteroid_impacted(bodies: MissionBodies, earth_radius: float) -> bool:
    distance = vec_dist(bodies.asteroid.position, bodies.earth.position)
    return distance < earth_radius + bodies.asteroid.radius


def evaluate_outcome(state: MissionState, bodies: MissionBodies, earth_radius: float,
                     safe_distance: float) -> Optional[MissionOutcome]:
    """Return the terminal outcome, or None while the mission continues."""
    if state.completed:
        return state.outcome

    if asteroid_impacted(bodies, earth_radius):
        return MissionOutcome(success=False, reason=OutcomeReason.IMPACT)

    if state.time_to_impact <= 0:
        if bodies.spacecraft.deployed and state.closest_approach > safe_distance:
            return MissionOutcome(success=True, reason=OutcomeReason.NONE)
        return MissionOutcome(success=False, reason=OutcomeReason.TIME_UP)

    return None
