#!/usr/bin/env python3
"""
Mission clock: converts wall-clock frame time into simulated mission time.
"""
from .data_models import MissionState
from .errors import InvalidTimeStep


class MissionClock:
    """Advances mission time and the impact countdown at a difficulty-scaled rate."""

    def __init__(self, time_scale: float):
        self.time_scale = float(time_scale)

    def advance(self, state: MissionState, dt_wall: float) -> float:
        """
        Advance state by dt_wall real seconds.

        time_to_impact may drop below zero here; the outcome evaluator ends the
        mission on the same tick.

        Returns:
            The scaled (simulated) time delta in seconds.
        """
        if not dt_wall > 0:
            raise InvalidTimeStep(f"Tick time step must be positive, got {dt_wall}")
        scaled = dt_wall * self.time_scale
        state.mission_time += scaled
        state.time_to_impact -= scaled
        return scaled
