#!/usr/bin/env python3
"""
Telemetry recording for the mission dashboard.

One TelemetrySample is taken per tick while the spacecraft is deployed. The
history is a bounded deque, like the body trails, so charts always show the
most recent window.
"""
from collections import deque
from dataclasses import dataclass
from typing import Deque, List

from .constants import G, SECONDS_PER_DAY, TELEMETRY_MAX_POINTS
from .data_models import MissionBodies, MissionState
from .physics import kinetic_energy, orbital_energy, potential_energy
from .vector_utils import vec_dist, vec_len, vec_sub

# Closest-approach thresholds in meters, most to least severe.
THREAT_LEVELS = (
    (5.0e8, "LOW"),
    (3.0e8, "MEDIUM"),
    (1.5e8, "HIGH"),
)


def threat_level(closest_approach: float) -> str:
    for threshold, level in THREAT_LEVELS:
        if closest_approach > threshold:
            return level
    return "CRITICAL"


@dataclass(frozen=True)
class TelemetrySample:
    mission_days: float
    distance_to_earth_km: float
    relative_velocity: float  # spacecraft vs asteroid, m/s
    delta_v_remaining: float
    kinetic_energy: float  # spacecraft, J
    potential_energy: float  # spacecraft-Earth, J
    asteroid_orbital_energy: float  # asteroid relative to Earth, J; positive means a flyby

    @property
    def total_energy(self) -> float:
        return self.kinetic_energy + self.potential_energy


class TelemetryRecorder:
    def __init__(self, max_points: int = TELEMETRY_MAX_POINTS, gravitational_constant: float = G):
        self.samples: Deque[TelemetrySample] = deque(maxlen=max_points)
        self.gravitational_constant = gravitational_constant

    def record(self, state: MissionState, bodies: MissionBodies) -> TelemetrySample:
        craft = bodies.spacecraft
        sample = TelemetrySample(
            mission_days=state.mission_time / SECONDS_PER_DAY,
            distance_to_earth_km=vec_dist(bodies.asteroid.position, bodies.earth.position) / 1000.0,
            relative_velocity=vec_len(vec_sub(craft.velocity, bodies.asteroid.velocity)),
            delta_v_remaining=craft.delta_v_remaining,
            kinetic_energy=kinetic_energy(craft),
            potential_energy=potential_energy(craft, bodies.earth, self.gravitational_constant),
            asteroid_orbital_energy=orbital_energy(bodies.asteroid, bodies.earth, self.gravitational_constant),
        )
        self.samples.append(sample)
        return sample

    def history(self) -> List[TelemetrySample]:
        return list(self.samples)

    def clear(self) -> None:
        self.samples.clear()
