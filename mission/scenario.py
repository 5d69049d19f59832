#!/usr/bin/env python3
"""
Initial body placement for a mission attempt.

Layout (XY plane, Earth-centred)
- Earth at the origin, at rest.
- Moon at its mean distance on +x, moving along +y.
- Asteroid on +x at the distance it covers in the full time-to-impact, offset on +y by
  the scenario's impact parameter, flying straight at Earth (-x).
- Spacecraft parked at Earth's centre until deployment. The force solver ignores it
  until it is deployed; at launch the controller moves it to Earth's surface along
  the launch heading.
"""
from .config_loader import DifficultySettings, PhysicsConstants, Scenario
from .constants import (
    ASTEROID_COLOR,
    EARTH_COLOR,
    EARTH_MASS,
    MOON_COLOR,
    MOON_DISTANCE,
    MOON_MASS,
    MOON_ORBITAL_SPEED,
    MOON_RADIUS,
    SPACECRAFT_COLOR,
    SPACECRAFT_MASS,
)
from .data_models import ASTEROID, EARTH, MOON, SPACECRAFT, Body, MissionBodies, Spacecraft


def build_bodies(difficulty: DifficultySettings, scenario: Scenario,
                 physics: PhysicsConstants) -> MissionBodies:
    """Create a fresh, unshared body set for one attempt."""
    approach_distance = difficulty.asteroid_velocity * difficulty.time_to_impact_seconds
    earth = Body(
        name=EARTH,
        mass=EARTH_MASS,
        radius=physics.earth_radius,
        position=(0.0, 0.0, 0.0),
        velocity=(0.0, 0.0, 0.0),
        color=EARTH_COLOR,
    )
    moon = Body(
        name=MOON,
        mass=MOON_MASS,
        radius=MOON_RADIUS,
        position=(MOON_DISTANCE, 0.0, 0.0),
        velocity=(0.0, MOON_ORBITAL_SPEED, 0.0),
        color=MOON_COLOR,
    )
    asteroid = Body(
        name=ASTEROID,
        mass=difficulty.asteroid_mass,
        radius=scenario.asteroid_size / 2.0,
        position=(approach_distance, scenario.impact_parameter, 0.0),
        velocity=(-difficulty.asteroid_velocity, 0.0, 0.0),
        color=ASTEROID_COLOR,
    )
    spacecraft = Spacecraft(
        name=SPACECRAFT,
        mass=SPACECRAFT_MASS,
        radius=0.0,
        position=earth.position,
        velocity=earth.velocity,
        color=SPACECRAFT_COLOR,
        delta_v_budget=difficulty.spacecraft_delta_v,
        delta_v_remaining=difficulty.spacecraft_delta_v,
    )
    return MissionBodies(earth=earth, moon=moon, asteroid=asteroid, spacecraft=spacecraft)
