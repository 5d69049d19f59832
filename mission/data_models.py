#!/usr/bin/env python3
"""
Data models for the Asteroid Defense simulator.

This module defines the Body dataclasses shared between physics, mission logic
and rendering, plus the MissionState record that the controller mutates each tick.

Units and usage
- position is in meters [m], velocity in meters per second [m/s], radius in meters [m], mass in kg.
- trail stores past positions to render motion paths; it is only read by the renderer.
- Access to Body instances is coordinated by MissionController using a lock.
"""
import math
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, List, Optional, Set, Tuple

from .vector_utils import Vec3, ZERO

EARTH = "earth"
MOON = "moon"
ASTEROID = "asteroid"
SPACECRAFT = "spacecraft"


@dataclass
class Body:
    """
    Represents a physical body in the simulation.

    Fields:
    - name: Identifier for the body
    - mass: Mass in kilograms
    - radius: Physical radius in meters (used for the impact check)
    - position: 3D position (x, y, z) in meters
    - velocity: 3D velocity (vx, vy, vz) in meters/second
    - color: RGB tuple used for rendering
    - trail: Deque of past positions for drawing motion trails
    """
    name: str
    mass: float
    radius: float
    position: Vec3 = ZERO
    velocity: Vec3 = ZERO
    color: Tuple[int, int, int] = (200, 200, 255)
    trail: Deque[Vec3] = field(default_factory=lambda: deque(maxlen=200), repr=False, compare=False)

    def add_trail_point(self) -> None:
        """Append the current position to the trail."""
        self.trail.append(self.position)


class Strategy(Enum):
    KINETIC = "kinetic"
    GRAVITY = "gravity"
    NUCLEAR = "nuclear"


@dataclass
class Spacecraft(Body):
    """Deflection spacecraft; inactive in the force solver until deployed."""
    deployed: bool = False
    delta_v_budget: float = 0.0
    delta_v_remaining: float = 0.0
    strategy: Strategy = Strategy.KINETIC
    fuel_percent: float = 100.0

    def update_fuel(self) -> None:
        if self.delta_v_budget > 0:
            self.fuel_percent = self.delta_v_remaining / self.delta_v_budget * 100.0
        else:
            self.fuel_percent = 0.0


@dataclass
class MissionBodies:
    """The four bodies of one mission attempt."""
    earth: Body
    moon: Body
    asteroid: Body
    spacecraft: Spacecraft

    def all(self) -> List[Body]:
        return [self.earth, self.moon, self.asteroid, self.spacecraft]

    def active(self) -> List[Body]:
        """Earth, Moon and asteroid always; the spacecraft only once deployed."""
        bodies = [self.earth, self.moon, self.asteroid]
        if self.spacecraft.deployed:
            bodies.append(self.spacecraft)
        return bodies


class MissionPhase(Enum):
    PLANNING = "PLANNING"
    LAUNCH_WINDOW = "LAUNCH_WINDOW"
    DEPLOYED = "DEPLOYED"
    FINAL_APPROACH = "FINAL_APPROACH"
    COMPLETED = "COMPLETED"

    @property
    def order(self) -> int:
        return _PHASE_ORDER.index(self)


_PHASE_ORDER = list(MissionPhase)


class OutcomeReason(Enum):
    NONE = "NONE"
    IMPACT = "IMPACT"
    TIME_UP = "TIME_UP"


@dataclass(frozen=True)
class MissionOutcome:
    success: bool
    reason: OutcomeReason = OutcomeReason.NONE


@dataclass
class MissionState:
    """
    Mutable state of one mission attempt.

    achievements_earned is handed from one attempt to the next on reset, so it
    only ever grows within a session.
    """
    difficulty: str
    total_time_to_impact: float
    time_to_impact: float
    phase: MissionPhase = MissionPhase.PLANNING
    mission_time: float = 0.0
    closest_approach: float = math.inf
    closest_moon_approach: float = math.inf
    deployment_time: Optional[float] = None
    corrections_used: int = 0
    score: int = 0
    multiplier: float = 1.0
    achievements_earned: Set[str] = field(default_factory=set)
    outcome: Optional[MissionOutcome] = None
    paused: bool = False

    @property
    def elapsed_ratio(self) -> float:
        if self.total_time_to_impact <= 0:
            return 1.0
        return self.mission_time / self.total_time_to_impact

    @property
    def completed(self) -> bool:
        return self.phase is MissionPhase.COMPLETED
