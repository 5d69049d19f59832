#!/usr/bin/env python3
"""
Deployment and mid-course correction engine.

Both operations validate everything before touching state, so a rejected
command (raised as a CommandRejected subclass) leaves the spacecraft and the
mission state exactly as they were.

Units
- deploy() takes the launch speed in km/s and the heading in degrees in the XY plane.
- apply_correction() takes the burn in m/s.
- The deploy burn is charged against the m/s delta-V budget using the km/s
  number as-is.
"""
import math

from .data_models import MissionState, Spacecraft, Strategy
from .errors import (
    AlreadyDeployed,
    InsufficientDeltaV,
    InvalidManeuver,
    NoCorrectionsRemaining,
    NotDeployed,
)
from .vector_utils import vec_len, vec_scale


def deploy(state: MissionState, spacecraft: Spacecraft, speed_kms: float, angle_deg: float,
           strategy: Strategy) -> None:
    if spacecraft.deployed:
        raise AlreadyDeployed("Spacecraft is already deployed")
    if speed_kms < 0:
        raise InvalidManeuver(f"Launch speed must not be negative, got {speed_kms} km/s")
    if speed_kms > spacecraft.delta_v_remaining:
        raise InsufficientDeltaV(
            f"Launch needs {speed_kms} but only {spacecraft.delta_v_remaining} delta-V remains")

    state.deployment_time = state.mission_time
    angle_rad = angle_deg * math.pi / 180.0
    spacecraft.velocity = (speed_kms * 1000.0 * math.cos(angle_rad),
                           speed_kms * 1000.0 * math.sin(angle_rad),
                           0.0)
    spacecraft.strategy = Strategy(strategy)
    spacecraft.deployed = True
    spacecraft.delta_v_remaining -= speed_kms
    spacecraft.update_fuel()


def apply_correction(state: MissionState, spacecraft: Spacecraft, delta_v_ms: float,
                     corrections_allowed: int) -> None:
    """
    Instantaneous burn along the current heading.

    The speed changes from |v| to |v| + delta_v; a spacecraft at rest keeps its
    zero velocity but the burn is still charged.
    """
    if state.corrections_used >= corrections_allowed:
        raise NoCorrectionsRemaining(
            f"All {corrections_allowed} mid-course corrections have been used")
    if not spacecraft.deployed:
        raise NotDeployed("Corrections are only possible after deployment")
    if not delta_v_ms > 0:
        raise InvalidManeuver(f"Correction burn must be positive, got {delta_v_ms} m/s")
    if spacecraft.delta_v_remaining < delta_v_ms:
        raise InsufficientDeltaV(
            f"Correction needs {delta_v_ms} m/s but only {spacecraft.delta_v_remaining:.1f} m/s remains")

    spacecraft.delta_v_remaining -= delta_v_ms
    spacecraft.update_fuel()
    state.corrections_used += 1

    speed = vec_len(spacecraft.velocity)
    if speed == 0:
        return
    spacecraft.velocity = vec_scale(spacecraft.velocity, (speed + delta_v_ms) / speed)
