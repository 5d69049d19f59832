#!/usr/bin/env python3
"""
Core Physics Engine for the Asteroid Defense simulator

Responsibilities
- Compute pairwise Newtonian gravitational forces between the active bodies.
- Advance body states with a first-order explicit Euler step (velocity first, then position).
- Provide small helpers for orbital diagnostics (energy, period, circular velocity) and
  trajectory prediction for the renderer.

Units and conventions
- World space positions are in meters [m].
- Velocities are in meters per second [m/s].
- Masses are in kilograms [kg].
- Forces are in newtons [N].
- Time steps are in seconds [s].
- The gravitational constant G is expressed in SI: m^3 kg^-1 s^-2.

Numerical notes
- Close pairs: any pair closer than min_distance (1000 m by default) exerts no force at all.
  The spacecraft starts at Earth's centre, and this keeps that pair from blowing up.
- Symmetry: each unordered pair is evaluated once and applied with opposite signs, so the
  force on A from B is exactly the negation of the force on B from A.
- Energy: the semi-implicit Euler update is first order. Total mechanical energy drifts over
  long runs; the controller keeps substeps short to bound the drift.

Threading
- This module is pure compute and holds no state between calls besides its constants. It is
  used by a controller that guards shared data with a lock.
"""

import copy
import math
from typing import Dict, List, Optional, Sequence

from .constants import G, MIN_FORCE_DISTANCE
from .data_models import Body
from .errors import InvalidTimeStep
from .vector_utils import Vec3, ZERO, vec_add, vec_dist, vec_len, vec_neg, vec_scale, vec_sub


def pair_force(a: Body, b: Body, gravitational_constant: float = G,
               min_distance: float = MIN_FORCE_DISTANCE) -> Vec3:
    """
    Gravitational force exerted on body a by body b.

        F = G * m_a * m_b / r^2, directed from a towards b

    Returns the zero vector when the bodies are closer than min_distance.
    """
    dx, dy, dz = vec_sub(b.position, a.position)
    distance = math.sqrt(dx * dx + dy * dy + dz * dz)
    if distance < min_distance:
        return ZERO

    # m_a * m_b is grouped so that pair_force(b, a) is the exact negation.
    magnitude = gravitational_constant * (a.mass * b.mass) / (distance * distance)
    return ((dx / distance) * magnitude,
            (dy / distance) * magnitude,
            (dz / distance) * magnitude)


class ForceSolver:
    """
    Direct-summation gravity solver.

    For a set of N bodies every unordered pair (i, j) is visited once; the pair force is
    added to body i and subtracted from body j (Newton's third law).
    """

    def __init__(self, gravitational_constant: float = G, min_distance: float = MIN_FORCE_DISTANCE):
        self.gravitational_constant = float(gravitational_constant)
        self.min_distance = max(0.0, float(min_distance))

    def compute_forces(self, bodies: Sequence[Body]) -> Dict[str, Vec3]:
        """
        Compute the net gravitational force on each body.

        Args:
            bodies: The active bodies for this instant. Names must be unique.

        Returns:
            Mapping from body name to net force vector (N). Bodies are not modified.
        """
        forces: Dict[str, Vec3] = {b.name: ZERO for b in bodies}
        n = len(bodies)
        for i in range(n):
            bi = bodies[i]
            for j in range(i + 1, n):
                bj = bodies[j]
                f = pair_force(bi, bj, self.gravitational_constant, self.min_distance)
                forces[bi.name] = vec_add(forces[bi.name], f)
                forces[bj.name] = vec_add(forces[bj.name], vec_neg(f))
        return forces


class EulerIntegrator:
    """
    Semi-implicit Euler integrator.

        v <- v + (F / m) * dt
        x <- x + v * dt

    The integrator keeps no state; call step() every tick with freshly solved forces.
    """

    def step(self, bodies: Sequence[Body], forces: Dict[str, Vec3], timestep: float) -> None:
        """
        Advance the given bodies in place.

        Args:
            bodies: Bodies to integrate (modified in place).
            forces: Net force per body name, as returned by ForceSolver.compute_forces.
            timestep: Time step size in seconds (must be > 0).
        """
        if not timestep > 0:
            raise InvalidTimeStep(f"Integration time step must be positive, got {timestep}")
        for body in bodies:
            force = forces.get(body.name, ZERO)
            acceleration = vec_scale(force, 1.0 / body.mass)
            body.velocity = vec_add(body.velocity, vec_scale(acceleration, timestep))
            body.position = vec_add(body.position, vec_scale(body.velocity, timestep))


def kinetic_energy(body: Body) -> float:
    v = vec_len(body.velocity)
    return 0.5 * body.mass * v * v


def potential_energy(a: Body, b: Body, gravitational_constant: float = G) -> float:
    """Pairwise gravitational potential energy, -G m_a m_b / r (0 for coincident bodies)."""
    r = vec_dist(a.position, b.position)
    if r <= 0:
        return 0.0
    return -gravitational_constant * a.mass * b.mass / r


def total_mechanical_energy(bodies: Sequence[Body], gravitational_constant: float = G) -> float:
    """Kinetic energy of every body plus the potential energy of every pair."""
    total = sum(kinetic_energy(b) for b in bodies)
    n = len(bodies)
    for i in range(n):
        for j in range(i + 1, n):
            total += potential_energy(bodies[i], bodies[j], gravitational_constant)
    return total


def orbital_energy(body: Body, central: Body, gravitational_constant: float = G) -> float:
    """
    Two-body orbital energy of body around central: E = (1/2) m v^2 - G M m / r.
    Velocity is taken relative to the central body.
    """
    v_rel = vec_len(vec_sub(body.velocity, central.velocity))
    r = vec_dist(body.position, central.position)
    if r <= 0:
        return 0.0
    return 0.5 * body.mass * v_rel * v_rel - gravitational_constant * central.mass * body.mass / r


def orbital_period(body: Body, central: Body, gravitational_constant: float = G) -> float:
    """
    Period of a circular orbit at the current separation: T = 2 pi sqrt(r^3 / (G M)).
    """
    r = vec_dist(body.position, central.position)
    mu = gravitational_constant * central.mass
    if r <= 0 or mu <= 0:
        return 0.0
    return 2.0 * math.pi * math.sqrt(r ** 3 / mu)


def circular_orbit_velocity(central_mass: float, orbital_radius: float,
                            gravitational_constant: float = G) -> float:
    """
    Calculate the velocity needed for a circular orbit.

    For a circular orbit, gravity provides exactly the centripetal force:
    G * M / r = v^2 / r, therefore v = sqrt(G * M / r).
    """
    if orbital_radius <= 0:
        return 0.0
    return math.sqrt(gravitational_constant * central_mass / orbital_radius)


def predict_trajectory(bodies: Sequence[Body], name: str, steps: int = 100,
                       step_size: float = 3600.0, solver: Optional[ForceSolver] = None) -> List[Vec3]:
    """
    Propagate copies of the bodies and return the future positions of one of them.

    The live bodies are never touched. Used by the renderer to draw projected paths.
    """
    solver = solver or ForceSolver()
    integrator = EulerIntegrator()
    shadow = [copy.copy(b) for b in bodies]
    target = next((b for b in shadow if b.name == name), None)
    if target is None:
        raise KeyError(name)
    trajectory: List[Vec3] = []
    for _ in range(max(0, steps)):
        trajectory.append(target.position)
        integrator.step(shadow, solver.compute_forces(shadow), step_size)
    return trajectory
