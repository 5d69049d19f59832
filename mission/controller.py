#!/usr/bin/env python3
"""
Mission controller: owns one mission attempt and drives it tick by tick.

The controller is the only code that mutates the Body set and MissionState.
Hosts call tick(dt) at their own cadence and issue commands between ticks;
a re-entrant lock keeps the renderer thread and the UI thread from
interleaving a command with a tick.

Per tick
1. MissionClock advances mission time by dt * time_scale.
2. The scaled interval is split into substeps no longer than physics.max_substep; each
   substep solves forces, integrates, tracks closest approaches and stops early on impact.
3. The phase state machine updates.
4. The outcome evaluator checks impact, then time-up.
5. The score is recomputed (once deployed).
6. On termination the achievement evaluator runs exactly once.
"""
import logging
import math
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from .achievements import AchievementContext, evaluate_achievements
from .clock import MissionClock
from .config_loader import DifficultySettings, MissionConfig
from .constants import MAX_SUBSTEPS
from .data_models import (
    MissionBodies,
    MissionOutcome,
    MissionPhase,
    MissionState,
    Strategy,
)
from .errors import (
    CommandRejected,
    DifficultyChangeWhileDeployed,
    InvalidTimeStep,
    MissionInactive,
    UnknownDifficulty,
)
from .events import (
    AchievementUnlocked,
    CommandRejection,
    CorrectionApplied,
    MissionEnded,
    MissionEvent,
    MissionInitialized,
    MissionResult,
    PhaseChanged,
    SpacecraftDeployed,
)
from . import maneuvers
from .outcome import asteroid_impacted, evaluate_outcome
from .phases import next_phase
from .physics import EulerIntegrator, ForceSolver
from .scenario import build_bodies
from .scoring import compute_score
from .telemetry import TelemetryRecorder, threat_level
from .vector_utils import Vec3, clamp, vec_add, vec_dist


@dataclass(frozen=True)
class BodySnapshot:
    position: Vec3
    velocity: Vec3
    radius: float


@dataclass(frozen=True)
class MissionSnapshot:
    """Read-only view of one tick for the renderer and dashboards."""
    bodies: Dict[str, BodySnapshot]
    phase: MissionPhase
    mission_time: float
    time_to_impact: float
    closest_approach: float
    score: int
    multiplier: float
    deployed: bool
    delta_v_remaining: float
    fuel_percent: float
    corrections_used: int
    corrections_allowed: int
    paused: bool
    threat_level: str


class MissionController:
    """
    Owns the bodies and mission state for the active attempt.
    Includes thread-safe operations guarded by a lock.
    """

    def __init__(self, config: MissionConfig, difficulty: Optional[str] = None):
        self.lock = threading.RLock()
        self.config = config
        difficulty = difficulty or config.default_difficulty
        if difficulty not in config.difficulties:
            raise UnknownDifficulty(f"Unknown difficulty '{difficulty}'")
        self.difficulty = difficulty

        physics = config.physics
        self.solver = ForceSolver(physics.gravitational_constant, physics.min_force_distance)
        self.integrator = EulerIntegrator()
        self.telemetry = TelemetryRecorder(gravitational_constant=physics.gravitational_constant)

        self.show_trails = True
        self._trail_step_counter = 0
        self._events: List[MissionEvent] = []
        self._result: Optional[MissionResult] = None

        self._setup_mission(achievements=set())

    # -----------------------
    # Setup
    # -----------------------

    @property
    def settings(self) -> DifficultySettings:
        return self.config.difficulties[self.difficulty]

    def _setup_mission(self, achievements) -> None:
        settings = self.settings
        scenario = self.config.scenario
        self.bodies: MissionBodies = build_bodies(settings, scenario, self.config.physics)
        self.state = MissionState(
            difficulty=self.difficulty,
            total_time_to_impact=settings.time_to_impact_seconds,
            time_to_impact=settings.time_to_impact_seconds,
            achievements_earned=achievements,
        )
        self.clock = MissionClock(settings.time_scale)
        self.telemetry.clear()
        self._result = None
        self._emit(MissionInitialized(0.0, difficulty=self.difficulty, scenario=scenario.name))
        logging.info(f"Mission setup complete: {settings.name} difficulty, "
                     f"{settings.time_to_impact_days:g} days to impact, "
                     f"{settings.spacecraft_delta_v:g} m/s delta-V")

    # -----------------------
    # Simulation
    # -----------------------

    def tick(self, dt_real_seconds: float) -> None:
        """
        Advance the mission by one host frame of dt_real_seconds wall-clock time.
        Does nothing while paused or after the mission has completed.
        """
        if not dt_real_seconds > 0:
            raise InvalidTimeStep(f"Tick time step must be positive, got {dt_real_seconds}")
        with self.lock:
            state = self.state
            if state.paused or state.completed:
                return

            scaled = self.clock.advance(state, dt_real_seconds)
            self._step_physics(scaled)

            craft = self.bodies.spacecraft
            phase = next_phase(state, craft.deployed)
            if phase is not state.phase:
                self._emit(PhaseChanged(state.mission_time, previous=state.phase, phase=phase))
                logging.info(f"Mission phase: {state.phase.value} -> {phase.value}")
                state.phase = phase

            physics = self.config.physics
            outcome = evaluate_outcome(state, self.bodies, physics.earth_radius, physics.safe_distance)

            if craft.deployed:
                state.score, state.multiplier = compute_score(
                    state, craft, self.config.scoring, self.settings.scoring_multiplier)
                self.telemetry.record(state, self.bodies)

            if outcome is not None:
                self._complete(outcome)

    def _step_physics(self, sim_dt: float) -> None:
        """
        Integrate sim_dt seconds in equal substeps no longer than physics.max_substep.
        Stops at the first substep that ends with the asteroid inside Earth.
        """
        physics = self.config.physics
        steps = int(clamp(math.ceil(sim_dt / physics.max_substep), 1, MAX_SUBSTEPS))
        dt_per = sim_dt / steps
        bodies = self.bodies
        for _ in range(steps):
            active = bodies.active()
            forces = self.solver.compute_forces(active)
            self.integrator.step(active, forces, dt_per)
            if not bodies.spacecraft.deployed:
                # Parked spacecraft rides along with Earth until launch.
                bodies.spacecraft.position = bodies.earth.position
                bodies.spacecraft.velocity = bodies.earth.velocity
            self._track_approaches()
            if asteroid_impacted(bodies, physics.earth_radius):
                break

        # Throttle trail sampling to reduce draw cost
        self._trail_step_counter = (self._trail_step_counter + 1) % 3
        if self.show_trails and self._trail_step_counter == 0:
            for b in bodies.active():
                b.add_trail_point()

    def _track_approaches(self) -> None:
        """Closest approaches are only recorded once the spacecraft is deployed."""
        bodies = self.bodies
        if not bodies.spacecraft.deployed:
            return
        state = self.state
        distance = vec_dist(bodies.asteroid.position, bodies.earth.position)
        if distance < state.closest_approach:
            state.closest_approach = distance
        moon_distance = vec_dist(bodies.spacecraft.position, bodies.moon.position)
        if moon_distance < state.closest_moon_approach:
            state.closest_moon_approach = moon_distance

    def _complete(self, outcome: MissionOutcome) -> None:
        state = self.state
        craft = self.bodies.spacecraft
        if state.phase is not MissionPhase.COMPLETED:
            self._emit(PhaseChanged(state.mission_time, previous=state.phase, phase=MissionPhase.COMPLETED))
        state.phase = MissionPhase.COMPLETED
        state.outcome = outcome
        state.paused = True

        if outcome.success:
            logging.info("MISSION SUCCESS: asteroid deflected")
        else:
            logging.info(f"MISSION FAILED: {outcome.reason.value}")

        ctx = AchievementContext(
            state=state,
            spacecraft=craft,
            success=outcome.success,
            hardest_difficulty=self.config.hardest_difficulty,
            moon_soi_radius=self.config.physics.moon_soi_radius,
        )
        for definition in evaluate_achievements(ctx, self.config.achievements):
            self._emit(AchievementUnlocked(state.mission_time, achievement_id=definition.id,
                                           name=definition.name, points=definition.points))

        self._result = MissionResult(
            success=outcome.success,
            reason=outcome.reason,
            final_score=state.score,
            closest_approach=state.closest_approach,
            fuel_percent=craft.fuel_percent,
            corrections_used=state.corrections_used,
            achievement_count=len(state.achievements_earned),
        )
        self._emit(MissionEnded(state.mission_time, result=self._result))

    # -----------------------
    # Commands
    # -----------------------

    def _require_active(self) -> None:
        if self.state.completed:
            raise MissionInactive("Mission has already ended")
        if self.state.paused:
            raise MissionInactive("Mission is paused")

    def _reject(self, command: str, error: CommandRejected) -> None:
        logging.warning(f"{command} rejected: {error}")
        self._emit(CommandRejection(self.state.mission_time, command=command,
                                    reason=error.reason, message=str(error)))

    def deploy(self, speed_kms: float, angle_deg: float, strategy=Strategy.KINETIC) -> None:
        with self.lock:
            craft = self.bodies.spacecraft
            try:
                self._require_active()
                maneuvers.deploy(self.state, craft, speed_kms, angle_deg, strategy)
            except CommandRejected as e:
                self._reject("deploy", e)
                raise
            self._place_on_launch_site(angle_deg)
            self._emit(SpacecraftDeployed(self.state.mission_time, speed_kms=speed_kms, angle_deg=angle_deg,
                                          strategy=craft.strategy, delta_v_remaining=craft.delta_v_remaining))
            logging.info(f"Spacecraft deployed: {speed_kms} km/s at {angle_deg} deg, "
                         f"{craft.strategy.value} strategy")

    def _place_on_launch_site(self, angle_deg: float) -> None:
        """Move the spacecraft from Earth's centre to its surface along the launch heading."""
        radius = self.config.physics.earth_radius
        angle_rad = math.radians(angle_deg)
        self.bodies.spacecraft.position = vec_add(
            self.bodies.earth.position, (radius * math.cos(angle_rad), radius * math.sin(angle_rad), 0.0))

    def apply_correction(self, delta_v_ms: float) -> None:
        with self.lock:
            craft = self.bodies.spacecraft
            allowed = self.settings.corrections_allowed
            try:
                self._require_active()
                maneuvers.apply_correction(self.state, craft, delta_v_ms, allowed)
            except CommandRejected as e:
                self._reject("correction", e)
                raise
            self._emit(CorrectionApplied(self.state.mission_time, delta_v=delta_v_ms,
                                         corrections_used=self.state.corrections_used,
                                         corrections_remaining=allowed - self.state.corrections_used,
                                         delta_v_remaining=craft.delta_v_remaining))
            logging.info(f"Mid-course correction: {delta_v_ms:.1f} m/s "
                         f"({self.state.corrections_used}/{allowed} used)")

    def set_difficulty(self, name: str) -> None:
        """Switch difficulty and start a fresh attempt; refused once the spacecraft is deployed."""
        with self.lock:
            try:
                if self.bodies.spacecraft.deployed:
                    raise DifficultyChangeWhileDeployed("Cannot change difficulty during a mission")
                if name not in self.config.difficulties:
                    raise UnknownDifficulty(f"Unknown difficulty '{name}'")
            except CommandRejected as e:
                self._reject("set_difficulty", e)
                raise
            self.difficulty = name
            self._setup_mission(achievements=self.state.achievements_earned)

    def reset(self) -> None:
        """Discard the attempt and start over; earned achievements carry over."""
        with self.lock:
            self._setup_mission(achievements=self.state.achievements_earned)

    def pause(self) -> None:
        with self.lock:
            self.state.paused = True

    def resume(self) -> None:
        with self.lock:
            if not self.state.completed:
                self.state.paused = False

    # -----------------------
    # Outputs
    # -----------------------

    def snapshot(self) -> MissionSnapshot:
        with self.lock:
            state = self.state
            craft = self.bodies.spacecraft
            return MissionSnapshot(
                bodies={b.name: BodySnapshot(b.position, b.velocity, b.radius) for b in self.bodies.all()},
                phase=state.phase,
                mission_time=state.mission_time,
                time_to_impact=state.time_to_impact,
                closest_approach=state.closest_approach,
                score=state.score,
                multiplier=state.multiplier,
                deployed=craft.deployed,
                delta_v_remaining=craft.delta_v_remaining,
                fuel_percent=craft.fuel_percent,
                corrections_used=state.corrections_used,
                corrections_allowed=self.settings.corrections_allowed,
                paused=state.paused,
                threat_level=threat_level(state.closest_approach),
            )

    def mission_result(self) -> Optional[MissionResult]:
        with self.lock:
            return self._result

    def drain_events(self) -> List[MissionEvent]:
        with self.lock:
            events, self._events = self._events, []
            return events

    def _emit(self, event: MissionEvent) -> None:
        self._events.append(event)
