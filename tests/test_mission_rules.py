"""
Mission rule tests: clock, phase state machine, maneuvers, outcome and scoring.
"""
import math

import pytest

from mission.clock import MissionClock
from mission.config_loader import ScoringConstants
from mission.data_models import (
    Body,
    MissionBodies,
    MissionOutcome,
    MissionPhase,
    MissionState,
    OutcomeReason,
    Spacecraft,
    Strategy,
)
from mission.errors import (
    AlreadyDeployed,
    InsufficientDeltaV,
    InvalidManeuver,
    InvalidTimeStep,
    NoCorrectionsRemaining,
    NotDeployed,
)
from mission.maneuvers import apply_correction, deploy
from mission.outcome import evaluate_outcome
from mission.phases import derive_phase, next_phase
from mission.scoring import compute_score, distance_score, fuel_bonus

DAY = 86400.0
SCORING = ScoringConstants(base_score=500, max_score=1000, max_fuel_bonus=200, safe_distance=1.5e8)


def new_state(total=10 * DAY):
    return MissionState(difficulty="training", total_time_to_impact=total, time_to_impact=total)


def new_spacecraft(budget=3500.0):
    return Spacecraft("spacecraft", 500.0, 0.0, delta_v_budget=budget, delta_v_remaining=budget)


def new_bodies(asteroid_position, deployed=False):
    craft = new_spacecraft()
    craft.deployed = deployed
    return MissionBodies(
        earth=Body("earth", 5.972e24, 6.371e6),
        moon=Body("moon", 7.342e22, 1.7374e6, position=(3.844e8, 0.0, 0.0)),
        asteroid=Body("asteroid", 5e12, 250.0, position=asteroid_position),
        spacecraft=craft,
    )


class TestClock:
    def test_advance_scales_wall_time(self):
        state = new_state()
        scaled = MissionClock(time_scale=1000.0).advance(state, 0.5)
        assert scaled == 500.0
        assert state.mission_time == 500.0
        assert state.time_to_impact == 10 * DAY - 500.0

    def test_countdown_may_go_negative(self):
        state = new_state(total=100.0)
        MissionClock(time_scale=1000.0).advance(state, 1.0)
        assert state.time_to_impact == -900.0

    @pytest.mark.parametrize("dt", [0.0, -0.1])
    def test_rejects_non_positive_dt(self, dt):
        state = new_state()
        with pytest.raises(InvalidTimeStep):
            MissionClock(1000.0).advance(state, dt)
        assert state.mission_time == 0.0


class TestPhases:
    @pytest.mark.parametrize("ratio,deployed,expected", [
        (0.0, False, MissionPhase.PLANNING),
        (0.19, False, MissionPhase.PLANNING),
        (0.2, False, MissionPhase.LAUNCH_WINDOW),
        (0.9, False, MissionPhase.LAUNCH_WINDOW),
        (0.1, True, MissionPhase.DEPLOYED),
        (0.59, True, MissionPhase.DEPLOYED),
        (0.6, True, MissionPhase.FINAL_APPROACH),
    ])
    def test_derive_phase(self, ratio, deployed, expected):
        assert derive_phase(ratio, deployed) is expected

    def test_phase_never_moves_backwards(self):
        state = new_state()
        state.phase = MissionPhase.DEPLOYED
        state.mission_time = 0.05 * state.total_time_to_impact
        assert next_phase(state, deployed=False) is MissionPhase.DEPLOYED

    def test_completed_is_absorbing(self):
        state = new_state()
        state.phase = MissionPhase.COMPLETED
        assert next_phase(state, deployed=True) is MissionPhase.COMPLETED

    def test_order_follows_lifecycle(self):
        orders = [p.order for p in (MissionPhase.PLANNING, MissionPhase.LAUNCH_WINDOW, MissionPhase.DEPLOYED,
                                    MissionPhase.FINAL_APPROACH, MissionPhase.COMPLETED)]
        assert orders == sorted(orders)


class TestDeploy:
    def test_deploy_sets_velocity_and_charges_budget(self):
        state = new_state()
        state.mission_time = 1234.0
        craft = new_spacecraft()
        deploy(state, craft, 10.0, 90.0, Strategy.GRAVITY)
        assert craft.deployed
        assert craft.velocity[0] == pytest.approx(0.0, abs=1e-9)
        assert craft.velocity[1] == pytest.approx(10000.0)
        assert craft.velocity[2] == 0.0
        assert craft.strategy is Strategy.GRAVITY
        assert craft.delta_v_remaining == 3490.0
        assert craft.fuel_percent == pytest.approx(3490.0 / 3500.0 * 100.0)
        assert state.deployment_time == 1234.0

    def test_strategy_accepts_string_value(self):
        craft = new_spacecraft()
        deploy(new_state(), craft, 5.0, 0.0, "nuclear")
        assert craft.strategy is Strategy.NUCLEAR

    def test_second_deploy_rejected(self):
        state = new_state()
        craft = new_spacecraft()
        deploy(state, craft, 5.0, 0.0, Strategy.KINETIC)
        velocity = craft.velocity
        with pytest.raises(AlreadyDeployed):
            deploy(state, craft, 8.0, 45.0, Strategy.KINETIC)
        assert craft.velocity == velocity
        assert craft.delta_v_remaining == 3495.0

    @pytest.mark.parametrize("speed,error", [(-1.0, InvalidManeuver), (5000.0, InsufficientDeltaV)])
    def test_invalid_deploy_leaves_state_unchanged(self, speed, error):
        state = new_state()
        craft = new_spacecraft()
        with pytest.raises(error):
            deploy(state, craft, speed, 0.0, Strategy.KINETIC)
        assert not craft.deployed
        assert craft.delta_v_remaining == 3500.0
        assert craft.velocity == (0.0, 0.0, 0.0)
        assert state.deployment_time is None


class TestCorrection:
    def deployed_craft(self):
        state = new_state()
        craft = new_spacecraft()
        deploy(state, craft, 10.0, 0.0, Strategy.KINETIC)
        return state, craft

    def test_correction_adds_speed_along_heading(self):
        state, craft = self.deployed_craft()
        apply_correction(state, craft, 100.0, corrections_allowed=2)
        assert craft.velocity[0] == pytest.approx(10100.0)
        assert craft.velocity[1] == pytest.approx(0.0)
        assert craft.delta_v_remaining == 3390.0
        assert state.corrections_used == 1

    def test_correction_at_rest_keeps_zero_velocity(self):
        state = new_state()
        craft = new_spacecraft()
        deploy(state, craft, 0.0, 0.0, Strategy.KINETIC)
        apply_correction(state, craft, 50.0, corrections_allowed=1)
        assert craft.velocity == (0.0, 0.0, 0.0)
        assert craft.delta_v_remaining == 3450.0
        assert state.corrections_used == 1

    def test_correction_before_deploy_rejected(self):
        state = new_state()
        craft = new_spacecraft()
        with pytest.raises(NotDeployed):
            apply_correction(state, craft, 10.0, corrections_allowed=2)
        assert craft.delta_v_remaining == 3500.0

    def test_no_corrections_allowed(self):
        state, craft = self.deployed_craft()
        with pytest.raises(NoCorrectionsRemaining):
            apply_correction(state, craft, 10.0, corrections_allowed=0)
        assert state.corrections_used == 0
        assert craft.delta_v_remaining == 3490.0

    @pytest.mark.parametrize("deployed,dv", [(False, 10.0), (True, 0.0), (True, -5.0), (True, 1.0e6)])
    def test_exhausted_corrections_reported_first(self, deployed, dv):
        """With no corrections left every burn is refused for that reason, whatever else is wrong"""
        state = new_state()
        craft = new_spacecraft()
        if deployed:
            deploy(state, craft, 10.0, 0.0, Strategy.KINETIC)
        remaining = craft.delta_v_remaining
        with pytest.raises(NoCorrectionsRemaining):
            apply_correction(state, craft, dv, corrections_allowed=0)
        assert craft.delta_v_remaining == remaining
        assert state.corrections_used == 0

    def test_corrections_run_out(self):
        state, craft = self.deployed_craft()
        apply_correction(state, craft, 10.0, corrections_allowed=1)
        with pytest.raises(NoCorrectionsRemaining):
            apply_correction(state, craft, 10.0, corrections_allowed=1)
        assert state.corrections_used == 1

    def test_insufficient_delta_v(self):
        state, craft = self.deployed_craft()
        velocity = craft.velocity
        with pytest.raises(InsufficientDeltaV):
            apply_correction(state, craft, 5000.0, corrections_allowed=2)
        assert craft.velocity == velocity
        assert state.corrections_used == 0

    @pytest.mark.parametrize("dv", [0.0, -10.0])
    def test_non_positive_burn_rejected(self, dv):
        state, craft = self.deployed_craft()
        with pytest.raises(InvalidManeuver):
            apply_correction(state, craft, dv, corrections_allowed=2)
        assert state.corrections_used == 0


class TestOutcome:
    def test_mission_continues(self):
        state = new_state()
        bodies = new_bodies((1e9, 0.0, 0.0))
        assert evaluate_outcome(state, bodies, 6.371e6, 1.5e8) is None

    def test_impact_is_failure(self):
        state = new_state()
        bodies = new_bodies((6.0e6, 0.0, 0.0))
        outcome = evaluate_outcome(state, bodies, 6.371e6, 1.5e8)
        assert outcome == MissionOutcome(success=False, reason=OutcomeReason.IMPACT)

    def test_impact_checked_before_time_up(self):
        state = new_state()
        state.time_to_impact = -1.0
        bodies = new_bodies((1.0e6, 0.0, 0.0), deployed=True)
        state.closest_approach = 1.0e9
        assert evaluate_outcome(state, bodies, 6.371e6, 1.5e8).reason is OutcomeReason.IMPACT

    def test_time_up_with_safe_miss_is_success(self):
        state = new_state()
        state.time_to_impact = 0.0
        state.closest_approach = 2.0e8
        bodies = new_bodies((0.0, 2.0e8, 0.0), deployed=True)
        outcome = evaluate_outcome(state, bodies, 6.371e6, 1.5e8)
        assert outcome.success
        assert outcome.reason is OutcomeReason.NONE

    def test_time_up_with_close_miss_is_failure(self):
        state = new_state()
        state.time_to_impact = 0.0
        state.closest_approach = 1.0e8
        bodies = new_bodies((0.0, 1.0e8, 0.0), deployed=True)
        outcome = evaluate_outcome(state, bodies, 6.371e6, 1.5e8)
        assert outcome == MissionOutcome(success=False, reason=OutcomeReason.TIME_UP)

    def test_time_up_without_deployment_is_failure(self):
        state = new_state()
        state.time_to_impact = -5.0
        bodies = new_bodies((0.0, 5.0e8, 0.0))
        outcome = evaluate_outcome(state, bodies, 6.371e6, 1.5e8)
        assert outcome.reason is OutcomeReason.TIME_UP

    def test_completed_mission_keeps_its_outcome(self):
        state = new_state()
        state.phase = MissionPhase.COMPLETED
        state.outcome = MissionOutcome(success=True)
        bodies = new_bodies((0.0, 0.0, 0.0))
        assert evaluate_outcome(state, bodies, 6.371e6, 1.5e8) is state.outcome


class TestScoring:
    @pytest.mark.parametrize("closest,expected", [
        (math.inf, 0.0),
        (1.0e8, 0.0),
        (2.9e8, 0.0),
        (3.0e8, 500.0),
        (9.0e8, 750.0),
        (1.5e9, 1000.0),
        (5.0e9, 1000.0),
    ])
    def test_distance_score(self, closest, expected):
        assert distance_score(closest, SCORING) == pytest.approx(expected)

    def test_fuel_bonus(self):
        craft = new_spacecraft(budget=1000.0)
        craft.delta_v_remaining = 250.0
        assert fuel_bonus(craft, SCORING) == pytest.approx(50.0)
        assert fuel_bonus(new_spacecraft(budget=0.0), SCORING) == 0.0

    def test_compute_score(self):
        state = new_state(total=100.0)
        state.time_to_impact = 50.0
        state.closest_approach = 9.0e8
        craft = new_spacecraft(budget=1000.0)
        craft.delta_v_remaining = 500.0
        score, multiplier = compute_score(state, craft, SCORING, difficulty_multiplier=2.0)
        # (750 + 100) * 1.5 * 2
        assert score == 2550
        assert isinstance(score, int)
        assert multiplier == pytest.approx(3.0)

    def test_score_is_floored(self):
        state = new_state(total=3.0)
        state.time_to_impact = 1.0
        craft = new_spacecraft(budget=3.0)
        craft.delta_v_remaining = 1.0
        score, _ = compute_score(state, craft, SCORING, difficulty_multiplier=1.0)
        # 200/3 * 4/3 = 88.88...
        assert score == 88
