"""
Telemetry, formatting and camera helper tests.
"""
import pytest

from mission.camera import Camera2D
from mission.data_models import Body, MissionBodies, MissionState, Spacecraft
from mission.telemetry import TelemetryRecorder, threat_level
from mission.utils import format_countdown, format_mission_clock, try_float


def bodies():
    craft = Spacecraft("spacecraft", 500.0, 0.0, position=(1.0e7, 0.0, 0.0), velocity=(0.0, 2000.0, 0.0),
                       delta_v_budget=3500.0, delta_v_remaining=3000.0, deployed=True)
    return MissionBodies(
        earth=Body("earth", 5.972e24, 6.371e6),
        moon=Body("moon", 7.342e22, 1.7374e6, position=(3.844e8, 0.0, 0.0)),
        asteroid=Body("asteroid", 5e12, 250.0, position=(0.0, 4.0e8, 0.0), velocity=(0.0, -1000.0, 0.0)),
        spacecraft=craft,
    )


class TestThreatLevel:
    @pytest.mark.parametrize("closest,level", [
        (float("inf"), "LOW"),
        (6.0e8, "LOW"),
        (4.0e8, "MEDIUM"),
        (2.0e8, "HIGH"),
        (1.5e8, "CRITICAL"),
        (1.0e7, "CRITICAL"),
    ])
    def test_levels(self, closest, level):
        assert threat_level(closest) == level


class TestRecorder:
    def test_sample_contents(self):
        state = MissionState(difficulty="training", total_time_to_impact=864000.0, time_to_impact=691200.0,
                             mission_time=172800.0)
        sample = TelemetryRecorder().record(state, bodies())
        assert sample.mission_days == pytest.approx(2.0)
        assert sample.distance_to_earth_km == pytest.approx(4.0e5)
        assert sample.relative_velocity == pytest.approx(3000.0)
        assert sample.delta_v_remaining == 3000.0
        assert sample.kinetic_energy == pytest.approx(0.5 * 500.0 * 2000.0 ** 2)
        assert sample.potential_energy < 0
        assert sample.total_energy == pytest.approx(sample.kinetic_energy + sample.potential_energy)
        expected = 0.5 * 5e12 * 1000.0 ** 2 - 6.67430e-11 * 5.972e24 * 5e12 / 4.0e8
        assert sample.asteroid_orbital_energy == pytest.approx(expected)

    def test_history_is_bounded(self):
        recorder = TelemetryRecorder(max_points=3)
        state = MissionState(difficulty="training", total_time_to_impact=100.0, time_to_impact=100.0)
        b = bodies()
        for i in range(5):
            state.mission_time = float(i)
            recorder.record(state, b)
        history = recorder.history()
        assert len(history) == 3
        assert history[0].mission_days == pytest.approx(2.0 / 86400.0)
        recorder.clear()
        assert recorder.history() == []


class TestFormatting:
    def test_mission_clock(self):
        assert format_mission_clock(0) == "T+00:00:00"
        assert format_mission_clock(2 * 86400 + 3 * 3600 + 4 * 60 + 59) == "T+02:03:04"

    def test_countdown(self):
        assert format_countdown(3 * 86400 + 5 * 3600) == "3 days 5h"
        assert format_countdown(2 * 3600 + 30 * 60) == "2h 30m"
        assert format_countdown(-100) == "0h 0m"

    def test_try_float(self):
        assert try_float("2.5") == 2.5
        assert try_float("fast") is None
        assert try_float(None) is None


class TestCamera:
    def test_screen_world_round_trip(self):
        cam = Camera2D(center=(1.0e8, -2.0e8), meters_per_pixel=1.0e6)
        cam.set_viewport_size(800, 600)
        assert cam.world_to_screen((1.0e8, -2.0e8, 0.0)) == (400, 300)
        assert cam.world_to_screen((1.1e8, -1.9e8, 0.0)) == (410, 290)
        wx, wy, _ = cam.screen_to_world((410, 290))
        assert wx == pytest.approx(1.1e8)
        assert wy == pytest.approx(-1.9e8)

    def test_fit_contains_all_points(self):
        cam = Camera2D()
        cam.set_viewport_size(800, 600)
        points = [(0.0, 0.0, 0.0), (1.2e9, 4.0e8, 0.0), (3.8e8, -2.0e8, 0.0)]
        cam.fit(points)
        for p in points:
            x, y = cam.world_to_screen(p)
            assert 0 <= x <= 800
            assert 0 <= y <= 600
