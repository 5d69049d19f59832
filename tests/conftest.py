"""
Shared fixtures: a compact one-day mission so controller scenarios run quickly.
"""
import copy

import pytest

from mission.config_loader import parse_config
from mission.controller import MissionController

BASE_CONFIG = {
    "defaultDifficulty": "training",
    "difficulties": {
        "training": {
            "name": "Training",
            "timeToImpact": 1,
            "asteroidMass": 5e12,
            "asteroidVelocity": 15000,
            "spacecraftDeltaV": 3500,
            "correctionsAllowed": 2,
            "timeScale": 86400,
            "scoringMultiplier": 1.0,
        },
        "expert": {
            "name": "Expert",
            "timeToImpact": 1,
            "asteroidMass": 5e13,
            "asteroidVelocity": 15000,
            "spacecraftDeltaV": 1500,
            "correctionsAllowed": 0,
            "timeScale": 86400,
            "scoringMultiplier": 3.0,
        },
    },
    "scenarios": [
        {
            "name": "Test Object",
            "description": "Fixture scenario",
            "asteroidSize": 500,
            "impactProbability": 1.0,
            "impactParameter": 5.0e8,
        }
    ],
    "scoring": {
        "missDistanceThresholds": {"safe": 1.5e8},
        "missDistanceFormula": {"baseScore": 500, "maxScore": 1000},
        "deltaVEfficiency": {"maxBonus": 200},
    },
    "physicsConstants": {
        "earthRadius": 6.371e6,
        "safeDistance": 1.5e8,
        "moonSOI": 6.6e7,
        "maxSubstep": 60,
    },
    "achievements": [
        {"id": "efficient", "name": "Fuel Miser", "requirement": "fuelEfficient", "points": 150},
        {"id": "early_bird", "name": "Early Bird", "requirement": "earlyDeploy", "points": 100},
        {"id": "no_corrections", "name": "Right First Time", "requirement": "noCorrections", "points": 150},
        {"id": "expert", "name": "Planetary Defender", "requirement": "hardestSuccess", "points": 500},
    ],
}


@pytest.fixture
def config_data():
    return copy.deepcopy(BASE_CONFIG)


@pytest.fixture
def config(config_data):
    return parse_config(config_data)


@pytest.fixture
def make_controller(config_data):
    """Build a controller, optionally overriding the scenario's impact parameter."""
    def factory(impact_parameter=None, difficulty=None):
        data = copy.deepcopy(config_data)
        if impact_parameter is not None:
            data["scenarios"][0]["impactParameter"] = impact_parameter
        return MissionController(parse_config(data), difficulty)
    return factory


@pytest.fixture
def run_until_complete():
    """Tick until the mission ends; returns the number of ticks taken."""
    def run(controller, dt=0.01, max_ticks=500):
        for i in range(max_ticks):
            if controller.mission_result() is not None:
                return i
            controller.tick(dt)
        raise AssertionError("mission did not complete")
    return run
