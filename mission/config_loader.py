#!/usr/bin/env python3
"""
Mission configuration loading utilities.

This module defines the JSON schema and loader for the mission configuration
(configs/mission_config.json). The file is read once before a mission starts;
any problem with it raises ConfigLoadFailure, which is fatal for the core.

Schema
======
{
  "defaultDifficulty": "medium",
  "difficulties": {                      # ordered; the last entry is the hardest tier
    "medium": {
      "name": "Medium",
      "timeToImpact": 90,                # days
      "asteroidMass": 5e12,              # kg
      "asteroidVelocity": 15000,         # m/s, inbound
      "spacecraftDeltaV": 3500,          # m/s budget
      "correctionsAllowed": 2,
      "timeScale": 43200,                # simulated seconds per wall-clock second
      "scoringMultiplier": 1.5
    }
  },
  "scenarios": [
    {
      "name": "Human-friendly threat name",
      "description": "Display text",
      "asteroidSize": 500,               # m, diameter
      "impactProbability": 0.9,
      "scientificContext": "Display text",
      "impactParameter": 0.0             # m, sideways offset of the inbound line
    }
  ],
  "scoring": {
    "missDistanceThresholds": {"safe": 1.5e8},
    "missDistanceFormula": {"baseScore": 500, "maxScore": 1000},
    "deltaVEfficiency": {"maxBonus": 200}
  },
  "physicsConstants": {
    "gravitationalConstant": 6.6743e-11, # optional
    "earthRadius": 6.371e6,
    "safeDistance": 1.5e8,
    "moonSOI": 6.6e7,                    # optional
    "minForceDistance": 1000,            # optional
    "maxSubstep": 60                     # optional, seconds
  },
  "achievements": [
    {"id": "slingshot", "name": "Gravity Assist", "description": "...", "icon": "...",
     "requirement": "moonSlingshot", "points": 100}
  ]
}
"""
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from . import constants
from .achievements import AchievementDefinition, AchievementKind
from .errors import ConfigLoadFailure

CONFIGS_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "configs")
DEFAULT_CONFIG_PATH = os.path.join(CONFIGS_DIR, "mission_config.json")

# Requirement expressions accepted from older config files.
_LEGACY_REQUIREMENTS = {
  "deltaVRemaining > 0.5": AchievementKind.FUEL_EFFICIENT,
  "timeRemaining < 0.05": AchievementKind.LAST_MINUTE,
  "score > 950": AchievementKind.HIGH_SCORE,
  "deployTime < 0.1": AchievementKind.EARLY_DEPLOY,
  "corrections === 0": AchievementKind.NO_CORRECTIONS,
  "difficulty === 'expert' && success": AchievementKind.HARDEST_SUCCESS,
}


@dataclass(frozen=True)
class DifficultySettings:
  key: str
  name: str
  time_to_impact_days: float
  asteroid_mass: float
  asteroid_velocity: float
  spacecraft_delta_v: float
  corrections_allowed: int
  time_scale: float
  scoring_multiplier: float

  @property
  def time_to_impact_seconds(self) -> float:
    return self.time_to_impact_days * constants.SECONDS_PER_DAY


@dataclass(frozen=True)
class Scenario:
  name: str
  description: str = ""
  asteroid_size: float = 500.0
  impact_probability: float = 1.0
  scientific_context: str = ""
  impact_parameter: float = 0.0


@dataclass(frozen=True)
class ScoringConstants:
  base_score: float
  max_score: float
  max_fuel_bonus: float
  safe_distance: float


@dataclass(frozen=True)
class PhysicsConstants:
  earth_radius: float = constants.EARTH_RADIUS
  safe_distance: float = constants.DEFAULT_SAFE_DISTANCE
  gravitational_constant: float = constants.G
  moon_soi_radius: float = constants.MOON_SOI_RADIUS
  min_force_distance: float = constants.MIN_FORCE_DISTANCE
  max_substep: float = constants.DEFAULT_MAX_SUBSTEP


@dataclass(frozen=True)
class MissionConfig:
  difficulties: Dict[str, DifficultySettings]
  scenarios: List[Scenario]
  scoring: ScoringConstants
  physics: PhysicsConstants
  achievements: List[AchievementDefinition] = field(default_factory=list)
  default_difficulty: str = ""

  @property
  def hardest_difficulty(self) -> str:
    return list(self.difficulties)[-1]

  @property
  def scenario(self) -> Scenario:
    return self.scenarios[0]

  def difficulty(self, key: str) -> DifficultySettings:
    return self.difficulties[key]


def _read_json(path: str) -> Any:
  try:
    with open(path, "r", encoding="utf-8") as f:
      return json.load(f)
  except OSError as e:
    raise ConfigLoadFailure(f"Cannot read mission config {path}: {e}") from e
  except json.JSONDecodeError as e:
    raise ConfigLoadFailure(f"Malformed JSON in mission config {path}: {e}") from e


def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
  if not isinstance(data, Mapping) or key not in data:
    raise ConfigLoadFailure(f"Missing '{key}' in {where}")
  return data[key]


def _number(data: Mapping[str, Any], key: str, where: str, default: Optional[float] = None,
            positive: bool = False) -> float:
  if default is not None and (not isinstance(data, Mapping) or key not in data):
    value = default
  else:
    value = _require(data, key, where)
  try:
    value = float(value)
  except (TypeError, ValueError):
    raise ConfigLoadFailure(f"'{key}' in {where} must be a number, got {value!r}") from None
  if positive and value <= 0:
    raise ConfigLoadFailure(f"'{key}' in {where} must be positive, got {value}")
  if value < 0:
    raise ConfigLoadFailure(f"'{key}' in {where} must not be negative, got {value}")
  return value


def _parse_difficulty(key: str, d: Mapping[str, Any]) -> DifficultySettings:
  where = f"difficulty '{key}'"
  return DifficultySettings(
    key=key,
    name=str(d.get("name", key)) if isinstance(d, Mapping) else key,
    time_to_impact_days=_number(d, "timeToImpact", where, positive=True),
    asteroid_mass=_number(d, "asteroidMass", where, positive=True),
    asteroid_velocity=_number(d, "asteroidVelocity", where, positive=True),
    spacecraft_delta_v=_number(d, "spacecraftDeltaV", where),
    corrections_allowed=int(_number(d, "correctionsAllowed", where)),
    time_scale=_number(d, "timeScale", where, positive=True),
    scoring_multiplier=_number(d, "scoringMultiplier", where, positive=True),
  )


def _parse_scenario(s: Mapping[str, Any]) -> Scenario:
  where = "scenario"
  return Scenario(
    name=str(_require(s, "name", where)),
    description=str(s.get("description", "")),
    asteroid_size=_number(s, "asteroidSize", where, default=500.0),
    impact_probability=_number(s, "impactProbability", where, default=1.0),
    scientific_context=str(s.get("scientificContext", "")),
    impact_parameter=_number(s, "impactParameter", where, default=0.0),
  )


def _parse_requirement(raw: Any, achievement_id: str) -> AchievementKind:
  if isinstance(raw, str) and raw in _LEGACY_REQUIREMENTS:
    return _LEGACY_REQUIREMENTS[raw]
  try:
    return AchievementKind(raw)
  except ValueError:
    raise ConfigLoadFailure(f"Unknown requirement {raw!r} for achievement '{achievement_id}'") from None


def _parse_achievement(a: Mapping[str, Any]) -> AchievementDefinition:
  achievement_id = str(_require(a, "id", "achievement"))
  where = f"achievement '{achievement_id}'"
  return AchievementDefinition(
    id=achievement_id,
    requirement=_parse_requirement(_require(a, "requirement", where), achievement_id),
    points=int(_number(a, "points", where)),
    name=str(a.get("name", achievement_id)),
    description=str(a.get("description", "")),
    icon=str(a.get("icon", "")),
  )


def parse_config(data: Mapping[str, Any]) -> MissionConfig:
  """Validate an already-decoded configuration mapping."""
  if not isinstance(data, Mapping):
    raise ConfigLoadFailure("Mission config root must be an object")

  raw_difficulties = _require(data, "difficulties", "config")
  if not isinstance(raw_difficulties, Mapping) or not raw_difficulties:
    raise ConfigLoadFailure("'difficulties' must be a non-empty object")
  difficulties = {key: _parse_difficulty(key, d) for key, d in raw_difficulties.items()}

  raw_scenarios = _require(data, "scenarios", "config")
  if not isinstance(raw_scenarios, list) or not raw_scenarios:
    raise ConfigLoadFailure("'scenarios' must be a non-empty list")
  scenarios = [_parse_scenario(s) for s in raw_scenarios]

  p = _require(data, "physicsConstants", "config")
  physics = PhysicsConstants(
    earth_radius=_number(p, "earthRadius", "physicsConstants", positive=True),
    safe_distance=_number(p, "safeDistance", "physicsConstants", positive=True),
    gravitational_constant=_number(p, "gravitationalConstant", "physicsConstants",
                                   default=constants.G, positive=True),
    moon_soi_radius=_number(p, "moonSOI", "physicsConstants", default=constants.MOON_SOI_RADIUS),
    min_force_distance=_number(p, "minForceDistance", "physicsConstants",
                               default=constants.MIN_FORCE_DISTANCE),
    max_substep=_number(p, "maxSubstep", "physicsConstants",
                        default=constants.DEFAULT_MAX_SUBSTEP, positive=True),
  )

  sc = _require(data, "scoring", "config")
  formula = _require(sc, "missDistanceFormula", "scoring")
  thresholds = sc.get("missDistanceThresholds", {}) if isinstance(sc, Mapping) else {}
  scoring = ScoringConstants(
    base_score=_number(formula, "baseScore", "missDistanceFormula"),
    max_score=_number(formula, "maxScore", "missDistanceFormula"),
    max_fuel_bonus=_number(_require(sc, "deltaVEfficiency", "scoring"), "maxBonus", "deltaVEfficiency"),
    safe_distance=_number(thresholds, "safe", "missDistanceThresholds",
                          default=physics.safe_distance, positive=True),
  )

  achievements = [_parse_achievement(a) for a in data.get("achievements", [])]
  ids = [a.id for a in achievements]
  if len(ids) != len(set(ids)):
    raise ConfigLoadFailure("Achievement ids must be unique")

  default_difficulty = str(data.get("defaultDifficulty", next(iter(difficulties))))
  if default_difficulty not in difficulties:
    raise ConfigLoadFailure(f"Default difficulty '{default_difficulty}' is not defined")

  return MissionConfig(
    difficulties=difficulties,
    scenarios=scenarios,
    scoring=scoring,
    physics=physics,
    achievements=achievements,
    default_difficulty=default_difficulty,
  )


def load_config(path: Optional[str] = None) -> MissionConfig:
  """
  Load and validate the mission configuration.
  Raises ConfigLoadFailure if the file cannot be used.
  """
  path = path or DEFAULT_CONFIG_PATH
  config = parse_config(_read_json(path))
  logging.info(f"Mission configuration loaded from {path}: "
               f"{len(config.difficulties)} difficulties, {len(config.achievements)} achievements")
  return config
