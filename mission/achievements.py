#!/usr/bin/env python3
"""
Achievement definitions and evaluation.

Each achievement names one AchievementKind; every kind maps to a pure predicate
over an AchievementContext built from the final mission state. The evaluator
runs once per terminal outcome and only awards achievements that are not
already in MissionState.achievements_earned, so re-running it on the same
state changes nothing.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List

from .data_models import MissionState, Spacecraft


class AchievementKind(Enum):
    MOON_SLINGSHOT = "moonSlingshot"
    FUEL_EFFICIENT = "fuelEfficient"
    LAST_MINUTE = "lastMinute"
    HIGH_SCORE = "highScore"
    EARLY_DEPLOY = "earlyDeploy"
    NO_CORRECTIONS = "noCorrections"
    HARDEST_SUCCESS = "hardestSuccess"


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    requirement: AchievementKind
    points: int
    name: str = ""
    description: str = ""
    icon: str = ""


@dataclass(frozen=True)
class AchievementContext:
    state: MissionState
    spacecraft: Spacecraft
    success: bool
    hardest_difficulty: str
    moon_soi_radius: float


def _moon_slingshot(ctx: AchievementContext) -> bool:
    return ctx.state.closest_moon_approach < ctx.moon_soi_radius


def _fuel_efficient(ctx: AchievementContext) -> bool:
    budget = ctx.spacecraft.delta_v_budget
    return budget > 0 and ctx.spacecraft.delta_v_remaining / budget > 0.5


def _last_minute(ctx: AchievementContext) -> bool:
    return ctx.success and ctx.state.time_to_impact / ctx.state.total_time_to_impact < 0.05


def _high_score(ctx: AchievementContext) -> bool:
    return ctx.state.score > 950


def _early_deploy(ctx: AchievementContext) -> bool:
    deployed_at = ctx.state.deployment_time
    return deployed_at is not None and deployed_at / ctx.state.total_time_to_impact < 0.1


def _no_corrections(ctx: AchievementContext) -> bool:
    return ctx.success and ctx.state.corrections_used == 0


def _hardest_success(ctx: AchievementContext) -> bool:
    return ctx.success and ctx.state.difficulty == ctx.hardest_difficulty


PREDICATES: Dict[AchievementKind, Callable[[AchievementContext], bool]] = {
    AchievementKind.MOON_SLINGSHOT: _moon_slingshot,
    AchievementKind.FUEL_EFFICIENT: _fuel_efficient,
    AchievementKind.LAST_MINUTE: _last_minute,
    AchievementKind.HIGH_SCORE: _high_score,
    AchievementKind.EARLY_DEPLOY: _early_deploy,
    AchievementKind.NO_CORRECTIONS: _no_corrections,
    AchievementKind.HARDEST_SUCCESS: _hardest_success,
}


def evaluate_achievements(ctx: AchievementContext,
                          definitions: Iterable[AchievementDefinition]) -> List[AchievementDefinition]:
    """
    Award every not-yet-earned achievement whose predicate holds.

    Definitions are evaluated in order and points are added to the score as they
    are earned, so a later HIGH_SCORE check sees bonuses awarded before it.

    Returns:
        The definitions newly earned by this call (empty on re-evaluation).
    """
    state = ctx.state
    earned: List[AchievementDefinition] = []
    for definition in definitions:
        if definition.id in state.achievements_earned:
            continue
        if not PREDICATES[definition.requirement](ctx):
            continue
        state.achievements_earned.add(definition.id)
        state.score += definition.points
        earned.append(definition)
        logging.info(f"Achievement unlocked: {definition.name or definition.id} (+{definition.points} pts)")
    return earned
