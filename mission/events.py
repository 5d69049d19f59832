#!/usr/bin/env python3
"""
Events produced by the mission controller.

The core never talks to the UI directly. It queues these records and the host
drains them (MissionController.drain_events) to update logs, notifications and
the result dialog.
"""
from dataclasses import dataclass

from .data_models import MissionPhase, OutcomeReason, Strategy


@dataclass(frozen=True)
class MissionEvent:
    mission_time: float


@dataclass(frozen=True)
class MissionInitialized(MissionEvent):
    difficulty: str
    scenario: str


@dataclass(frozen=True)
class PhaseChanged(MissionEvent):
    previous: MissionPhase
    phase: MissionPhase


@dataclass(frozen=True)
class SpacecraftDeployed(MissionEvent):
    speed_kms: float
    angle_deg: float
    strategy: Strategy
    delta_v_remaining: float


@dataclass(frozen=True)
class CorrectionApplied(MissionEvent):
    delta_v: float
    corrections_used: int
    corrections_remaining: int
    delta_v_remaining: float


@dataclass(frozen=True)
class CommandRejection(MissionEvent):
    command: str
    reason: str
    message: str


@dataclass(frozen=True)
class AchievementUnlocked(MissionEvent):
    achievement_id: str
    name: str
    points: int


@dataclass(frozen=True)
class MissionResult:
    success: bool
    reason: OutcomeReason
    final_score: int
    closest_approach: float
    fuel_percent: float
    corrections_used: int
    achievement_count: int


@dataclass(frozen=True)
class MissionEnded(MissionEvent):
    result: MissionResult
