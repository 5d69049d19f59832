#!/usr/bin/env python3
"""
Mission phase state machine.

PLANNING -> LAUNCH_WINDOW -> DEPLOYED -> FINAL_APPROACH -> COMPLETED

Phases only move forward. COMPLETED is set by the outcome evaluator alone and
is terminal for the attempt.
"""
from .constants import FINAL_APPROACH_RATIO, LAUNCH_WINDOW_RATIO
from .data_models import MissionPhase, MissionState


def derive_phase(elapsed_ratio: float, deployed: bool) -> MissionPhase:
    """Phase implied by the elapsed-time ratio and deployment status alone."""
    if not deployed:
        return MissionPhase.PLANNING if elapsed_ratio < LAUNCH_WINDOW_RATIO else MissionPhase.LAUNCH_WINDOW
    return MissionPhase.DEPLOYED if elapsed_ratio < FINAL_APPROACH_RATIO else MissionPhase.FINAL_APPROACH


def next_phase(state: MissionState, deployed: bool) -> MissionPhase:
    """Return the phase for this tick without ever moving backwards."""
    if state.phase is MissionPhase.COMPLETED:
        return state.phase
    candidate = derive_phase(state.elapsed_ratio, deployed)
    if candidate.order < state.phase.order:
        return state.phase
    return candidate
