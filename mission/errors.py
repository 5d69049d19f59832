#!/usr/bin/env python3
"""
Exception taxonomy for the mission core.

Command rejections derive from CommandRejected: the command is a no-op, the
reason is surfaced to the caller for UI feedback and MissionState is untouched.
ConfigLoadFailure is the only fatal error; it prevents mission setup entirely.
"""


class MissionError(Exception):
    """Base class for all mission core errors."""


class CommandRejected(MissionError):
    """A player command was refused; state is unchanged."""
    reason = "REJECTED"


class AlreadyDeployed(CommandRejected):
    reason = "ALREADY_DEPLOYED"


class NotDeployed(CommandRejected):
    reason = "NOT_DEPLOYED"


class NoCorrectionsRemaining(CommandRejected):
    reason = "NO_CORRECTIONS_REMAINING"


class InsufficientDeltaV(CommandRejected):
    reason = "INSUFFICIENT_DELTA_V"


class InvalidManeuver(CommandRejected):
    reason = "INVALID_MANEUVER"


class DifficultyChangeWhileDeployed(CommandRejected):
    reason = "DIFFICULTY_CHANGE_WHILE_DEPLOYED"


class UnknownDifficulty(CommandRejected):
    reason = "UNKNOWN_DIFFICULTY"


class MissionInactive(CommandRejected):
    """Raised for commands issued while the mission is paused or completed."""
    reason = "MISSION_INACTIVE"


class InvalidTimeStep(MissionError, ValueError):
    """Raised when a tick or integration step is given dt <= 0."""


class ConfigLoadFailure(MissionError):
    """Mission configuration is missing, malformed or inconsistent."""
