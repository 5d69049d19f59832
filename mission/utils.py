#!/usr/bin/env python3
"""
General utilities for the Asteroid Defense simulator.
"""
from typing import Optional


def try_float(val) -> Optional[float]:
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


def format_mission_clock(seconds: float) -> str:
    """Format elapsed mission time as T+DD:HH:MM."""
    seconds = max(0.0, seconds)
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    return f"T+{days:02d}:{hours:02d}:{minutes:02d}"


def format_countdown(seconds: float) -> str:
    """Format time-to-impact as 'N days Hh', or 'Hh Mm' inside the last day."""
    seconds = max(0.0, seconds)
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    if days > 0:
        return f"{days} days {hours}h"
    return f"{hours}h {int((seconds % 3600) // 60)}m"
