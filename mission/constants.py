#!/usr/bin/env python3
"""
Shared constants for the Asteroid Defense simulator (SI units unless stated otherwise).

Keeping constants in one place helps ensure values are consistent across the
codebase and makes tuning easier. Values that vary per mission live in
configs/mission_config.json; the ones here are defaults and fixed physics.
"""

# Physical constants
G = 6.67430e-11  # m^3 kg^-1 s^-2
EARTH_MASS = 5.972e24  # kg
EARTH_RADIUS = 6.371e6  # m
MOON_MASS = 7.342e22  # kg
MOON_RADIUS = 1.7374e6  # m
MOON_DISTANCE = 3.844e8  # m, mean Earth-Moon separation
MOON_ORBITAL_SPEED = 1022.0  # m/s
MOON_SOI_RADIUS = 6.6e7  # m, approximate sphere of influence
SPACECRAFT_MASS = 500.0  # kg
SECONDS_PER_DAY = 86400.0

# Physics controls
MIN_FORCE_DISTANCE = 1000.0  # m; pairs closer than this exert no force
DEFAULT_SAFE_DISTANCE = 1.5e8  # m
DEFAULT_MAX_SUBSTEP = 60.0  # seconds of simulation time per physics substep
MAX_SUBSTEPS = 5000  # cap per tick for stability/perf

# Phase thresholds (fraction of the initial time-to-impact elapsed)
LAUNCH_WINDOW_RATIO = 0.2
FINAL_APPROACH_RATIO = 0.6

# Telemetry
TELEMETRY_MAX_POINTS = 100

# Rendering (viewport)
VIEW_WIDTH = 1100
VIEW_HEIGHT = 800
BACKGROUND_COLOR = (10, 12, 18)
GRID_COLOR = (40, 45, 60)
GRID_FINE_COLOR = (30, 34, 50)
VELOCITY_VECTOR_COLOR = (255, 255, 255)
EARTH_COLOR = (100, 149, 237)
MOON_COLOR = (190, 190, 190)
ASTEROID_COLOR = (200, 120, 60)
SPACECRAFT_COLOR = (120, 255, 160)

# Camera zoom bounds (meters-per-pixel)
DEFAULT_METERS_PER_PIXEL = 2.5e6
MIN_METERS_PER_PIXEL = 1e3
MAX_METERS_PER_PIXEL = 1e11

# Safety: avoid drawing outside reasonable integer pixel ranges
SAFE_COORD_LIMIT = 30000
