#!/usr/bin/env python3
"""
Vector helper functions for 3D operations.

These are small, fast functions for vector math used throughout the app.
Vectors are plain (x, y, z) tuples of floats.
"""
import math
from typing import Tuple

Vec3 = Tuple[float, float, float]

ZERO: Vec3 = (0.0, 0.0, 0.0)


def clamp(x: float, a: float, b: float) -> float:
    """Clamp x to the inclusive range [a, b]."""
    return max(a, min(b, x))


def vec_add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def vec_sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def vec_scale(a: Vec3, s: float) -> Vec3:
    return (a[0] * s, a[1] * s, a[2] * s)


def vec_neg(a: Vec3) -> Vec3:
    return (-a[0], -a[1], -a[2])


def vec_len(a: Vec3) -> float:
    return math.sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])


def vec_dist(a: Vec3, b: Vec3) -> float:
    return vec_len(vec_sub(a, b))

