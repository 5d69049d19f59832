#!/usr/bin/env python3
"""
Camera utilities for projecting the mission (XY plane) onto the 2D viewport.
"""
from typing import Iterable, Optional, Tuple

from .constants import (
    DEFAULT_METERS_PER_PIXEL,
    MAX_METERS_PER_PIXEL,
    MIN_METERS_PER_PIXEL,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from .vector_utils import Vec3, clamp


class Camera2D:
    """
    Top-down camera that maps world coordinates (meters) to screen pixels.
    The z component of world positions is ignored.
    """

    def __init__(self, center=(0.0, 0.0), meters_per_pixel=DEFAULT_METERS_PER_PIXEL):
        self.center = [center[0], center[1]]
        self.mpp = meters_per_pixel
        self.viewport_size = (VIEW_WIDTH, VIEW_HEIGHT)

    def set_viewport_size(self, w: int, h: int) -> None:
        self.viewport_size = (w, h)

    def world_to_screen(self, pos: Vec3) -> Tuple[int, int]:
        cx, cy = self.center
        px = (pos[0] - cx) / self.mpp + self.viewport_size[0] / 2
        # Screen y grows downwards; world +y is drawn upwards.
        py = self.viewport_size[1] / 2 - (pos[1] - cy) / self.mpp
        return (int(px), int(py))

    def screen_to_world(self, screen: Tuple[int, int]) -> Vec3:
        cx, cy = self.center
        wx = (screen[0] - self.viewport_size[0] / 2) * self.mpp + cx
        wy = (self.viewport_size[1] / 2 - screen[1]) * self.mpp + cy
        return (wx, wy, 0.0)

    def zoom(self, factor, pivot_screen: Optional[Tuple[int, int]] = None):
        factor = clamp(factor, 0.05, 20.0)
        before = None
        if pivot_screen is not None:
            before = self.screen_to_world(pivot_screen)
        self.mpp = clamp(self.mpp * (1.0 / factor), MIN_METERS_PER_PIXEL, MAX_METERS_PER_PIXEL)
        if pivot_screen is not None and before is not None:
            after = self.screen_to_world(pivot_screen)
            self.center[0] += (before[0] - after[0])
            self.center[1] += (before[1] - after[1])

    def pan_pixels(self, dx_pixels, dy_pixels):
        self.center[0] -= dx_pixels * self.mpp
        self.center[1] += dy_pixels * self.mpp

    def fit(self, positions: Iterable[Vec3], margin: float = 1.3) -> None:
        """Centre on the given positions and zoom so they all fit on screen."""
        positions = list(positions)
        if not positions:
            self.center = [0.0, 0.0]
            self.mpp = DEFAULT_METERS_PER_PIXEL
            return
        xs = [p[0] for p in positions]
        ys = [p[1] for p in positions]
        minx, maxx = min(xs), max(xs)
        miny, maxy = min(ys), max(ys)
        width_m = (maxx - minx) * margin + 1.0
        height_m = (maxy - miny) * margin + 1.0
        mpp_x = width_m / max(self.viewport_size[0], 1)
        mpp_y = height_m / max(self.viewport_size[1], 1)
        self.center = [(minx + maxx) / 2, (miny + maxy) / 2]
        self.mpp = clamp(max(mpp_x, mpp_y), MIN_METERS_PER_PIXEL, MAX_METERS_PER_PIXEL)
