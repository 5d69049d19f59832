#!/usr/bin/env python3
"""
Asteroid Defense application entry point and UI/renderer coordination.

What this module does
- Loads the mission configuration and creates the MissionController that owns the
  bodies and mission state; all access is guarded by its re-entrant lock.
- Starts two event loops: a Pygame rendering thread (viewport) and the Dear PyGui UI
  (running on the main thread).
- Translates UI actions into controller commands (deploy, correction, difficulty,
  pause/resume, reset) and shows the controller's events, score and result.

Threading model
- PygameRenderer runs in a background thread and performs: viewport input handling,
  ticking the mission, and drawing. Every tick and snapshot takes the controller lock.
- The UI class runs in the main thread via Dear PyGui. It refreshes readouts on a periodic
  frame callback and invokes controller commands; these are lock-protected.

Units and conventions
- SI units throughout: meters [m], kilograms [kg], seconds [s]. Camera stores meters-per-pixel.
- Launch speed is entered in km/s, corrections in m/s.

Running
1) Install dependencies: `pip install -e .`
2) Run this module: `python mission_game.py [path/to/mission_config.json]`

Windows/OS notes
- Two windows will open: the viewport (Pygame) and the controls (Dear PyGui). Closing either
  will shut down the application cleanly.
"""

import logging
import math
import sys
import threading
import time
from typing import List, Optional

# GUI and Rendering libs
import pygame
from pygame import gfxdraw
import dearpygui.dearpygui as dpg

from mission.camera import Camera2D
from mission.config_loader import load_config
from mission.constants import (
    BACKGROUND_COLOR,
    GRID_COLOR,
    GRID_FINE_COLOR,
    SAFE_COORD_LIMIT,
    VELOCITY_VECTOR_COLOR,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from mission.controller import MissionController
from mission.data_models import ASTEROID, Strategy
from mission.errors import CommandRejected, ConfigLoadFailure
from mission.events import (
    AchievementUnlocked,
    CommandRejection,
    CorrectionApplied,
    MissionEnded,
    MissionEvent,
    MissionInitialized,
    PhaseChanged,
    SpacecraftDeployed,
)
from mission.physics import predict_trajectory
from mission.utils import format_countdown, format_mission_clock, try_float

PREDICTION_REFRESH_FRAMES = 30
PREDICTION_STEPS = 120
PREDICTION_COLOR = (120, 80, 40)

# ============================================================
# Pygame Renderer Thread
# ============================================================

class PygameRenderer(threading.Thread):
    """
    Pygame loop: ticks the mission, draws bodies, trails, velocity vectors, grid and HUD.
    Handles camera panning and zoom.
    """
    def __init__(self, mission: MissionController):
        super().__init__(daemon=True)
        self.mission = mission
        self.camera = Camera2D(center=(0.0, 0.0))
        self.surface = None
        self.clock = None
        self.dragging_background = False
        self.drag_start_screen = (0, 0)
        self.pan_speed_keys = 600  # pixels per second
        self.show_velocity_vectors = True
        self.running = True
        self._frame = 0
        self._predicted: List = []

    def auto_frame_camera(self):
        """Adjust camera to fit all bodies into view with margin."""
        snap = self.mission.snapshot()
        self.camera.fit(b.position for b in snap.bodies.values())

    def run(self):
        pygame.init()
        pygame.display.set_caption("Asteroid Defense - Viewport")
        self.surface = pygame.display.set_mode((VIEW_WIDTH, VIEW_HEIGHT), pygame.RESIZABLE)
        self.camera.set_viewport_size(VIEW_WIDTH, VIEW_HEIGHT)
        self.clock = pygame.time.Clock()
        self.auto_frame_camera()

        last_time = time.perf_counter()
        while self.running:
            now = time.perf_counter()
            real_dt = now - last_time
            last_time = now

            self.handle_events(real_dt)
            if real_dt > 0:
                self.mission.tick(real_dt)
            self.draw()

            # Limit FPS
            self.clock.tick(60)

        pygame.quit()

    def handle_events(self, real_dt):
        keys = pygame.key.get_pressed()
        if keys[pygame.K_LEFT]:
            self.camera.pan_pixels(self.pan_speed_keys * real_dt, 0)
        if keys[pygame.K_RIGHT]:
            self.camera.pan_pixels(-self.pan_speed_keys * real_dt, 0)
        if keys[pygame.K_UP]:
            self.camera.pan_pixels(0, self.pan_speed_keys * real_dt)
        if keys[pygame.K_DOWN]:
            self.camera.pan_pixels(0, -self.pan_speed_keys * real_dt)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self.camera.set_viewport_size(event.w, event.h)

            elif event.type == pygame.KEYDOWN and event.key == pygame.K_SPACE:
                if self.mission.snapshot().paused:
                    self.mission.resume()
                else:
                    self.mission.pause()

            elif event.type == pygame.MOUSEWHEEL:
                factor = 1.1 if event.y > 0 else 1.0 / 1.1
                self.camera.zoom(factor, pygame.mouse.get_pos())

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button in (1, 2, 3):
                self.dragging_background = True
                self.drag_start_screen = pygame.mouse.get_pos()

            elif event.type == pygame.MOUSEBUTTONUP and event.button in (1, 2, 3):
                self.dragging_background = False

            elif event.type == pygame.MOUSEMOTION and self.dragging_background:
                mouse = pygame.mouse.get_pos()
                dx = mouse[0] - self.drag_start_screen[0]
                dy = mouse[1] - self.drag_start_screen[1]
                self.camera.pan_pixels(dx, dy)
                self.drag_start_screen = mouse

    def _refresh_prediction(self):
        """Projected asteroid path, recomputed every few frames on copies of the bodies."""
        self._frame = (self._frame + 1) % PREDICTION_REFRESH_FRAMES
        if self._frame != 1:
            return
        with self.mission.lock:
            bodies = self.mission.bodies.active()
            horizon = max(self.mission.state.time_to_impact, 0.0)
            solver = self.mission.solver
            if horizon <= 0:
                self._predicted = []
                return
            self._predicted = predict_trajectory(bodies, ASTEROID, steps=PREDICTION_STEPS,
                                                 step_size=horizon / PREDICTION_STEPS, solver=solver)

    def draw_grid(self, surf):
        w, h = self.camera.viewport_size
        mpp = self.camera.mpp

        # Choose scale so grid lines land approximately 100 pixels apart, on a 1-2-5 sequence
        spacing_m = mpp * 100
        pow10 = 10 ** math.floor(math.log10(spacing_m)) if spacing_m > 0 else 1
        mant = spacing_m / pow10
        if mant < 2:
            spacing = 1 * pow10
        elif mant < 5:
            spacing = 2 * pow10
        else:
            spacing = 5 * pow10

        for step, color in ((spacing / 5, GRID_FINE_COLOR), (spacing, GRID_COLOR)):
            left, top, _ = self.camera.screen_to_world((0, 0))
            right, bottom, _ = self.camera.screen_to_world((w, h))
            x = math.floor(left / step) * step
            while x <= right:
                sx, _ = self.camera.world_to_screen((x, 0.0, 0.0))
                pygame.draw.line(surf, color, (sx, 0), (sx, h), 1)
                x += step
            y = math.floor(bottom / step) * step
            while y <= top:
                _, sy = self.camera.world_to_screen((0.0, y, 0.0))
                pygame.draw.line(surf, color, (0, sy), (w, sy), 1)
                y += step

    def draw(self):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)
        self.draw_grid(surf)
        self._refresh_prediction()

        # Copy what we need under the lock for consistency during draw
        with self.mission.lock:
            bodies = [(b.name, b.position, b.velocity, b.radius, b.color, list(b.trail))
                      for b in self.mission.bodies.active()]
        snap = self.mission.snapshot()

        # Projected asteroid path
        pts = [p for p in (_safe_point(self.camera.world_to_screen(q)) for q in self._predicted) if p]
        if len(pts) > 1:
            pygame.draw.lines(surf, PREDICTION_COLOR, False, pts, 1)

        for name, position, velocity, radius, color, trail in bodies:
            # Trails
            pts = [p for p in (_safe_point(self.camera.world_to_screen(q)) for q in trail) if p]
            if len(pts) > 1:
                pygame.draw.aalines(surf, color, False, pts)

            # Body, never smaller than a few pixels
            screen_pos = _safe_point(self.camera.world_to_screen(position))
            vis_r = min(50, max(3, int(radius / self.camera.mpp)))
            if screen_pos:
                gfxdraw.filled_circle(surf, screen_pos[0], screen_pos[1], vis_r, color)
                gfxdraw.aacircle(surf, screen_pos[0], screen_pos[1], vis_r, (0, 0, 0))
                draw_text(surf, name, screen_pos[0] + vis_r + 4, screen_pos[1] - 8, color)

            # Velocity vector, fixed pixel length along the heading
            speed = math.hypot(velocity[0], velocity[1])
            if self.show_velocity_vectors and screen_pos and speed > 0:
                end = (screen_pos[0] + int(30 * velocity[0] / speed),
                       screen_pos[1] - int(30 * velocity[1] / speed))
                end_s = _safe_point(end)
                if end_s:
                    pygame.draw.line(surf, VELOCITY_VECTOR_COLOR, screen_pos, end_s, 2)
                    draw_arrow_head(surf, end_s, screen_pos, VELOCITY_VECTOR_COLOR)

        # HUD text
        draw_text(surf, "Drag: pan | Wheel: zoom | Arrows: pan | Space: Pause/Resume", 10, 10, (200, 200, 200))
        draw_text(surf, f"{snap.phase.value}  {format_mission_clock(snap.mission_time)}  "
                        f"Impact in {format_countdown(snap.time_to_impact)}"
                        f"{'  [Paused]' if snap.paused else ''}", 10, 30, (200, 200, 200))
        if not math.isinf(snap.closest_approach):
            draw_text(surf, f"Closest approach: {snap.closest_approach / 1e6:.0f} Mm  "
                            f"Threat: {snap.threat_level}", 10, 50, (200, 200, 200))

        pygame.display.flip()

_cached_font = None

def draw_text(surface, text, x, y, color):
    global _cached_font
    if not pygame.font.get_init():
        pygame.font.init()
    if _cached_font is None:
        _cached_font = pygame.font.SysFont("consolas", 16)
    img = _cached_font.render(text, True, color)
    surface.blit(img, (x, y))

def _safe_point(pt):
    x, y = int(pt[0]), int(pt[1])
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None

def draw_arrow_head(surface, tip, tail, color):
    # Small triangle for arrow head
    dx = tip[0] - tail[0]
    dy = tip[1] - tail[1]
    ang = math.atan2(dy, dx)
    size = 8
    left = (tip[0] - size * math.cos(ang - math.pi / 6), tip[1] - size * math.sin(ang - math.pi / 6))
    right = (tip[0] - size * math.cos(ang + math.pi / 6), tip[1] - size * math.sin(ang + math.pi / 6))
    left_s = _safe_point(left)
    right_s = _safe_point(right)
    if left_s and right_s:
        pygame.draw.polygon(surface, color, [tip, left_s, right_s])

# ============================================================
# Dear PyGui UI
# ============================================================

class UI:
    """
    Dear PyGui interface: mission briefing, launch and correction controls, live readouts,
    mission log and achievements.
    """
    def __init__(self, mission: MissionController, renderer: PygameRenderer):
        self.mission = mission
        self.renderer = renderer
        self.status_msg_id = None
        self.log_id = None
        self._log_lines: List[str] = []
        self._build_ui()
        self._schedule_sync()

    def _schedule_sync(self):
        """Reschedule the periodic sync callback using frame callbacks (approx ~10Hz)."""
        dpg.set_frame_callback(dpg.get_frame_count() + 6, self._sync_ui_with_mission)

    # -----------------------
    # UI Construction
    # -----------------------

    def _build_ui(self):
        config = self.mission.config
        dpg.create_context()
        dpg.create_viewport(title='Asteroid Defense - Mission Control', width=520, height=820)

        with dpg.window(label="Mission Control", width=500, height=800, pos=(10, 10), tag="main_window"):
            scenario = config.scenario
            dpg.add_text(f"Threat: {scenario.name}")
            dpg.add_text(scenario.description, wrap=470)
            dpg.add_text(f"Asteroid diameter: {scenario.asteroid_size:g} m   "
                         f"Impact probability: {scenario.impact_probability * 100:.0f}%")
            dpg.add_text(scenario.scientific_context, wrap=470, color=(160, 160, 200))

            dpg.add_separator()
            with dpg.group(horizontal=True):
                dpg.add_text("Difficulty:")
                dpg.add_combo(list(config.difficulties), default_value=self.mission.difficulty, width=150,
                              callback=lambda s, a, u: self._set_difficulty(a), tag="difficulty_combo")
                dpg.add_button(label="Auto-fit Camera", callback=self.renderer.auto_frame_camera)
            dpg.add_text("", tag="briefing_text")

            dpg.add_separator()
            dpg.add_text("Launch")
            dpg.add_slider_float(label="Speed (km/s)", min_value=0.0, max_value=20.0, default_value=8.0,
                                 width=300, tag="deploy_speed")
            dpg.add_slider_float(label="Angle (deg)", min_value=-180.0, max_value=180.0, default_value=0.0,
                                 width=300, tag="deploy_angle")
            dpg.add_combo([s.value for s in Strategy], default_value=Strategy.KINETIC.value, width=150,
                          label="Strategy", tag="deploy_strategy")
            dpg.add_button(label="Deploy Spacecraft", callback=self._on_deploy, tag="deploy_button")

            dpg.add_separator()
            dpg.add_text("Mid-course Correction")
            with dpg.group(horizontal=True):
                dpg.add_input_text(label="Delta-V (m/s)", default_value="100.0", width=120, tag="correction_dv")
                dpg.add_button(label="Burn", callback=self._on_correction, tag="correction_button")

            dpg.add_separator()
            dpg.add_text("Simulation Controls")
            with dpg.group(horizontal=True):
                dpg.add_button(label="Pause/Resume", callback=self._toggle_pause)
                dpg.add_button(label="Reset Mission", callback=self._on_reset)
                dpg.add_checkbox(label="Velocity vectors", default_value=True,
                                 callback=lambda s, a, u: setattr(self.renderer, "show_velocity_vectors", a))
            self.status_msg_id = dpg.add_text("")

            dpg.add_separator()
            dpg.add_text("", tag="score_text")
            dpg.add_text("", tag="fuel_text")
            dpg.add_text("", tag="telemetry_text")

            dpg.add_separator()
            dpg.add_text("Achievements")
            for a in config.achievements:
                dpg.add_text(f"[ ] {a.name} (+{a.points}) - {a.description}", tag=f"achievement_{a.id}",
                             color=(120, 120, 120))

            dpg.add_separator()
            dpg.add_text("Mission Log")
            self.log_id = dpg.add_input_text(multiline=True, readonly=True, width=480, height=160)

        dpg.setup_dearpygui()
        dpg.show_viewport()
        dpg.set_primary_window("main_window", True)
        self._update_briefing()

    # -----------------------
    # UI Callbacks
    # -----------------------

    def _set_status(self, msg: str, color=(180, 220, 180)):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=color)

    def _set_error(self, msg: str):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=(255, 120, 120))

    def _update_briefing(self):
        d = self.mission.settings
        dpg.set_value("briefing_text",
                      f"Time to impact: {d.time_to_impact_days:g} days   Delta-V: {d.spacecraft_delta_v:g} m/s   "
                      f"Corrections: {d.corrections_allowed}")

    def _set_difficulty(self, name: str):
        try:
            self.mission.set_difficulty(name)
        except CommandRejected as e:
            dpg.set_value("difficulty_combo", self.mission.difficulty)
            self._set_error(str(e))
            return
        self._update_briefing()
        self.renderer.auto_frame_camera()
        self._set_status(f"Difficulty set to {self.mission.settings.name}.")

    def _on_deploy(self):
        try:
            self.mission.deploy(float(dpg.get_value("deploy_speed")), float(dpg.get_value("deploy_angle")),
                                Strategy(dpg.get_value("deploy_strategy")))
        except CommandRejected as e:
            self._set_error(str(e))

    def _on_correction(self):
        delta_v = try_float(dpg.get_value("correction_dv"))
        if delta_v is None:
            self._set_error("Delta-V must be a number.")
            return
        try:
            self.mission.apply_correction(delta_v)
        except CommandRejected as e:
            self._set_error(str(e))

    def _toggle_pause(self):
        snap = self.mission.snapshot()
        if snap.paused:
            self.mission.resume()
        else:
            self.mission.pause()
        self._set_status("Mission paused." if not snap.paused else "Mission resumed.")

    def _on_reset(self):
        self.mission.reset()
        self._log_lines.clear()
        self.renderer.auto_frame_camera()
        self._set_status("Mission reset.")

    def _log(self, mission_time: float, text: str):
        self._log_lines.append(f"{format_mission_clock(mission_time)}  {text}")
        dpg.set_value(self.log_id, "\n".join(self._log_lines[-200:]))

    def _handle_event(self, event: MissionEvent):
        if isinstance(event, MissionInitialized):
            self._log(event.mission_time, f"Mission initialized ({event.difficulty})")
        elif isinstance(event, PhaseChanged):
            self._log(event.mission_time, f"Phase: {event.phase.value}")
        elif isinstance(event, SpacecraftDeployed):
            self._log(event.mission_time, f"Spacecraft deployed: {event.strategy.value} strategy")
            self._set_status("Spacecraft deployed.")
        elif isinstance(event, CorrectionApplied):
            self._log(event.mission_time, f"Mid-course correction: {event.delta_v:.1f} m/s")
        elif isinstance(event, CommandRejection):
            self._log(event.mission_time, f"{event.command} rejected: {event.message}")
        elif isinstance(event, AchievementUnlocked):
            self._log(event.mission_time, f"Achievement Unlocked: {event.name} (+{event.points} pts)")
            tag = f"achievement_{event.achievement_id}"
            dpg.set_value(tag, dpg.get_value(tag).replace("[ ]", "[x]", 1))
            dpg.configure_item(tag, color=(255, 215, 0))
        elif isinstance(event, MissionEnded):
            self._show_result(event)

    def _show_result(self, event: MissionEnded):
        r = event.result
        if r.success:
            self._set_status(f"MISSION SUCCESS - score {r.final_score:,}")
        else:
            reason = {"IMPACT": "The asteroid impacted Earth!",
                      "TIME_UP": "Time ran out before achieving safe deflection."}.get(r.reason.value, "")
            self._set_error(f"MISSION FAILED - {reason}")
        miss = "n/a" if math.isinf(r.closest_approach) else f"{r.closest_approach / 1e6:.0f} Mm"
        self._log(event.mission_time,
                  f"Result: score {r.final_score:,}, miss distance {miss}, fuel {r.fuel_percent:.0f}%, "
                  f"corrections {r.corrections_used}, achievements {r.achievement_count}")

    def _sync_ui_with_mission(self):
        """Periodic UI update: drain controller events and refresh readouts."""
        for event in self.mission.drain_events():
            self._handle_event(event)

        snap = self.mission.snapshot()
        dpg.set_value("score_text", f"Score: {snap.score:,}   x{snap.multiplier:.1f}   Phase: {snap.phase.value}")
        dpg.set_value("fuel_text",
                      f"Fuel: {snap.fuel_percent:.0f}%   Delta-V: {snap.delta_v_remaining:.0f} m/s   "
                      f"Corrections: {snap.corrections_used}/{snap.corrections_allowed}")
        dpg.configure_item("deploy_button", enabled=not snap.deployed)
        dpg.configure_item("correction_button",
                           enabled=snap.deployed and snap.corrections_used < snap.corrections_allowed)

        history = self.mission.telemetry.history()
        if history:
            s = history[-1]
            dpg.set_value("telemetry_text",
                          f"Asteroid distance: {s.distance_to_earth_km:,.0f} km   "
                          f"Relative velocity: {s.relative_velocity / 1000:.2f} km/s   "
                          f"Energy: {s.total_energy / 1e9:.1f} GJ\n"
                          f"Asteroid trajectory: {'flyby' if s.asteroid_orbital_energy > 0 else 'bound'} "
                          f"({s.asteroid_orbital_energy / 1e18:.2f} EJ)")

        # Reschedule next sync
        self._schedule_sync()

# ============================================================
# Application Entry
# ============================================================

def main(argv: Optional[List[str]] = None):
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s - %(levelname)s - %(module)s - %(message)s')
    argv = sys.argv[1:] if argv is None else argv
    try:
        config = load_config(argv[0] if argv else None)
    except ConfigLoadFailure as e:
        logging.critical(f"FATAL CONFIGURATION ERROR: {e}")
        return 1

    mission = MissionController(config)
    renderer = PygameRenderer(mission)

    # Start Pygame renderer thread
    renderer.start()

    ui = UI(mission, renderer)

    # Keyboard shortcut in UI window to toggle pause (Space)
    with dpg.handler_registry():
        dpg.add_key_press_handler(dpg.mvKey_Spacebar, callback=lambda s, a: ui._toggle_pause())

    # Run Dear PyGui event loop
    try:
        dpg.start_dearpygui()
    finally:
        renderer.running = False
        renderer.join(timeout=2.0)
        dpg.destroy_context()
    return 0

if __name__ == "__main__":
    sys.exit(main())
