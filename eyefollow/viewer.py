"""
eyefollow render hosts
Pygame eye window, and a headless ticker for machines without a display.
Both call GazeSmoother.tick() once per frame and apply the result; neither
touches the camera.
"""

import logging
import time
from typing import Optional

import numpy as np
import pygame as pg

from eyefollow.tracking.smoother import GazeSmoother, Orientation
from eyefollow.tracking.utils import quat_to_matrix

logger = logging.getLogger(__name__)

WINDOW_TITLE = 'Face Tracking Eyes - Press ESC to quit'

BACKGROUND = (25,  25,  35)
SCLERA     = (240, 240, 235)
OUTLINE    = (90,  90,  100)
IRIS       = (60,  120, 170)
PUPIL      = (10,  10,  10)
GLINT      = (255, 255, 255)
TEXT       = (150, 150, 160)

QUIT_KEYS = (pg.K_ESCAPE, pg.K_q)


def project_gaze(rotation: np.ndarray, center, radius: float):
    """
    Screen position of the iris for a rotated eyeball.

    The eye looks down +X at rest and is viewed from +X with +Y up, so the
    screen's right is world -Z.

    Args:
        rotation: (w, x, y, z) eye rotation
        center:   Eyeball centre on screen (pixels)
        radius:   Eyeball radius on screen (pixels)

    Returns:
        ((sx, sy), facing) where facing is the forward axis' X component,
        1.0 looking straight out of the screen.
    """
    forward = quat_to_matrix(rotation) @ np.array([1.0, 0.0, 0.0])
    sx = center[0] - forward[2] * radius
    sy = center[1] - forward[1] * radius
    return (sx, sy), float(forward[0])


class EyeViewer:
    """Pygame window drawing one eyeball that follows the tracked face"""

    def __init__(
        self,
        smoother: GazeSmoother,
        width: int = 800,
        height: int = 600,
        fps: int = 60,
        show_hud: bool = True,
    ):
        self.smoother = smoother
        self.width = width
        self.height = height
        self.fps = fps
        self.show_hud = show_hud

        self.window = None
        self.clock = None
        self._font = None
        self.frame_count = 0

    def run(self):
        """
        Open the window and render until Esc, Q or the window is closed.

        Returns:
            None.
        """
        pg.init()
        try:
            self.window = pg.display.set_mode((self.width, self.height))
            pg.display.set_caption(WINDOW_TITLE)
            self.clock = pg.time.Clock()
            pg.font.init()
            self._font = pg.font.SysFont('couriernew', 16)

            logger.info("✓ Eye rendering initialized")
            logger.info("Eyes will track any detected faces from your webcam")

            running = True
            while running:
                for event in pg.event.get():
                    if event.type == pg.QUIT:
                        running = False
                    elif event.type == pg.KEYDOWN and event.key in QUIT_KEYS:
                        logger.info("Quit requested")
                        running = False

                orientation = self.smoother.tick()
                self.draw(self.window, orientation)
                pg.display.flip()

                self.frame_count += 1
                self.clock.tick(self.fps)
        finally:
            pg.quit()

    def draw(self, surface, orientation: Orientation):
        """
        Draw the eyeball for the current rotation.

        Args:
            surface:     Target pygame surface
            orientation: Current eye orientation (shown in the HUD)
        """
        w, h = surface.get_width(), surface.get_height()
        center = (w / 2, h / 2)
        radius = min(w, h) * 0.35

        surface.fill(BACKGROUND)
        pg.draw.circle(surface, SCLERA, center, radius)
        pg.draw.circle(surface, OUTLINE, center, radius, 3)

        (ix, iy), facing = project_gaze(self.smoother.current_rotation, center, radius)

        # Iris foreshortens as it turns away from the viewer
        squash = max(0.35, facing)
        iris_r = radius * 0.38
        pupil_r = radius * 0.16

        iris_rect = pg.Rect(0, 0, iris_r * 2 * squash, iris_r * 2)
        iris_rect.center = (ix, iy)
        pg.draw.ellipse(surface, IRIS, iris_rect)

        pupil_rect = pg.Rect(0, 0, pupil_r * 2 * squash, pupil_r * 2)
        pupil_rect.center = (ix, iy)
        pg.draw.ellipse(surface, PUPIL, pupil_rect)

        pg.draw.circle(surface, GLINT, (ix + pupil_r * 0.5, iy - pupil_r * 0.6), max(2, pupil_r * 0.25))

        if self.show_hud and self._font:
            target = self.smoother.state.read()
            label = "no face" if target is None else f"face ({target[0]:+.2f}, {target[1]:+.2f})"
            text = (
                f"yaw {np.degrees(orientation.yaw):+6.1f}°  "
                f"pitch {np.degrees(orientation.pitch):+6.1f}°  |  {label}"
            )
            surface.blit(self._font.render(text, True, TEXT), (12, h - 28))


class HeadlessHost:
    """
    Ticks the smoother at a fixed rate without a display and logs the
    orientation now and then. Ctrl+C quits.
    """

    def __init__(self, smoother: GazeSmoother, tick_rate: float = 60.0, log_interval: float = 2.0):
        self.smoother = smoother
        self.tick_rate = tick_rate
        self.log_interval = log_interval

    def run(self, duration: Optional[float] = None):
        """
        Tick until interrupted, or for duration seconds if given.

        Args:
            duration: Seconds to run; None runs until Ctrl+C.
        """
        period = 1.0 / self.tick_rate
        start = time.time()
        last_log = start

        logger.info(f"Headless host ticking at {self.tick_rate:.0f} Hz — Ctrl+C to quit")
        try:
            while duration is None or time.time() - start < duration:
                orientation = self.smoother.tick()

                now = time.time()
                if now - last_log >= self.log_interval:
                    logger.info(
                        f"Eye at yaw {np.degrees(orientation.yaw):+.1f}°, "
                        f"pitch {np.degrees(orientation.pitch):+.1f}°"
                    )
                    last_log = now

                time.sleep(period)
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
