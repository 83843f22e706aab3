"""
Gaze Smoother
Turns the latest face position into eye rotation, easing towards it
once per render tick
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import SmootherConfig
from .state import SharedGazeState
from .utils import IDENTITY, quat_from_yaw_pitch, slerp, yaw_pitch_from_quat


@dataclass
class Orientation:
    """Eye rotation in radians"""

    yaw: float = 0.0
    pitch: float = 0.0

    @property
    def quaternion(self) -> np.ndarray:
        return quat_from_yaw_pitch(self.yaw, self.pitch)


class GazeSmoother:
    """
    Per-eye smoothing state machine.

    Each tick samples the shared gaze state, maps the normalised position to
    a target rotation inside the eye's range of motion, and slerps the current
    rotation a fixed fraction of the way towards it. The approach is
    exponential, so its time constant depends on the render rate.

    No face means "look centre".
    """

    def __init__(self, state: SharedGazeState, config: Optional[SmootherConfig] = None):
        """
        Args:
            state:  Shared gaze slot written by the detection thread.
            config: Range of motion and blend factor. Defaults to SmootherConfig().
        """
        self.state = state
        self.config = config or SmootherConfig()
        self.current_rotation = IDENTITY.copy()
        self.tick_count = 0

    @property
    def orientation(self) -> Orientation:
        yaw, pitch = yaw_pitch_from_quat(self.current_rotation)
        return Orientation(yaw=yaw, pitch=pitch)

    def target_orientation(self, nx: float, ny: float) -> Orientation:
        """
        Map a normalised position to the rotation the eye should reach.

        The horizontal sign is flipped to mirror a front-facing camera.

        Args:
            nx: Horizontal position, -1 (left) to 1 (right).
            ny: Vertical position, -1 (bottom) to 1 (top).

        Returns:
            Target Orientation.
        """
        return Orientation(
            yaw=-nx * self.config.max_yaw,
            pitch=ny * self.config.max_pitch,
        )

    def tick(self) -> Orientation:
        """
        Advance one render tick.

        Returns:
            The new current Orientation.
        """
        nx, ny = self.state.read() or (0.0, 0.0)
        target = self.target_orientation(nx, ny)

        self.current_rotation = slerp(
            self.current_rotation,
            target.quaternion,
            self.config.blend_factor,
        )
        self.tick_count += 1
        return self.orientation

    def reset(self):
        """Snap back to rest"""
        self.current_rotation = IDENTITY.copy()
        self.tick_count = 0

    def __repr__(self):
        o = self.orientation
        return f"<GazeSmoother(yaw={o.yaw:.3f}, pitch={o.pitch:.3f}, ticks={self.tick_count})>"
