"""
Face Tracking Configuration
Camera, detector and smoothing parameters for the eye follower
"""

import math
from dataclasses import dataclass, field
from typing import Tuple


# Detector model asset, resolved against the working directory
MODEL_FILENAME = 'haarcascade_frontalface_default.xml'
MODEL_URL = (
    'https://raw.githubusercontent.com/opencv/opencv/master/'
    'data/haarcascades/haarcascade_frontalface_default.xml'
)


@dataclass
class FaceLocatorConfig:
    """
    Detector tuning, fixed at initialisation.

    The four search parameters trade recall for throughput. They are not
    changed at runtime: the ~30 Hz detection loop has no headroom for it.
    """

    # Search parameters
    min_face_size: int = 30                 # Smallest face searched for (pixels, full frame)
    score_threshold: float = 1.0            # Minimum final-stage cascade weight
    scale_factor: float = 0.8               # Per-pass pyramid shrink (< 1.0)
    stride: Tuple[int, int] = (2, 2)        # (step_x, step_y) between candidate windows

    # Cascade grouping
    min_neighbors: int = 3

    # Model asset
    model_filename: str = MODEL_FILENAME
    model_url: str = MODEL_URL
    download_timeout: float = 60.0          # seconds

    @property
    def opencv_scale_factor(self) -> float:
        """OpenCV grows the window instead of shrinking the image"""
        return 1.0 / self.scale_factor

    def validate(self):
        """
        Reject tuning values the detector cannot work with.

        Raises:
            ValueError if any search parameter is out of range.
        """
        if self.min_face_size <= 0:
            raise ValueError(f"min_face_size must be positive, got {self.min_face_size}")
        if not 0.0 < self.scale_factor < 1.0:
            raise ValueError(f"scale_factor must be in (0, 1), got {self.scale_factor}")
        if len(self.stride) != 2 or min(self.stride) < 1:
            raise ValueError(f"stride must be two positive steps, got {self.stride}")
        if self.min_neighbors < 0:
            raise ValueError(f"min_neighbors must be >= 0, got {self.min_neighbors}")


@dataclass
class SmootherConfig:
    """Physical range of motion of the eye and interpolation rate"""

    max_yaw: float = math.pi / 4     # ±45° horizontal
    max_pitch: float = math.pi / 6   # ±30° vertical
    blend_factor: float = 0.15       # Slerp fraction applied per render tick


@dataclass
class TrackingConfig:
    """Face tracking configuration for the detection and render contexts"""

    # Operating mode
    mode: str = 'session'  # 'session' (window) or 'headless'

    # Camera settings
    camera_index: int = 0
    request_width: int = 10000    # Driver clamps to its maximum
    request_height: int = 10000

    # Detection loop timing
    capture_retry_delay: float = 0.1    # seconds after a failed capture
    loop_interval: float = 0.033        # ~30 Hz

    # Diagnostics
    log_every_n_frames: int = 60

    # Shared gaze state
    read_timeout: float = 0.005         # seconds the render loop may wait for the slot

    # Where the detector model lives (relative paths resolve against cwd)
    model_dir: str = '.'

    locator: FaceLocatorConfig = field(default_factory=FaceLocatorConfig)
    smoother: SmootherConfig = field(default_factory=SmootherConfig)

    @property
    def target_fps(self) -> float:
        return 1.0 / self.loop_interval if self.loop_interval else 0.0

    @classmethod
    def for_session(cls, camera_index: int = 0) -> 'TrackingConfig':
        """
        Create a configuration for an interactive session with a window.

        Args:
            camera_index: Zero-based camera device index.

        Returns:
            TrackingConfig with mode='session'.
        """
        return cls(mode='session', camera_index=camera_index)

    @classmethod
    def for_headless(cls, camera_index: int = 0) -> 'TrackingConfig':
        """
        Create a configuration for running without a display.

        Args:
            camera_index: Zero-based camera device index.

        Returns:
            TrackingConfig with mode='headless'.
        """
        return cls(mode='headless', camera_index=camera_index)
