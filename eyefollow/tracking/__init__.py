"""
Face Tracking Module for eyefollow
Webcam face tracking that steers an eye model towards the viewer

Architecture:
- FrameSource:           Opens the webcam at its highest resolution, yields RGB frames
- to_intensity:          RGB -> 8-bit luminance
- FaceLocator:           Haar cascade detector, best face first
- normalize_position:    Face centre -> (nx, ny) in [-1, 1]
- SharedGazeState:       Lock-guarded single slot between the two threads
- FaceTrackingCollector: Background detection loop (~30 Hz, daemon thread)
- GazeSmoother:          Per-tick slerp of the eye rotation towards the target

Usage:
    state = SharedGazeState()
    collector = FaceTrackingCollector(state, TrackingConfig.for_session())
    collector.start()

    smoother = GazeSmoother(state)
    # once per rendered frame
    orientation = smoother.tick()
"""

from .config import FaceLocatorConfig, SmootherConfig, TrackingConfig
from .errors import (
    TrackingError,
    DeviceUnavailable,
    CaptureFailed,
    DecodeFailed,
    ModelMissing,
    ModelFetchFailed,
    StateCorrupted,
)
from .frames import Frame, IntensityMap, to_intensity
from .camera import CameraStream, FrameSource
from .locator import DetectedRegion, FaceLocator, ensure_model
from .state import SharedGazeState
from .smoother import GazeSmoother, Orientation
from .collector import FaceTrackingCollector
from .utils import normalize_position

__all__ = [
    'TrackingConfig',
    'FaceLocatorConfig',
    'SmootherConfig',
    'TrackingError',
    'DeviceUnavailable',
    'CaptureFailed',
    'DecodeFailed',
    'ModelMissing',
    'ModelFetchFailed',
    'StateCorrupted',
    'Frame',
    'IntensityMap',
    'to_intensity',
    'CameraStream',
    'FrameSource',
    'DetectedRegion',
    'FaceLocator',
    'ensure_model',
    'normalize_position',
    'SharedGazeState',
    'GazeSmoother',
    'Orientation',
    'FaceTrackingCollector',
]

__version__ = '1.0.0'
