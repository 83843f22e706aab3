"""
eyefollow - Tracking Pipeline
=============================
Central module that owns the lifecycle of the face tracking components.

Usage in run.py:
    pipeline = TrackingPipeline(config)
    pipeline.start()
    # ... host calls pipeline.smoother.tick() once per rendered frame ...
    pipeline.stop()

Components managed:
    - FaceTrackingCollector : webcam + Haar cascade detection (daemon thread)
    - SharedGazeState       : the only object the two threads share
    - GazeSmoother          : rotation easing, driven by the render host

Failure policy:
    If face tracking fails to start (no camera), the failure is recorded and
    the pipeline keeps going. The smoother then always sees "no face" and the
    eye rests at centre.
"""

import logging
from typing import Optional

from eyefollow.tracking.collector import FaceTrackingCollector
from eyefollow.tracking.config import TrackingConfig
from eyefollow.tracking.smoother import GazeSmoother
from eyefollow.tracking.state import SharedGazeState

logger = logging.getLogger(__name__)


COMPONENT_FACE_TRACKING = 'face_tracking'


class TrackingPipeline:
    """
    Owns the face tracking components for a single run.

    Responsibilities:
      - Build the shared gaze state, collector and smoother
      - Start the detection thread, recording whether it came up
      - Provide a clean start() / stop() interface for run.py
      - Report component state via get_status()
    """

    def __init__(
        self,
        config: Optional[TrackingConfig] = None,
        collector: Optional[FaceTrackingCollector] = None,
    ):
        """
        Args:
            config    : TrackingConfig for camera, detector and smoother
            collector : Pre-built collector (tests inject one with fakes)
        """
        self.config = config or TrackingConfig.for_session()

        if collector is not None:
            self.state = collector.state
            self.collector = collector
        else:
            self.state = SharedGazeState(read_timeout=self.config.read_timeout)
            self.collector = FaceTrackingCollector(self.state, self.config)

        self.smoother = GazeSmoother(self.state, self.config.smoother)

        self._active: list = []
        self._failed: list = []

        logger.info(f"TrackingPipeline created (camera {self.config.camera_index}, mode {self.config.mode})")

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def start(self):
        """
        Start face tracking.
        A failed start is logged and skipped.
        """
        logger.info("=" * 55)
        logger.info("  eyefollow tracking pipeline — starting")
        logger.info("=" * 55)

        self._init_face_tracking()

        logger.info(
            f"Pipeline ready — active: {self._active or 'none'} | "
            f"failed: {self._failed or 'none'}"
        )

    def stop(self):
        """
        Stop the detection thread and release the camera.
        """
        logger.info("Stopping tracking pipeline...")
        if COMPONENT_FACE_TRACKING in self._active:
            try:
                self.collector.stop()
            except Exception as e:
                logger.error(f"✗ Error stopping face tracking: {e}", exc_info=True)
        logger.info("✓ Tracking pipeline stopped")

    def get_status(self) -> dict:
        """
        Return a summary of component states for logging.
        """
        return {
            'active_components' : self._active,
            'failed_components' : self._failed,
            'face_tracking'     : self.collector.get_status(),
            'smoother'          : {
                'ticks': self.smoother.tick_count,
                'orientation': self.smoother.orientation,
            },
        }

    # -----------------------------------------------------------------------
    # Private
    # -----------------------------------------------------------------------

    def _init_face_tracking(self):
        """Open the camera and start the detection thread."""
        try:
            self.collector.start()
            self._active.append(COMPONENT_FACE_TRACKING)
            logger.info(f"✓ Face tracking initialised (~{self.config.target_fps:.0f} Hz)")
        except Exception as e:
            self._handle_failure(COMPONENT_FACE_TRACKING, e)

    def _handle_failure(self, name: str, exc: Exception):
        """
        Mark a component as failed. The run continues without it.
        """
        self._failed.append(name)
        logger.warning(
            f"⚠ {name} failed to initialise — skipping. "
            f"Error: {type(exc).__name__}: {exc}"
        )

    # -----------------------------------------------------------------------
    # Dunder helpers
    # -----------------------------------------------------------------------

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    def __repr__(self):
        return (
            f"<TrackingPipeline("
            f"active={self._active}, "
            f"failed={self._failed})>"
        )
