"""
Face Tracking Collector
Background detection loop: capture, convert, detect, normalise, publish
"""

import logging
import threading
from typing import Optional

from .camera import CameraStream, FrameSource
from .config import TrackingConfig
from .errors import CaptureFailed, DecodeFailed, ModelMissing
from .frames import Frame, to_intensity
from .locator import FaceLocator, ensure_model
from .state import GazeTarget, SharedGazeState
from .utils import normalize_position

logger = logging.getLogger(__name__)


class FaceTrackingCollector:
    """
    Face tracking collector - the detection context

    Owns the camera for its whole lifetime and runs in a daemon thread at
    ~30 Hz, publishing the first detected face of each frame (or None) into
    the shared gaze state. Nothing else crosses over to the render loop.

    Termination contract: the thread is a daemon and is simply torn down when
    the process exits. stop() is a cooperative alternative for callers that
    want the camera released early; nothing depends on it being called.
    """

    def __init__(
            self,
            state: SharedGazeState,
            config: Optional[TrackingConfig] = None,
            frame_source: Optional[FrameSource] = None,
            locator: Optional[FaceLocator] = None,
    ):
        """
        Initialize face tracking collector

        Args:
            state:        Shared gaze slot to publish into
            config:       Tracking configuration
            frame_source: Camera opener (defaults to an OpenCV FrameSource)
            locator:      Face detector (defaults to a FaceLocator built from config)
        """
        self.state = state
        self.config = config if config else TrackingConfig.for_session()
        self.frame_source = frame_source or FrameSource(self.config)
        self.locator = locator

        self.stream: Optional[CameraStream] = None

        # State management
        self.is_running = False
        self.detection_enabled = False
        self.collection_thread = None
        self.stop_event = threading.Event()

        # Diagnostics
        self.frame_count = 0
        self.detection_count = 0
        self.capture_failures = 0
        self.decode_failures = 0

        logger.info(f"Face tracking collector initialized for camera {self.config.camera_index}")

    def start(self):
        """
        Open the camera and start the detection thread.

        Raises:
            DeviceUnavailable if the camera cannot be opened. The gaze state
            then simply never receives a face.

        Returns:
            None.
        """
        if self.is_running:
            logger.warning("Face tracking collector already running")
            return

        try:
            self.stream = self.frame_source.open(self.config.camera_index)
        except Exception as e:
            logger.error(f"✗ Failed to open camera {self.config.camera_index}: {e}", exc_info=True)
            self.is_running = False
            raise

        self.is_running = True
        self.stop_event.clear()
        self.frame_count = 0
        self.detection_count = 0

        self.collection_thread = threading.Thread(
            target=self._collection_loop,
            name="FaceTracking-Thread",
            daemon=True
        )
        self.collection_thread.start()

        logger.info("✓ Face tracking started")

    def stop(self):
        """
        Signal the detection thread to stop and release the camera.

        Returns:
            None.
        """
        if not self.is_running:
            logger.warning("Face tracking collector not running")
            return

        logger.info("Stopping face tracking...")
        self.stop_event.set()

        if self.collection_thread and self.collection_thread.is_alive():
            self.collection_thread.join(timeout=5)

        self._release_camera()
        self.is_running = False
        logger.info(f"✓ Face tracking stopped — {self.frame_count} frames, {self.detection_count} detections")

    def process_frame(self, frame: Frame) -> GazeTarget:
        """
        Run one frame through the detector.

        Args:
            frame: Captured RGB frame.

        Returns:
            Normalised (nx, ny) of the best face, or None when there is none.

        Raises:
            DecodeFailed if the frame buffer is malformed.
        """
        intensity = to_intensity(frame)
        faces = self.locator.detect(intensity)
        if not faces:
            return None
        return normalize_position(faces[0], frame.width, frame.height)

    def step(self) -> float:
        """
        One iteration of the detection loop.

        Returns:
            Seconds to wait before the next iteration.
        """
        try:
            frame = self.stream.next_frame()
        except CaptureFailed as e:
            self.capture_failures += 1
            logger.warning(f"Error capturing frame: {e}")
            return self.config.capture_retry_delay
        except DecodeFailed as e:
            self.decode_failures += 1
            logger.warning(f"Error decoding frame: {e}")
            return 0.0

        self.frame_count += 1

        try:
            target = self.process_frame(frame)
        except DecodeFailed as e:
            self.decode_failures += 1
            logger.warning(f"Skipping malformed frame: {e}")
            return 0.0

        self.state.publish(target)

        if target is not None:
            self.detection_count += 1
            if self.frame_count % self.config.log_every_n_frames == 0:
                logger.info(f"Tracking face at ({target[0]:.2f}, {target[1]:.2f})")

        return self.config.loop_interval

    def get_status(self) -> dict:
        """
        Return the current collector state.

        Returns:
            Dict containing running state, detector state, camera resolution
            and frame/detection/failure counts.
        """
        return {
            'sensor_type': 'face_tracking',
            'camera_index': self.config.camera_index,
            'is_running': self.is_running,
            'detection_enabled': self.detection_enabled,
            'resolution': self.stream.resolution if self.stream and self.stream.capture else None,
            'frames_captured': self.frame_count,
            'detections': self.detection_count,
            'capture_failures': self.capture_failures,
            'decode_failures': self.decode_failures,
        }

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _prepare_detector(self) -> bool:
        """
        Make the detector usable, downloading its model if needed.

        Returns:
            True if detection can run, False if it is disabled for good.
        """
        if self.locator is None:
            self.locator = FaceLocator(self.config.locator)
        if self.locator.is_loaded:
            return True

        logger.info("Initializing face detector...")
        try:
            model_path = ensure_model(self.config.locator, self.config.model_dir)
            self.locator.load(model_path)
        except ModelMissing as e:
            logger.error(f"✗ Face detection disabled: {e}")
            return False
        return True

    def _collection_loop(self):
        """
        Main detection loop, runs in a background thread.

        Returns:
            None.
        """
        logger.info("Face tracking loop started")

        try:
            self.detection_enabled = self._prepare_detector()
        except Exception as e:
            logger.error(f"✗ Face detection disabled, detector failed to initialize: {e}", exc_info=True)
            self.detection_enabled = False

        if not self.detection_enabled:
            self.state.publish(None)
            self._release_camera()
            logger.warning("⚠ Eyes will rest at centre — no face will be tracked")
            return

        logger.info("Face detector ready - eyes will track detected faces")

        while not self.stop_event.is_set():
            try:
                delay = self.step()
            except Exception as e:
                logger.error(f"Error in face tracking loop: {e}", exc_info=True)
                delay = self.config.capture_retry_delay

            if delay:
                self.stop_event.wait(delay)

        logger.info("Face tracking loop stopped")

    def _release_camera(self):
        if self.stream is not None:
            self.stream.release()

    def __repr__(self):
        """String representation showing running state."""
        status = "running" if self.is_running else "stopped"
        return f"<FaceTrackingCollector(status={status}, frames={self.frame_count})>"
