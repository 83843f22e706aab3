"""
Camera Frame Source
OpenCV webcam capture delivering RGB frames
"""

import logging
from typing import Optional, Tuple

import cv2

from .config import TrackingConfig
from .errors import CaptureFailed, DeviceUnavailable
from .frames import Frame

logger = logging.getLogger(__name__)


class CameraStream:
    """
    An open camera device.

    Owned by exactly one detection thread for its whole lifetime.
    """

    def __init__(self, capture, device_index: int):
        self.capture = capture
        self.device_index = device_index

    @property
    def resolution(self) -> Tuple[int, int]:
        """Negotiated (width, height) as reported by the driver"""
        width = int(self.capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(self.capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        return width, height

    def next_frame(self) -> Frame:
        """
        Grab and decode the next frame.

        Returns:
            Frame in RGB order.

        Raises:
            CaptureFailed if the device returned no frame.
            DecodeFailed if the returned payload is not a 3-channel 8-bit image.
        """
        ok, image = self.capture.read()
        if not ok or image is None:
            raise CaptureFailed(f"Camera {self.device_index} returned no frame")
        return Frame.from_bgr(image)

    def release(self):
        """Release the device handle"""
        if self.capture is not None:
            self.capture.release()
            self.capture = None
            logger.info(f"Camera {self.device_index} released")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()

    def __repr__(self):
        state = "open" if self.capture is not None else "released"
        return f"<CameraStream(index={self.device_index}, {state})>"


class FrameSource:
    """Opens camera devices at the highest resolution they advertise"""

    def __init__(self, config: Optional[TrackingConfig] = None, capture_factory=None):
        """
        Args:
            config:          TrackingConfig providing the requested format.
            capture_factory: Callable taking a device index and returning a
                             cv2.VideoCapture-like object. Defaults to cv2.VideoCapture.
        """
        self.config = config or TrackingConfig.for_session()
        self.capture_factory = capture_factory or cv2.VideoCapture

    def open(self, device_index: int) -> CameraStream:
        """
        Open a camera and request its largest frame size.

        Args:
            device_index: Zero-based camera index.

        Returns:
            CameraStream ready for next_frame().

        Raises:
            DeviceUnavailable if the device cannot be opened.
        """
        logger.info(f"Initializing camera {device_index}...")
        try:
            capture = self.capture_factory(device_index)
        except cv2.error as e:
            raise DeviceUnavailable(f"Camera {device_index} could not be created: {e}") from e

        if capture is None or not capture.isOpened():
            if capture is not None:
                capture.release()
            raise DeviceUnavailable(f"Camera {device_index} could not be opened")

        # Drivers clamp an oversized request to their largest supported format
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.request_width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.request_height)

        stream = CameraStream(capture, device_index)
        width, height = stream.resolution
        logger.info(f"✓ Camera opened successfully ({width}x{height})")
        return stream
