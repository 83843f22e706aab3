"""
Frame Data
Captured colour frames and their grayscale intensity maps
"""

from dataclasses import dataclass

import cv2
import numpy as np

from .errors import DecodeFailed

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


@dataclass
class Frame:
    """One captured image: interleaved RGB, 8 bits per channel"""

    width: int
    height: int
    pixels: np.ndarray

    def validate(self) -> np.ndarray:
        """
        Check the buffer against the frame dimensions.

        Returns:
            The pixel buffer viewed as a (height, width, 3) uint8 array.

        Raises:
            DecodeFailed if the buffer is not width*height*3 bytes of uint8.
        """
        if self.width <= 0 or self.height <= 0:
            raise DecodeFailed(f"Invalid frame size {self.width}x{self.height}")

        pixels = np.asarray(self.pixels)
        if pixels.dtype != np.uint8:
            raise DecodeFailed(f"Expected uint8 pixels, got {pixels.dtype}")

        expected = self.width * self.height * 3
        if pixels.size != expected:
            raise DecodeFailed(
                f"Buffer holds {pixels.size} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGB"
            )

        return pixels.reshape(self.height, self.width, 3)

    @classmethod
    def from_bgr(cls, image) -> 'Frame':
        """
        Build a frame from an OpenCV BGR image.

        Args:
            image: Array returned by cv2.VideoCapture.read().

        Returns:
            Frame holding the RGB-ordered pixels.

        Raises:
            DecodeFailed if the image is not a 3-channel 8-bit array.
        """
        if image is None or getattr(image, 'ndim', 0) != 3 or image.shape[2] != 3:
            shape = getattr(image, 'shape', None)
            raise DecodeFailed(f"Expected a 3-channel image, got shape {shape}")
        if image.dtype != np.uint8:
            raise DecodeFailed(f"Expected uint8 image, got {image.dtype}")

        height, width = image.shape[:2]
        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        return cls(width=width, height=height, pixels=rgb)


@dataclass
class IntensityMap:
    """Single-channel grayscale view of a frame, shape (height, width)"""

    width: int
    height: int
    pixels: np.ndarray


def to_intensity(frame: Frame) -> IntensityMap:
    """
    Convert an RGB frame to luminance.

    Each pixel becomes round(0.299*R + 0.587*G + 0.114*B). The weights sum
    to 1, so the result of 8-bit inputs always fits in 8 bits.

    Args:
        frame: Frame to convert.

    Returns:
        IntensityMap with the same width and height.

    Raises:
        DecodeFailed if the frame buffer does not match its dimensions.
    """
    rgb = frame.validate()
    luma = np.rint(rgb.astype(np.float64) @ LUMA_WEIGHTS)
    return IntensityMap(
        width=frame.width,
        height=frame.height,
        pixels=luma.astype(np.uint8),
    )
