"""
Shared Gaze State
Single-slot hand-off of the latest face position from the detection
thread to the render loop
"""

import logging
import math
import threading
from typing import Optional, Tuple

from .errors import StateCorrupted

logger = logging.getLogger(__name__)

GazeTarget = Optional[Tuple[float, float]]


def _is_valid_target(value) -> bool:
    if value is None:
        return True
    if not isinstance(value, tuple) or len(value) != 2:
        return False
    return all(
        isinstance(c, float) and math.isfinite(c) and -1.0 <= c <= 1.0
        for c in value
    )


class SharedGazeState:
    """
    Thread-safe single slot holding the latest normalised face position.

    This is a sampling relationship, not a queue: the reader only ever sees
    the most recent publish, intermediate values are dropped. The slot starts
    empty (None = no face visible).

    A reader that cannot get a consistent snapshot in time gets None rather
    than an exception, so a detection-side problem can only ever re-centre
    the gaze.
    """

    def __init__(self, read_timeout: float = 0.005):
        """
        Args:
            read_timeout: Longest the reader waits for the slot, in seconds.
        """
        self._lock = threading.Lock()
        self._value: GazeTarget = None
        self._read_timeout = read_timeout
        self.publish_count = 0

    def publish(self, value: GazeTarget):
        """
        Replace the slot contents.

        Args:
            value: (nx, ny) with both coordinates in [-1, 1], or None.

        Raises:
            ValueError if the pair is out of range or not finite.
        """
        if value is not None:
            value = (float(value[0]), float(value[1]))
            if not _is_valid_target(value):
                raise ValueError(f"Gaze target out of range: {value}")

        with self._lock:
            self._value = value
            self.publish_count += 1

    def read(self) -> GazeTarget:
        """
        Snapshot the slot.

        Returns:
            The last published value, or None if nothing was published,
            no face is visible, or the slot could not be read.
        """
        try:
            return self._snapshot()
        except StateCorrupted as e:
            logger.warning(f"⚠ Gaze state unreadable, treating as no face: {e}")
            return None

    def _snapshot(self) -> GazeTarget:
        if not self._lock.acquire(timeout=self._read_timeout):
            raise StateCorrupted(f"slot busy for more than {self._read_timeout}s")
        try:
            value = self._value
        finally:
            self._lock.release()

        if not _is_valid_target(value):
            raise StateCorrupted(f"slot holds {value!r}")
        return value

    def clear(self):
        """Mark the face as gone"""
        self.publish(None)

    def __repr__(self):
        return f"<SharedGazeState(value={self._value}, publishes={self.publish_count})>"
