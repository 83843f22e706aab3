"""
Face Tracking Errors
Failure taxonomy for the detection context

None of these ever reach the render loop: every one of them degrades
to "no face detected" inside the collector or the shared gaze state.
"""


class TrackingError(Exception):
    """Base class for all face tracking failures"""


class DeviceUnavailable(TrackingError):
    """Camera could not be opened: detection never starts publishing"""


class CaptureFailed(TrackingError):
    """A single frame read failed: retried after a short delay"""


class DecodeFailed(TrackingError):
    """Frame payload is malformed: the frame is skipped"""


class ModelMissing(TrackingError):
    """Detector model file is absent or unreadable: detection disabled"""


class ModelFetchFailed(ModelMissing):
    """Detector model could not be downloaded: detection disabled"""


class StateCorrupted(TrackingError):
    """Shared gaze slot could not be snapshotted: read as no target"""
