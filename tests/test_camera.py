import cv2
import pytest

from fakes import FakeCapture, make_bgr

from eyefollow.tracking.camera import FrameSource
from eyefollow.tracking.config import TrackingConfig
from eyefollow.tracking.errors import CaptureFailed, DecodeFailed, DeviceUnavailable


def test_open_requests_oversized_format() -> None:
    capture = FakeCapture(width=1280, height=720)
    opened_with = []

    def factory(index):
        opened_with.append(index)
        return capture

    stream = FrameSource(TrackingConfig(), capture_factory=factory).open(2)

    assert opened_with == [2]
    assert capture.requested[cv2.CAP_PROP_FRAME_WIDTH] == 10000
    assert capture.requested[cv2.CAP_PROP_FRAME_HEIGHT] == 10000
    assert stream.resolution == (1280, 720)


def test_open_unavailable_device_raises_and_releases() -> None:
    capture = FakeCapture(opened=False)

    with pytest.raises(DeviceUnavailable):
        FrameSource(capture_factory=lambda index: capture).open(0)

    assert capture.released


def test_next_frame_returns_rgb_frame() -> None:
    capture = FakeCapture(frames=[make_bgr(8, 6, color=(255, 0, 0))])
    stream = FrameSource(capture_factory=lambda index: capture).open(0)

    frame = stream.next_frame()

    assert (frame.width, frame.height) == (8, 6)
    assert frame.pixels[0, 0].tolist() == [0, 0, 255]


def test_failed_read_raises_capture_failed() -> None:
    capture = FakeCapture(frames=[None])
    stream = FrameSource(capture_factory=lambda index: capture).open(0)

    with pytest.raises(CaptureFailed):
        stream.next_frame()


def test_malformed_payload_raises_decode_failed() -> None:
    capture = FakeCapture(frames=[make_bgr(8, 6)[:, :, 0]])
    stream = FrameSource(capture_factory=lambda index: capture).open(0)

    with pytest.raises(DecodeFailed):
        stream.next_frame()


def test_release_is_idempotent() -> None:
    capture = FakeCapture()
    with FrameSource(capture_factory=lambda index: capture).open(0) as stream:
        pass

    stream.release()

    assert capture.released
    assert stream.capture is None
