import numpy as np
import pytest

from eyefollow.tracking.errors import DecodeFailed
from eyefollow.tracking.frames import Frame, to_intensity


def _rgb_frame(pixels) -> Frame:
    pixels = np.asarray(pixels, dtype=np.uint8)
    height, width = pixels.shape[:2]
    return Frame(width=width, height=height, pixels=pixels)


def test_primary_colours_use_bt601_weights() -> None:
    frame = _rgb_frame([[[255, 0, 0], [0, 255, 0], [0, 0, 255], [255, 255, 255], [0, 0, 0]]])

    gray = to_intensity(frame)

    assert gray.pixels.tolist() == [[76, 150, 29, 255, 0]]
    assert gray.pixels.dtype == np.uint8


def test_mixed_pixel_is_rounded() -> None:
    # 0.299*10 + 0.587*20 + 0.114*30 = 18.15
    gray = to_intensity(_rgb_frame([[[10, 20, 30]]]))

    assert gray.pixels[0, 0] == 18


def test_dimensions_preserved_for_non_square_frame() -> None:
    frame = _rgb_frame(np.zeros((5, 7, 3)))

    gray = to_intensity(frame)

    assert (gray.width, gray.height) == (7, 5)
    assert gray.pixels.shape == (5, 7)
    assert gray.pixels.size == 7 * 5


def test_conversion_is_deterministic() -> None:
    rng = np.random.default_rng(1234)
    frame = _rgb_frame(rng.integers(0, 256, size=(24, 32, 3)))

    first = to_intensity(frame)
    second = to_intensity(frame)

    assert np.array_equal(first.pixels, second.pixels)


def test_flat_interleaved_buffer_is_accepted() -> None:
    frame = Frame(width=2, height=1, pixels=np.array([255, 255, 255, 0, 0, 0], dtype=np.uint8))

    assert to_intensity(frame).pixels.tolist() == [[255, 0]]


@pytest.mark.parametrize(
    "frame",
    [
        Frame(width=2, height=2, pixels=np.zeros(11, dtype=np.uint8)),
        Frame(width=2, height=2, pixels=np.zeros(12, dtype=np.float32)),
        Frame(width=0, height=2, pixels=np.zeros(0, dtype=np.uint8)),
    ],
)
def test_malformed_buffer_raises_decode_failed(frame) -> None:
    with pytest.raises(DecodeFailed):
        to_intensity(frame)


def test_from_bgr_reorders_channels() -> None:
    bgr = np.zeros((3, 4, 3), dtype=np.uint8)
    bgr[:, :] = (0, 0, 255)  # red in OpenCV order

    frame = Frame.from_bgr(bgr)

    assert (frame.width, frame.height) == (4, 3)
    assert frame.pixels[0, 0].tolist() == [255, 0, 0]


def test_from_bgr_rejects_grayscale() -> None:
    with pytest.raises(DecodeFailed):
        Frame.from_bgr(np.zeros((3, 4), dtype=np.uint8))
