from pathlib import Path

import cv2
import numpy as np
import pytest
import requests

from fakes import FakeClassifier

from eyefollow.tracking import locator as locator_module
from eyefollow.tracking.config import FaceLocatorConfig
from eyefollow.tracking.errors import ModelFetchFailed, ModelMissing
from eyefollow.tracking.frames import IntensityMap
from eyefollow.tracking.locator import FaceLocator, ensure_model


def _intensity(width=100, height=80) -> IntensityMap:
    return IntensityMap(width=width, height=height, pixels=np.zeros((height, width), dtype=np.uint8))


def _loaded_locator(tmp_path: Path, classifier: FakeClassifier, **config) -> FaceLocator:
    model = tmp_path / "model.xml"
    model.write_text("<opencv_storage/>")
    locator = FaceLocator(FaceLocatorConfig(**config), classifier_factory=lambda path: classifier)
    locator.load(model)
    return locator


@pytest.mark.parametrize(
    "overrides",
    [
        {"scale_factor": 1.2},
        {"scale_factor": 0.0},
        {"min_face_size": 0},
        {"stride": (0, 4)},
    ],
)
def test_invalid_tuning_is_rejected(overrides) -> None:
    with pytest.raises(ValueError):
        FaceLocator(FaceLocatorConfig(**overrides))


def test_load_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ModelMissing):
        FaceLocator().load(tmp_path / "absent.xml")


def test_load_unparseable_model_raises(tmp_path: Path) -> None:
    model = tmp_path / "broken.xml"
    model.write_text("not a cascade")
    locator = FaceLocator(classifier_factory=lambda path: FakeClassifier(empty=True))

    with pytest.raises(ModelMissing):
        locator.load(model)
    assert not locator.is_loaded


def test_load_wraps_classifier_construction_errors(tmp_path: Path) -> None:
    model = tmp_path / "model.xml"
    model.write_text("<opencv_storage/>")

    def explode(path):
        raise SystemError("returned a result with an exception set")

    locator = FaceLocator(classifier_factory=explode)

    with pytest.raises(ModelMissing):
        locator.load(model)
    assert not locator.is_loaded


def test_real_cascade_rejects_garbage_file(tmp_path: Path) -> None:
    model = tmp_path / "haarcascade_frontalface_default.xml"
    model.write_text("<opencv_storage/>")

    with pytest.raises(ModelMissing):
        FaceLocator().load(model)


def test_real_cascade_finds_nothing_in_blank_frame() -> None:
    locator = FaceLocator()
    locator.load(Path(cv2.data.haarcascades) / "haarcascade_frontalface_default.xml")

    assert locator.is_loaded
    assert locator.detect(_intensity(320, 240)) == []


def test_detect_without_model_raises() -> None:
    with pytest.raises(ModelMissing):
        FaceLocator().detect(_intensity())


def test_detect_maps_boxes_to_frame_and_orders_by_score(tmp_path: Path) -> None:
    classifier = FakeClassifier(
        boxes=[[5, 5, 10, 10], [20, 10, 8, 8], [45, 35, 10, 10]],
        weights=[0.5, 3.0, 2.0],
    )
    locator = _loaded_locator(tmp_path, classifier, stride=(2, 2), min_face_size=30)

    regions = locator.detect(_intensity(100, 80))

    assert [(r.x, r.y, r.width, r.height, r.score) for r in regions] == [
        (40, 20, 16, 16, 3.0),
        (90, 70, 10, 10, 2.0),   # clipped to the 100x80 frame
    ]

    shape, kwargs = classifier.calls[0]
    assert shape == (40, 50)
    assert kwargs["scaleFactor"] == pytest.approx(1.25)
    assert kwargs["minSize"] == (15, 15)
    assert kwargs["outputRejectLevels"] is True


def test_detect_no_faces_is_empty(tmp_path: Path) -> None:
    locator = _loaded_locator(tmp_path, FakeClassifier())

    assert locator.detect(_intensity()) == []


class _FakeResponse:
    def __init__(self, chunks, status_error=None):
        self.chunks = chunks
        self.status_error = status_error

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status_error:
            raise self.status_error

    def iter_content(self, chunk_size=1):
        return iter(self.chunks)


def test_ensure_model_uses_existing_file(monkeypatch, tmp_path: Path) -> None:
    (tmp_path / "haarcascade_frontalface_default.xml").write_text("cascade")

    def fail(*args, **kwargs):
        raise AssertionError("should not download")

    monkeypatch.setattr(locator_module.requests, "get", fail)

    path = ensure_model(FaceLocatorConfig(), tmp_path)

    assert path == tmp_path / "haarcascade_frontalface_default.xml"


def test_ensure_model_downloads_missing_file(monkeypatch, tmp_path: Path) -> None:
    calls = []

    def fake_get(url, stream, timeout):
        calls.append((url, stream, timeout))
        return _FakeResponse([b"<opencv", b"_storage/>"])

    monkeypatch.setattr(locator_module.requests, "get", fake_get)

    path = ensure_model(FaceLocatorConfig(), tmp_path / "models")

    assert path.read_bytes() == b"<opencv_storage/>"
    assert calls == [(FaceLocatorConfig().model_url, True, 60.0)]
    assert not (tmp_path / "models" / "haarcascade_frontalface_default.xml.part").exists()


@pytest.mark.parametrize(
    "failure",
    [
        lambda: requests.ConnectionError("offline"),
        lambda: None,
    ],
)
def test_ensure_model_failure_raises_and_leaves_nothing(monkeypatch, tmp_path: Path, failure) -> None:
    error = failure()

    def fake_get(url, stream, timeout):
        if error is not None:
            raise error
        return _FakeResponse([b"partial"], status_error=requests.HTTPError("404"))

    monkeypatch.setattr(locator_module.requests, "get", fake_get)

    with pytest.raises(ModelFetchFailed):
        ensure_model(FaceLocatorConfig(), tmp_path)

    assert list(tmp_path.iterdir()) == []
