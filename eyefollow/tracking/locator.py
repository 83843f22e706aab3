"""
Face Locator
Haar cascade face detection over intensity maps, plus the model asset download
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import cv2
import numpy as np
import requests

from .config import FaceLocatorConfig
from .errors import ModelFetchFailed, ModelMissing
from .frames import IntensityMap

logger = logging.getLogger(__name__)


@dataclass
class DetectedRegion:
    """A candidate face: top-left corner, size and detector score"""

    x: int
    y: int
    width: int
    height: int
    score: float

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2


def ensure_model(config: Optional[FaceLocatorConfig] = None,
                 model_dir: Union[str, Path] = '.') -> Path:
    """
    Make sure the detector model is on disk, downloading it if needed.

    Args:
        config:    FaceLocatorConfig naming the model file and its URL.
        model_dir: Directory the model lives in. Relative paths resolve
                   against the process working directory.

    Returns:
        Path to the model file.

    Raises:
        ModelFetchFailed if the file is absent and the download fails.
    """
    config = config or FaceLocatorConfig()
    model_path = Path(model_dir) / config.model_filename

    if model_path.is_file():
        return model_path

    logger.info(f"Downloading face detection model from {config.model_url} ...")
    partial = model_path.with_name(model_path.name + '.part')
    try:
        model_path.parent.mkdir(parents=True, exist_ok=True)
        with requests.get(config.model_url, stream=True, timeout=config.download_timeout) as r:
            r.raise_for_status()
            with open(partial, 'wb') as f:
                for chunk in r.iter_content(chunk_size=8192):
                    if chunk:
                        f.write(chunk)
        partial.replace(model_path)
    except (requests.RequestException, OSError) as e:
        partial.unlink(missing_ok=True)
        logger.error(f"✗ Failed to download face detection model: {e}")
        logger.error(f"  Please download manually from: {config.model_url}")
        raise ModelFetchFailed(f"Could not fetch {config.model_url}: {e}") from e

    logger.info(f"✓ Model downloaded successfully ({model_path})")
    return model_path


class FaceLocator:
    """
    Multi-scale sliding-window face detector.

    The intensity map is sampled on the configured stride grid, then the
    cascade searches an image pyramid that shrinks by scale_factor per pass.
    Regions come back in full-frame pixels, best score first.
    """

    def __init__(self, config: Optional[FaceLocatorConfig] = None, classifier_factory=None):
        """
        Args:
            config:             Detector tuning. Defaults to FaceLocatorConfig().
            classifier_factory: Callable taking a model path and returning a
                                cv2.CascadeClassifier-like object.

        Raises:
            ValueError if the tuning is out of range.
        """
        self.config = config or FaceLocatorConfig()
        self.config.validate()
        self.classifier_factory = classifier_factory or cv2.CascadeClassifier
        self.classifier = None

    @property
    def is_loaded(self) -> bool:
        return self.classifier is not None

    def load(self, model_path: Union[str, Path]):
        """
        Load the cascade model.

        Args:
            model_path: Path to the cascade XML file.

        Raises:
            ModelMissing if the file does not exist or cannot be parsed.
        """
        model_path = Path(model_path)
        if not model_path.is_file():
            raise ModelMissing(f"Model file not found: {model_path}")

        try:
            classifier = self.classifier_factory(str(model_path))
        except Exception as e:
            raise ModelMissing(f"Model file unreadable: {model_path}: {e}") from e

        if classifier.empty():
            raise ModelMissing(f"Model file unreadable: {model_path}")

        self.classifier = classifier
        logger.info(
            f"✓ Face detector initialized (min face {self.config.min_face_size}px, "
            f"score >= {self.config.score_threshold}, scale {self.config.scale_factor}, "
            f"stride {self.config.stride})"
        )

    def detect(self, intensity: IntensityMap) -> List[DetectedRegion]:
        """
        Find faces in an intensity map.

        Args:
            intensity: Grayscale frame.

        Returns:
            Regions ordered by descending score. Empty when no face is visible.

        Raises:
            ModelMissing if load() has not succeeded.
        """
        if self.classifier is None:
            raise ModelMissing("Face detector has no model loaded")

        step_x, step_y = self.config.stride
        search = np.ascontiguousarray(intensity.pixels[::step_y, ::step_x])
        min_size = (
            max(1, int(round(self.config.min_face_size / step_x))),
            max(1, int(round(self.config.min_face_size / step_y))),
        )

        boxes, _, weights = self.classifier.detectMultiScale3(
            search,
            scaleFactor=self.config.opencv_scale_factor,
            minNeighbors=self.config.min_neighbors,
            minSize=min_size,
            outputRejectLevels=True,
        )
        if len(boxes) == 0:
            return []

        weights = np.asarray(weights, dtype=np.float64).reshape(-1)
        regions = []
        for (bx, by, bw, bh), score in zip(boxes, weights):
            if score < self.config.score_threshold:
                continue
            region = self._to_frame_region(
                int(bx) * step_x, int(by) * step_y,
                int(bw) * step_x, int(bh) * step_y,
                float(score), intensity.width, intensity.height,
            )
            if region is not None:
                regions.append(region)

        regions.sort(key=lambda r: r.score, reverse=True)
        return regions

    @staticmethod
    def _to_frame_region(x, y, w, h, score, frame_width, frame_height) -> Optional[DetectedRegion]:
        """Clip a box to the frame; None if nothing is left of it"""
        x0, y0 = max(0, x), max(0, y)
        x1, y1 = min(frame_width, x + w), min(frame_height, y + h)
        if x1 <= x0 or y1 <= y0:
            return None
        return DetectedRegion(x=x0, y=y0, width=x1 - x0, height=y1 - y0, score=score)

    def __repr__(self):
        state = "loaded" if self.is_loaded else "not loaded"
        return f"<FaceLocator({state}, stride={self.config.stride})>"
