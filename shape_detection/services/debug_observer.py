"""Debug side channel for the detection pipeline.

The detection service reports every stage boundary to a ``DebugObserver``.
Production code uses ``NullObserver``; ``RecordingObserver`` keeps what it
receives in memory and ``ImageDumpObserver`` writes annotated images and a
metrics file to disk with OpenCV.
"""
from __future__ import annotations
import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple, Union

import cv2
import numpy as np

from ..core.entities import Contour, RasterImage, Shape
from ..core.logging_config import get_logger
from ..utils.image_utils import buffer_to_bgr, raster_to_bgr

logger = get_logger(__name__)

StageImage = Union[RasterImage, np.ndarray]

# BGR
CONTOUR_COLORS = (
    (0, 0, 255),
    (0, 255, 0),
    (255, 0, 0),
    (0, 255, 255),
    (255, 0, 255),
    (255, 255, 0),
)
BOX_COLOR = (0, 255, 0)
CENTER_COLOR = (0, 0, 255)
METRICS_FILENAME = "metrics.json"


class DebugObserver(ABC):
    """Abstract receiver of intermediate pipeline output."""

    def clear(self) -> None:
        """Forget everything recorded for the previous image."""

    @abstractmethod
    def record_image(self, title: str, image: StageImage) -> None:
        """Receive the input image or a single-channel stage buffer."""

    @abstractmethod
    def record_metrics(self, metrics: Dict[str, Any]) -> None:
        """Receive named metric values; later values overwrite earlier ones."""

    @abstractmethod
    def record_contours(self, title: str, image: RasterImage, contours: Sequence[Contour]) -> None:
        pass

    @abstractmethod
    def record_shapes(self, title: str, image: RasterImage, shapes: Sequence[Shape]) -> None:
        pass


class NullObserver(DebugObserver):
    """Observer that ignores everything."""

    def record_image(self, title, image):
        pass

    def record_metrics(self, metrics):
        pass

    def record_contours(self, title, image, contours):
        pass

    def record_shapes(self, title, image, shapes):
        pass


class RecordingObserver(DebugObserver):
    """Keeps everything it receives for inspection by callers and tests."""

    def __init__(self):
        self.images: List[Tuple[str, np.ndarray]] = []
        self.metrics: Dict[str, Any] = {}
        self.contours: List[Tuple[str, List[Contour]]] = []
        self.shapes: List[Tuple[str, List[Shape]]] = []

    def clear(self) -> None:
        self.images.clear()
        self.metrics.clear()
        self.contours.clear()
        self.shapes.clear()

    def record_image(self, title, image):
        data = image.as_array() if isinstance(image, RasterImage) else np.asarray(image)
        self.images.append((title, data.copy()))

    def record_metrics(self, metrics):
        self.metrics.update(metrics)

    def record_contours(self, title, image, contours):
        self.contours.append((title, list(contours)))

    def record_shapes(self, title, image, shapes):
        self.shapes.append((title, list(shapes)))

    @property
    def titles(self) -> List[str]:
        return [title for title, _ in self.images]


def _slug(title: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", title.lower()).strip("_") or "image"


def draw_contours(canvas: np.ndarray, contours: Sequence[Contour]) -> np.ndarray:
    """Draw each contour as a closed polyline, cycling through CONTOUR_COLORS."""
    for index, contour in enumerate(contours):
        pts = np.rint(contour.points).astype(np.int32).reshape(-1, 1, 2)
        color = CONTOUR_COLORS[index % len(CONTOUR_COLORS)]
        cv2.polylines(canvas, [pts], isClosed=True, color=color, thickness=2)
    return canvas


def draw_shapes(canvas: np.ndarray, shapes: Sequence[Shape]) -> np.ndarray:
    """Draw bounding box, centre dot and a "type (NN%)" label per shape."""
    for shape in shapes:
        box = shape.bounding_box
        top_left = (int(round(box.x)), int(round(box.y)))
        bottom_right = (int(round(box.x + box.width)), int(round(box.y + box.height)))
        cv2.rectangle(canvas, top_left, bottom_right, BOX_COLOR, 2)
        center = (int(round(shape.center.x)), int(round(shape.center.y)))
        cv2.circle(canvas, center, 3, CENTER_COLOR, -1)
        label = f"{shape.type} ({shape.confidence * 100:.0f}%)"
        cv2.putText(canvas, label, (top_left[0], max(12, top_left[1] - 5)),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, BOX_COLOR, 1, cv2.LINE_AA)
    return canvas


class ImageDumpObserver(DebugObserver):
    """Writes one PNG per recorded stage plus ``metrics.json`` into a directory.

    Files are numbered in recording order, e.g. ``01_original_image.png``.
    """

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)
        self.metrics: Dict[str, Any] = {}
        self.written: List[Path] = []
        self._counter = 0

    def clear(self) -> None:
        self.metrics = {}
        self.written = []
        self._counter = 0

    def _write(self, title: str, canvas: np.ndarray) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._counter += 1
        path = self.output_dir / f"{self._counter:02d}_{_slug(title)}.png"
        if not cv2.imwrite(str(path), canvas):
            raise OSError(f"OpenCV could not write {path}")
        self.written.append(path)
        logger.debug("Wrote debug image %s", path)
        return path

    def record_image(self, title, image):
        if isinstance(image, RasterImage):
            canvas = raster_to_bgr(image)
        else:
            canvas = buffer_to_bgr(image)
        self._write(title, canvas)

    def record_metrics(self, metrics):
        self.metrics.update(metrics)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        with open(self.output_dir / METRICS_FILENAME, "w", encoding="utf-8") as f:
            json.dump(self.metrics, f, indent=2)

    def record_contours(self, title, image, contours):
        self._write(title, draw_contours(raster_to_bgr(image), contours))

    def record_shapes(self, title, image, shapes):
        self._write(title, draw_shapes(raster_to_bgr(image), shapes))
