"""Shape detection pipeline service."""
from __future__ import annotations
import time
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from ..config.settings import Config
from ..core.entities import DetectionResult, RasterImage, Shape
from ..core.exceptions import InvalidInputError
from ..core.logging_config import CorrelationContext, get_logger, set_log_level
from ..core.performance import PerformanceTimer, elapsed_ms
from ..processing.classifier import ShapeClassifier
from ..processing.contours import find_contours
from ..processing.dedup import remove_duplicates
from ..processing.edges import detect_edges
from ..processing.grayscale import convert_to_grayscale
from ..utils.image_utils import to_raster_image
from .debug_observer import DebugObserver, ImageDumpObserver, NullObserver

logger = get_logger(__name__)

# grayscale values at or above this count as background in the debug metrics
NEAR_WHITE = 250


class ShapeDetectionService:
    """High-level shape detection pipeline orchestration service.

    ``detect`` never raises: invalid input and unexpected failures are
    logged and produce an empty result that still carries the elapsed time.
    """

    def __init__(self, config: Optional[Config] = None, observer: Optional[DebugObserver] = None):
        self.config = config or Config()
        set_log_level(self.config.log_level)
        if observer is None:
            observer = ImageDumpObserver(self.config.debug_dir) if self.config.debug else NullObserver()
        self.observer = observer
        self.classifier = ShapeClassifier(min_area_ratio=self.config.min_area_ratio)
        self._runs = 0
        self._failures = 0
        self._last_processing_time: Optional[float] = None

    def enable_debug(self, output_dir: Optional[str] = None) -> DebugObserver:
        """Start dumping stage images to ``output_dir`` (defaults to config.debug_dir)."""
        self.observer = ImageDumpObserver(output_dir or self.config.debug_dir)
        return self.observer

    def disable_debug(self) -> None:
        self.observer = NullObserver()

    def detect(self, image: RasterImage) -> DetectionResult:
        """Detect shapes in an RGBA image."""
        return self._detect_guarded(lambda: image)

    def detect_pixels(self, pixels, width: int, height: int) -> DetectionResult:
        """Detect shapes in a raw flat RGBA buffer."""
        return self._detect_guarded(lambda: RasterImage(width=width, height=height, pixels=pixels))

    def detect_array(self, array: np.ndarray) -> DetectionResult:
        """Detect shapes in an OpenCV image (gray, BGR or BGRA)."""
        return self._detect_guarded(lambda: to_raster_image(array))

    def _detect_guarded(self, load: Callable[[], RasterImage]) -> DetectionResult:
        start = time.perf_counter()
        self._runs += 1
        with CorrelationContext():
            try:
                image = load()
                if not isinstance(image, RasterImage):
                    raise InvalidInputError(f"Expected a RasterImage, got {type(image).__name__}")
                result = self._run_pipeline(image, start)
            except InvalidInputError as e:
                self._failures += 1
                logger.warning("Rejected input image: %s", e)
                result = DetectionResult.empty(elapsed_ms(start))
            except Exception:
                self._failures += 1
                logger.exception("Shape detection failed")
                result = DetectionResult.empty(elapsed_ms(start))
        self._last_processing_time = result.processing_time
        return result

    def _run_pipeline(self, image: RasterImage, start: float) -> DetectionResult:
        cfg = self.config
        timings: Dict[str, float] = {}

        self._notify("clear")
        self._notify("record_image", "1. Original Image", image)

        with PerformanceTimer("grayscale", timings):
            gray = convert_to_grayscale(image)
        self._notify("record_image", "2. Grayscale", gray)

        with PerformanceTimer("edges", timings):
            edges = detect_edges(gray, cfg.high_threshold_ratio, cfg.low_threshold_ratio)
        self._notify("record_image", "3. Edge Detection", edges)

        with PerformanceTimer("contours", timings):
            contours = find_contours(edges, cfg.min_contour_points)
        self._notify("record_contours", "4. Detected Contours", image, contours)
        self._notify("record_metrics", {
            "Image Size": f"{image.width}x{image.height}",
            "Non-white Pixels": int(np.count_nonzero(gray < NEAR_WHITE)),
            "Edge Pixels": int(np.count_nonzero(edges)),
            "Total Contours": len(contours),
            "Avg Points per Contour": (
                round(sum(len(c) for c in contours) / len(contours), 1) if contours else 0
            ),
        })

        shapes: List[Shape] = []
        with PerformanceTimer("classification", timings):
            for contour in contours:
                if len(contour) < cfg.min_contour_points:
                    continue
                shape = self.classifier.classify(contour, image.width, image.height)
                if shape is None:
                    continue
                if shape.confidence > cfg.min_confidence:
                    shapes.append(shape)
                else:
                    logger.debug("Dropped %s with confidence %.2f", shape.type, shape.confidence)

        with PerformanceTimer("deduplication", timings):
            final_shapes = remove_duplicates(shapes, cfg.duplicate_iou_threshold)

        processing_time = elapsed_ms(start)
        self._notify("record_shapes", "5. Final Detections", image, final_shapes)
        metrics: Dict[str, Any] = {
            "Shapes Detected": len(final_shapes),
            "Processing Time": f"{processing_time:.2f}ms",
            "Avg Confidence": (
                f"{sum(s.confidence for s in final_shapes) / len(final_shapes) * 100:.1f}%"
                if final_shapes else "N/A"
            ),
        }
        metrics.update({f"{stage.title()} Time": f"{ms:.2f}ms" for stage, ms in timings.items()})
        self._notify("record_metrics", metrics)

        logger.debug("Detected %d shapes from %d contours in %.2fms",
                     len(final_shapes), len(contours), processing_time)
        return DetectionResult(shapes=tuple(final_shapes), processing_time=processing_time)

    def _notify(self, method: str, *args) -> None:
        """Forward to the observer; its failures are logged and ignored."""
        try:
            getattr(self.observer, method)(*args)
        except Exception:
            logger.warning("Debug observer failed in %s", method, exc_info=True)

    def get_stats(self) -> dict:
        """Get service statistics."""
        return {
            'runs': self._runs,
            'failures': self._failures,
            'last_processing_time': self._last_processing_time,
            'debug': not isinstance(self.observer, NullObserver),
        }
