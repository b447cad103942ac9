"""Evaluation of detections against expected shapes (IoU + centre distance + area)."""
from __future__ import annotations
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..core.entities import BoundingBox, DetectionResult, Point, Shape
from ..core.logging_config import get_logger
from ..core.exceptions import ConfigError
from ..utils.geometry import calculate_iou, distance

logger = get_logger(__name__)


@dataclass(slots=True)
class ShapeComparison:
    expected: Shape
    detected: Optional[Shape]
    iou: float = 0.0
    center_distance: float = float("inf")
    area_error: float = 1.0
    type_match: bool = False
    passed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "expected": self.expected.to_dict(),
            "detected": self.detected.to_dict() if self.detected else None,
            "iou": self.iou,
            "centerDistance": self.center_distance,
            "areaError": self.area_error,
            "typeMatch": self.type_match,
            "passed": self.passed,
        }


@dataclass(slots=True)
class EvaluationReport:
    comparisons: List[ShapeComparison] = field(default_factory=list)
    detected_count: int = 0
    processing_time: float = 0.0

    @property
    def total_expected(self) -> int:
        return len(self.comparisons)

    @property
    def correct_detections(self) -> int:
        return sum(1 for c in self.comparisons if c.detected is not None)

    @property
    def correct_classifications(self) -> int:
        return sum(1 for c in self.comparisons if c.detected is not None and c.type_match)

    @property
    def detection_rate(self) -> float:
        return self.correct_detections / self.total_expected if self.total_expected else 0.0

    @property
    def classification_accuracy(self) -> float:
        return self.correct_classifications / self.total_expected if self.total_expected else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalExpected": self.total_expected,
            "detectedCount": self.detected_count,
            "correctDetections": self.correct_detections,
            "correctClassifications": self.correct_classifications,
            "detectionRate": self.detection_rate,
            "classificationAccuracy": self.classification_accuracy,
            "processingTime": self.processing_time,
            "comparisons": [c.to_dict() for c in self.comparisons],
        }


class ShapeEvaluator:
    """Scores detected shapes against a ground-truth list.

    A detection is matched to an expected shape when their boxes overlap by
    more than ``match_iou``; a matched pair passes when IoU, centre offset
    and relative area error are all within tolerance.
    """

    def __init__(self, match_iou: float = 0.5, pass_iou: float = 0.7,
                 max_center_distance: float = 10.0, max_area_error: float = 0.15):
        self.match_iou = match_iou
        self.pass_iou = pass_iou
        self.max_center_distance = max_center_distance
        self.max_area_error = max_area_error

    def compare_shapes(self, detected: Shape, expected: Shape) -> ShapeComparison:
        iou = calculate_iou(detected.bounding_box, expected.bounding_box)
        center_distance = distance(detected.center, expected.center)
        area_error = abs(detected.area - expected.area) / expected.area
        passed = (iou > self.pass_iou
                  and center_distance < self.max_center_distance
                  and area_error < self.max_area_error)
        return ShapeComparison(expected=expected, detected=detected, iou=iou,
                               center_distance=center_distance, area_error=area_error,
                               type_match=detected.type == expected.type, passed=passed)

    def find_best_match(self, expected: Shape, detected: Sequence[Shape]) -> Optional[Tuple[Shape, float]]:
        """Detection with the highest IoU above ``match_iou``; a detection may match several expectations."""
        best: Optional[Tuple[Shape, float]] = None
        best_iou = self.match_iou
        for shape in detected:
            iou = calculate_iou(shape.bounding_box, expected.bounding_box)
            if iou > best_iou:
                best, best_iou = (shape, iou), iou
        return best

    def evaluate(self, expected_shapes: Sequence[Shape], result: DetectionResult) -> EvaluationReport:
        report = EvaluationReport(detected_count=len(result.shapes),
                                  processing_time=result.processing_time)
        for expected in expected_shapes:
            match = self.find_best_match(expected, result.shapes)
            if match is None:
                report.comparisons.append(ShapeComparison(expected=expected, detected=None))
                continue
            report.comparisons.append(self.compare_shapes(match[0], expected))
        logger.info("Evaluation: %d/%d detected, %d correctly classified",
                    report.correct_detections, report.total_expected, report.correct_classifications)
        return report


def shape_from_dict(data: Dict[str, Any]) -> Shape:
    """Build a Shape from its ``to_dict`` form; confidence defaults to 1."""
    box = data["boundingBox"]
    center = data["center"]
    return Shape(
        type=data["type"],
        bounding_box=BoundingBox(x=box["x"], y=box["y"], width=box["width"], height=box["height"]),
        center=Point(float(center["x"]), float(center["y"])),
        area=float(data["area"]),
        confidence=float(data.get("confidence", 1.0)),
    )


def load_expected_results(path: Union[str, Path]) -> Dict[str, List[Shape]]:
    """Read ``{image_name: {"shapes": [...]}}`` ground truth from JSON."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not load expected results from '{path}': {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected results in '{path}' must be a JSON object")
    try:
        return {name: [shape_from_dict(s) for s in entry.get("shapes", [])] for name, entry in raw.items()}
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Malformed expected results in '{path}': {e}") from e
