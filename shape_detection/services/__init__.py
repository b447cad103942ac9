"""Service layer: detection pipeline, debug observers and evaluation."""

from .detection_service import ShapeDetectionService
from .debug_observer import DebugObserver, NullObserver, RecordingObserver, ImageDumpObserver
from .evaluation_service import (
    ShapeEvaluator, ShapeComparison, EvaluationReport, shape_from_dict, load_expected_results
)

__all__ = [
    "ShapeDetectionService",
    "DebugObserver", "NullObserver", "RecordingObserver", "ImageDumpObserver",
    "ShapeEvaluator", "ShapeComparison", "EvaluationReport", "shape_from_dict",
    "load_expected_results",
]
