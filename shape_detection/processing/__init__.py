"""Pipeline stages: grayscale, edges, contours, simplification, classification, dedup."""

from .grayscale import convert_to_grayscale
from .edges import (
    detect_edges, gaussian_blur, calculate_gradients, non_maximum_suppression, double_threshold
)
from .contours import find_contours, trace_contour
from .simplify import douglas_peucker
from .classifier import (
    ShapeClassifier, calculate_perimeter, calculate_contour_area, calculate_bounding_box,
    calculate_center, polygon_confidence, is_likely_triangle
)
from .dedup import remove_duplicates

__all__ = [
    "convert_to_grayscale",
    "detect_edges", "gaussian_blur", "calculate_gradients", "non_maximum_suppression",
    "double_threshold",
    "find_contours", "trace_contour",
    "douglas_peucker",
    "ShapeClassifier", "calculate_perimeter", "calculate_contour_area", "calculate_bounding_box",
    "calculate_center", "polygon_confidence", "is_likely_triangle",
    "remove_duplicates",
]
