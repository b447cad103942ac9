"""Rule-based classification of traced contours into shapes."""
from __future__ import annotations
import math
from itertools import combinations
from typing import Optional, Sequence

import numpy as np

from ..core.entities import BoundingBox, Contour, Point, Shape
from ..core.logging_config import get_logger
from ..utils.geometry import distance, vertex_angle
from .simplify import douglas_peucker

logger = get_logger(__name__)

DEFAULT_MIN_AREA_RATIO = 0.0001
MIN_EPSILON = 2.0
EPSILON_PERIMETER_RATIO = 0.02
# vertices closer than this usually mean a simplified triangle kept a duplicate corner
NEAR_VERTEX_DISTANCE = 10.0
STRAIGHT_ANGLE = 170.0
FALLBACK_TYPES = ("triangle", "rectangle", "pentagon")


def _as_points(points) -> np.ndarray:
    return np.asarray(points, dtype=np.float64).reshape(-1, 2)


def calculate_perimeter(points) -> float:
    """Length of the closed polyline, including the last->first edge."""
    pts = _as_points(points)
    if len(pts) == 0:
        return 0.0
    diffs = np.roll(pts, -1, axis=0) - pts
    return float(np.hypot(diffs[:, 0], diffs[:, 1]).sum())


def calculate_contour_area(points) -> float:
    """Shoelace area floored at half a pixel per point; 0 below three points."""
    pts = _as_points(points)
    n = len(pts)
    if n < 3:
        return 0.0
    x, y = pts[:, 0], pts[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)
    area = abs(float(np.sum(x * y_next - x_next * y))) / 2.0
    return max(area, n * 0.5)


def calculate_bounding_box(points) -> BoundingBox:
    pts = _as_points(points)
    min_x, min_y = pts.min(axis=0)
    max_x, max_y = pts.max(axis=0)
    return BoundingBox(x=float(min_x), y=float(min_y),
                       width=float(max_x - min_x), height=float(max_y - min_y))


def calculate_center(points) -> Point:
    cx, cy = _as_points(points).mean(axis=0)
    return Point(float(cx), float(cy))


def polygon_confidence(vertices: Sequence, expected_vertices: int) -> float:
    """Angle-regularity score for a polygon expected to have ``expected_vertices``.

    Returns 0.5 when the vertex count is off by more than one, otherwise
    ``max(0.5, 1 - variance / 2000)`` over the interior angles in degrees.
    """
    n = len(vertices)
    if abs(n - expected_vertices) > 1:
        return 0.5
    angles = [vertex_angle(vertices[i - 1], vertices[i], vertices[(i + 1) % n]) for i in range(n)]
    variance = float(np.var(angles))
    return max(0.5, 1.0 - variance / 2000.0)


def is_likely_triangle(vertices: Sequence) -> bool:
    """Detect 4 or 5 vertex polygons that are really triangles.

    True when two vertices nearly coincide or, for quadrilaterals, when one
    corner is almost straight.
    """
    n = len(vertices)
    if n < 4 or n > 5:
        return False
    for a, b in combinations(range(n), 2):
        if distance(vertices[a], vertices[b]) < NEAR_VERTEX_DISTANCE:
            return True
    if n == 4:
        for i in range(n):
            if vertex_angle(vertices[i - 1], vertices[i], vertices[(i + 1) % n]) > STRAIGHT_ANGLE:
                return True
    return False


class ShapeClassifier:
    """Turns one contour into a Shape, or None when no rule accepts it.

    The rules are checked in order and the first match wins; the order
    matters because the vertex-count ranges of the polygon rules overlap.
    """

    def __init__(self, min_area_ratio: float = DEFAULT_MIN_AREA_RATIO):
        self.min_area_ratio = min_area_ratio

    def classify(self, contour: Contour, image_width: int, image_height: int) -> Optional[Shape]:
        points = contour.points
        perimeter = calculate_perimeter(points)
        epsilon = max(MIN_EPSILON, EPSILON_PERIMETER_RATIO * perimeter)
        approx = douglas_peucker(points, epsilon)
        area = calculate_contour_area(points)
        bbox = calculate_bounding_box(points)
        center = calculate_center(points)

        min_area = image_width * image_height * self.min_area_ratio
        if area <= 0 or area < min_area:
            logger.debug("Rejected contour: area %.1f below minimum %.1f", area, min_area)
            return None

        circularity = 4 * math.pi * area / (perimeter * perimeter) if perimeter > 0 else 0.0
        n = len(approx)

        def make(shape_type: str, confidence: float) -> Shape:
            return Shape(type=shape_type, bounding_box=bbox, center=center,
                         area=area, confidence=confidence)

        if circularity > 0.8:
            return make("circle", min(0.95, circularity))

        if 3 <= n <= 5:
            if n == 3:
                return make("triangle", max(0.7, polygon_confidence(approx, 3)))
            if is_likely_triangle(approx):
                return make("triangle", max(0.5, polygon_confidence(approx, 3) * 0.8))
            if n == 4:
                if bbox.width > 0 and bbox.height > 0:
                    aspect = max(bbox.width / bbox.height, bbox.height / bbox.width)
                else:
                    aspect = 1.0
                if aspect < 2 and polygon_confidence(approx, 4) < 0.6:
                    return make("triangle", 0.5)

        if 4 <= n <= 6:
            aspect = bbox.width / bbox.height if bbox.width > 0 and bbox.height > 0 else 1.0
            shape_type = "square" if 0.85 < aspect < 1.15 else "rectangle"
            confidence = polygon_confidence(approx, 4)
            if confidence > 0.3:
                return make(shape_type, max(0.5, confidence))

        if 5 <= n <= 7:
            confidence = max(0.5, polygon_confidence(approx, 5))
            if confidence > 0.3:
                return make("pentagon", confidence)

        if n > 6 and circularity > 0.6:
            return make("circle", circularity * 0.9)

        if 3 <= n <= 5 and area > min_area:
            return make(FALLBACK_TYPES[min(n - 3, 2)], 0.4)

        logger.debug("No rule matched contour: %d vertices, circularity %.3f", n, circularity)
        return None
