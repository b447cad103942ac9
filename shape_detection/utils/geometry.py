"""Geometry / math helper functions (pure, easily unit tested)."""
from __future__ import annotations
import math

import numpy as np


def perpendicular_distances(points: np.ndarray, start, end) -> np.ndarray:
    """Distance of every point in ``points`` (N, 2) to the infinite line start->end.

    A zero-length line falls back to the Euclidean distance from ``start``.
    """
    x1, y1 = float(start[0]), float(start[1])
    x2, y2 = float(end[0]), float(end[1])
    dx = x2 - x1
    dy = y2 - y1
    denom = math.sqrt(dx * dx + dy * dy)
    if denom == 0:
        return np.hypot(points[:, 0] - x1, points[:, 1] - y1)
    numerator = np.abs(dy * points[:, 0] - dx * points[:, 1] + x2 * y1 - y2 * x1)
    return numerator / denom


def perpendicular_distance(point, start, end) -> float:
    return float(perpendicular_distances(np.asarray([point], dtype=np.float64), start, end)[0])


def vertex_angle(prev, curr, nxt) -> float:
    """Interior angle in degrees at ``curr`` between the edges to ``prev`` and ``nxt``."""
    v1x, v1y = prev[0] - curr[0], prev[1] - curr[1]
    v2x, v2y = nxt[0] - curr[0], nxt[1] - curr[1]
    mag = math.hypot(v1x, v1y) * math.hypot(v2x, v2y)
    if mag == 0:
        return 0.0
    cos_angle = (v1x * v2x + v1y * v2y) / mag
    # rounding can push the cosine just outside [-1, 1] for collinear edges
    cos_angle = max(-1.0, min(1.0, cos_angle))
    return math.degrees(math.acos(cos_angle))


def distance(a, b) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def calculate_iou(box_a, box_b) -> float:
    """Intersection over Union of two (x, y, width, height) boxes."""
    x1 = max(box_a.x, box_b.x)
    y1 = max(box_a.y, box_b.y)
    x2 = min(box_a.x + box_a.width, box_b.x + box_b.width)
    y2 = min(box_a.y + box_a.height, box_b.y + box_b.height)
    if x2 < x1 or y2 < y1:
        return 0.0
    intersection = (x2 - x1) * (y2 - y1)
    union = box_a.width * box_a.height + box_b.width * box_b.height - intersection
    if union <= 0:
        return 0.0
    return intersection / union
