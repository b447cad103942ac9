"""Contour tracing over a binary edge map."""
from typing import List, Tuple

import numpy as np

from ..core.entities import Contour
from ..core.logging_config import get_logger

logger = get_logger(__name__)

# E, SE, S, SW, W, NW, N, NE
NEIGHBOR_OFFSETS = ((1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1))

DEFAULT_MIN_POINTS = 5


def trace_contour(edge_flags: List[bool], visited: bytearray, width: int, height: int,
                  start_x: int, start_y: int) -> List[Tuple[int, int]]:
    """Collect every unvisited edge pixel 8-connected to the start pixel.

    Depth first with an explicit stack: neighbours are pushed in
    NEIGHBOR_OFFSETS order and the most recently pushed one is expanded
    next, so the point order follows that traversal. ``visited`` is shared
    across calls and marked here.
    """
    points: List[Tuple[int, int]] = []
    stack = [(start_x, start_y)]
    while stack:
        x, y = stack.pop()
        idx = y * width + x
        if visited[idx]:
            continue
        visited[idx] = 1
        points.append((x, y))
        for dx, dy in NEIGHBOR_OFFSETS:
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and 0 <= ny < height:
                nidx = ny * width + nx
                if edge_flags[nidx] and not visited[nidx]:
                    stack.append((nx, ny))
    return points


def find_contours(edges: np.ndarray, min_points: int = DEFAULT_MIN_POINTS) -> List[Contour]:
    """Split an (H, W) edge map (non-zero = edge) into contours.

    Seeds are interior edge pixels taken in raster order; traces may still
    walk onto the border ring. Clusters with fewer than ``min_points``
    pixels are dropped but stay visited.
    """
    height, width = edges.shape
    edge_mask = edges > 0
    edge_flags = edge_mask.ravel().tolist()
    visited = bytearray(width * height)

    seeds = np.zeros_like(edge_mask)
    seeds[1:-1, 1:-1] = edge_mask[1:-1, 1:-1]

    contours: List[Contour] = []
    discarded = 0
    for idx in np.flatnonzero(seeds):
        if visited[idx]:
            continue
        y, x = divmod(int(idx), width)
        points = trace_contour(edge_flags, visited, width, height, x, y)
        if len(points) >= min_points:
            contours.append(Contour(points))
        else:
            discarded += 1

    logger.debug("Traced %d contours (%d below %d points)", len(contours), discarded, min_points)
    return contours
