"""Douglas-Peucker polygon simplification with closed-loop handling."""
from typing import List, Tuple

import numpy as np

from ..utils.geometry import distance, perpendicular_distances

# endpoints closer than this are treated as a closed loop
CLOSED_LOOP_DISTANCE = 5.0
MIN_EPSILON = 1.0


def _summarize(segment: np.ndarray, closed: bool) -> np.ndarray:
    n = len(segment)
    if closed:
        if n <= 3:
            return segment
        return segment[[0, n // 2, n - 1]]
    return segment[[0, n - 1]]


def douglas_peucker(points, epsilon: float) -> np.ndarray:
    """Simplify an ordered point sequence, returning an (M, 2) array.

    Fewer than three points come back unchanged. ``epsilon`` is floored at 1.
    A segment whose endpoints lie within CLOSED_LOOP_DISTANCE of each other
    is closed: the split search also considers its last point, and when it is
    not split it keeps its first, middle and last points instead of only the
    endpoints. Split halves are joined with the shared point kept once.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(pts) < 3:
        return pts.copy()
    epsilon = max(MIN_EPSILON, float(epsilon))

    # explicit work stack instead of recursion; leaves come out left to right
    leaves: List[np.ndarray] = []
    stack: List[Tuple[int, int]] = [(0, len(pts) - 1)]
    while stack:
        lo, hi = stack.pop()
        segment = pts[lo:hi + 1]
        n = len(segment)
        if n < 3:
            leaves.append(segment)
            continue

        start, end = segment[0], segment[-1]
        closed = distance(start, end) < CLOSED_LOOP_DISTANCE
        search_end = n if closed else n - 1
        dists = perpendicular_distances(segment[1:search_end], start, end)

        max_index = int(np.argmax(dists)) + 1
        if dists[max_index - 1] > epsilon:
            stack.append((lo + max_index, hi))
            stack.append((lo, lo + max_index))
        else:
            leaves.append(_summarize(segment, closed))

    merged = [leaf[:-1] for leaf in leaves[:-1]]
    merged.append(leaves[-1])
    return np.concatenate(merged)
