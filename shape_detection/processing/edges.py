"""Canny-style edge detection on a luminance buffer.

The chain is blur -> Sobel gradient -> non-maximum suppression -> double
threshold with one hysteresis pass. Every stage works on interior pixels
only; the one-pixel border ring of each intermediate buffer stays 0. On a
non-black image that zero ring produces a gradient just inside the border,
so such images report a rectangular edge ring at index 1.
"""
from typing import Tuple

import numpy as np

from ..core.constants import EDGE_NONE, EDGE_STRONG, EDGE_WEAK

BLUR_KERNEL = np.array([[1, 2, 1],
                        [2, 4, 2],
                        [1, 2, 1]])
BLUR_KERNEL_SUM = 16

SOBEL_X = np.array([[-1, 0, 1],
                    [-2, 0, 2],
                    [-1, 0, 1]])

SOBEL_Y = np.array([[-1, -2, -1],
                    [0, 0, 0],
                    [1, 2, 1]])

DEFAULT_HIGH_RATIO = 0.08
DEFAULT_LOW_RATIO = 0.4


def _convolve_interior(data: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """3x3 correlation over interior pixels; the border ring is left at 0."""
    height, width = data.shape
    out = np.zeros((height, width), dtype=np.float64)
    if height < 3 or width < 3:
        return out
    src = data.astype(np.float64)
    acc = np.zeros((height - 2, width - 2), dtype=np.float64)
    for ky in range(3):
        for kx in range(3):
            weight = kernel[ky, kx]
            if weight:
                acc += weight * src[ky:ky + height - 2, kx:kx + width - 2]
    out[1:-1, 1:-1] = acc
    return out


def _to_byte(values: np.ndarray) -> np.ndarray:
    # clamped byte storage: round half to even, saturate to 0..255
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def gaussian_blur(gray: np.ndarray) -> np.ndarray:
    return _to_byte(_convolve_interior(gray, BLUR_KERNEL) / BLUR_KERNEL_SUM)


def calculate_gradients(blurred: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Sobel magnitude and direction (radians, -pi..pi) per interior pixel."""
    gx = _convolve_interior(blurred, SOBEL_X)
    gy = _convolve_interior(blurred, SOBEL_Y)
    magnitude = np.sqrt(gx * gx + gy * gy)
    direction = np.arctan2(gy, gx)
    return magnitude, direction


def non_maximum_suppression(magnitude: np.ndarray, direction: np.ndarray) -> np.ndarray:
    """Thin edges to pixels that are local maxima across the gradient.

    The direction is bucketed into four 45 degree bins. A pixel survives when
    its magnitude is >= both neighbours of its bin and keeps min(255, magnitude).
    """
    height, width = magnitude.shape
    result = np.zeros((height, width), dtype=np.uint8)
    if height < 3 or width < 3:
        return result

    angle = direction[1:-1, 1:-1] * (180.0 / np.pi)
    center = magnitude[1:-1, 1:-1]

    horizontal = ((angle >= -22.5) & (angle < 22.5)) | (angle >= 157.5) | (angle < -157.5)
    diagonal = ((angle >= 22.5) & (angle < 67.5)) | ((angle >= -157.5) & (angle < -112.5))
    vertical = ((angle >= 67.5) & (angle < 112.5)) | ((angle >= -112.5) & (angle < -67.5))
    bins = [horizontal, diagonal & ~horizontal, vertical & ~horizontal & ~diagonal]

    east, west = magnitude[1:-1, 2:], magnitude[1:-1, :-2]
    north, south = magnitude[:-2, 1:-1], magnitude[2:, 1:-1]
    north_east, south_west = magnitude[:-2, 2:], magnitude[2:, :-2]
    north_west, south_east = magnitude[:-2, :-2], magnitude[2:, 2:]

    neighbor1 = np.select(bins, [east, north_east, north], default=north_west)
    neighbor2 = np.select(bins, [west, south_west, south], default=south_east)

    keep = (center >= neighbor1) & (center >= neighbor2)
    result[1:-1, 1:-1] = np.where(keep, _to_byte(np.minimum(255.0, center)), 0)
    return result


def double_threshold(suppressed: np.ndarray,
                     high_ratio: float = DEFAULT_HIGH_RATIO,
                     low_ratio: float = DEFAULT_LOW_RATIO) -> np.ndarray:
    """Classify pixels as strong/weak/none, then promote or drop weak pixels.

    Hysteresis is a single raster-order pass over interior pixels that
    updates the map in place: a weak pixel becomes strong when any of its
    8 neighbours is strong at that moment, otherwise it is cleared.
    """
    result = np.zeros(suppressed.shape, dtype=np.uint8)
    max_value = int(suppressed.max()) if suppressed.size else 0
    if max_value == 0:
        return result

    high = max_value * high_ratio
    low = high * low_ratio
    result[suppressed >= high] = EDGE_STRONG
    result[(suppressed >= low) & (suppressed < high)] = EDGE_WEAK

    height, width = result.shape
    if height < 3 or width < 3:
        return result
    for y, x in np.argwhere(result[1:-1, 1:-1] == EDGE_WEAK) + 1:
        window = result[y - 1:y + 2, x - 1:x + 2]
        result[y, x] = EDGE_STRONG if (window == EDGE_STRONG).any() else EDGE_NONE
    return result


def detect_edges(gray: np.ndarray,
                 high_ratio: float = DEFAULT_HIGH_RATIO,
                 low_ratio: float = DEFAULT_LOW_RATIO) -> np.ndarray:
    """Run the full edge chain on an (H, W) luminance buffer."""
    blurred = gaussian_blur(gray)
    magnitude, direction = calculate_gradients(blurred)
    suppressed = non_maximum_suppression(magnitude, direction)
    return double_threshold(suppressed, high_ratio, low_ratio)
