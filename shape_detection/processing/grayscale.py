"""RGBA to luminance conversion."""

import numpy as np

from ..core.entities import RasterImage

# ITU-R BT.601 luma weights
_WEIGHTS = (0.299, 0.587, 0.114)


def convert_to_grayscale(image: RasterImage) -> np.ndarray:
    """Return an (H, W) uint8 luminance buffer; alpha is ignored.

    Values are rounded half up, so pure red maps to 76 and white to 255.
    """
    rgba = image.as_array().astype(np.float64)
    r_w, g_w, b_w = _WEIGHTS
    luminance = r_w * rgba[..., 0] + g_w * rgba[..., 1] + b_w * rgba[..., 2]
    return np.floor(luminance + 0.5).astype(np.uint8)
