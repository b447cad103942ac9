"""Image conversion utilities between OpenCV arrays and the pipeline's RGBA input."""

import cv2
import numpy as np

from ..core.entities import RasterImage
from ..core.exceptions import InvalidInputError

_TO_RGBA = {
    1: cv2.COLOR_GRAY2RGBA,
    3: cv2.COLOR_BGR2RGBA,
    4: cv2.COLOR_BGRA2RGBA,
}


def to_raster_image(image: np.ndarray) -> RasterImage:
    """Convert an OpenCV image (gray, BGR or BGRA uint8) into a RasterImage."""
    image = np.asarray(image)
    if image.dtype != np.uint8:
        raise InvalidInputError(f"Expected a uint8 image, got {image.dtype}")
    channels = 1 if image.ndim == 2 else (image.shape[2] if image.ndim == 3 else 0)
    if channels not in _TO_RGBA:
        raise InvalidInputError(f"Unsupported image shape: {image.shape}")
    if image.size == 0:
        raise InvalidInputError("Image is empty")
    rgba = cv2.cvtColor(image, _TO_RGBA[channels])
    return RasterImage.from_rgba_array(rgba)


def raster_to_bgr(image: RasterImage) -> np.ndarray:
    """Convert a RasterImage back to a BGR array for drawing/saving."""
    return cv2.cvtColor(image.as_array().copy(), cv2.COLOR_RGBA2BGR)


def buffer_to_bgr(buffer: np.ndarray) -> np.ndarray:
    """Render a single-channel stage buffer (grayscale or edge map) as BGR."""
    gray = np.clip(np.asarray(buffer), 0, 255).astype(np.uint8)
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)
