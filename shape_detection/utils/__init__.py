"""Utility functions package."""

from .geometry import (
    perpendicular_distance, perpendicular_distances, vertex_angle, distance, calculate_iou
)
from .image_utils import to_raster_image, raster_to_bgr, buffer_to_bgr

__all__ = [
    "perpendicular_distance", "perpendicular_distances", "vertex_angle", "distance",
    "calculate_iou", "to_raster_image", "raster_to_bgr", "buffer_to_bgr"
]
