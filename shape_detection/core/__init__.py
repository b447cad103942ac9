"""Core domain entities and constants."""

from .entities import BoundingBox, Contour, DetectionResult, Point, RasterImage, Shape
from .exceptions import ApplicationError, ConfigError, DetectionError, InvalidInputError
from .constants import APP_NAME, VERSION, SHAPE_TYPES

__all__ = [
    "BoundingBox", "Contour", "DetectionResult", "Point", "RasterImage", "Shape",
    "ApplicationError", "ConfigError", "DetectionError", "InvalidInputError",
    "APP_NAME", "VERSION", "SHAPE_TYPES"
]
