"""Classical computer-vision detection of simple geometric shapes."""

from .core.constants import VERSION
from .core.entities import BoundingBox, Contour, DetectionResult, Point, RasterImage, Shape
from .config.settings import Config, load_config
from .services.detection_service import ShapeDetectionService

__version__ = VERSION

__all__ = [
    "BoundingBox", "Contour", "DetectionResult", "Point", "RasterImage", "Shape",
    "Config", "load_config", "ShapeDetectionService", "__version__",
]
