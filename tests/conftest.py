"""Pytest configuration and shared fixtures for the shape detection package.

Provides synthetic images drawn with OpenCV and hand-built contours whose
simplified polygons are known, so classification can be tested without
going through edge detection.
"""
import math
import sys
import tempfile
import logging
from pathlib import Path
from typing import List, Sequence, Tuple

import cv2
import numpy as np
import pytest

# Add the project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from shape_detection.config.settings import Config
from shape_detection.core.entities import BoundingBox, Contour, Point, RasterImage, Shape
from shape_detection.utils.image_utils import to_raster_image


# Configure logging for tests
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def default_config():
    return Config()


def make_solid_image(width: int, height: int, rgba=(0, 0, 0, 255)) -> RasterImage:
    """Uniformly coloured RasterImage."""
    array = np.empty((height, width, 4), dtype=np.uint8)
    array[:, :] = rgba
    return RasterImage.from_rgba_array(array)


@pytest.fixture
def solid_image():
    return make_solid_image


def walk_polygon(vertices: Sequence[Tuple[float, float]]) -> List[Tuple[float, float]]:
    """Points along a closed polygon in steps of at most one pixel.

    The walk starts at ``vertices[0]`` and stops one step before returning
    to it, the way a traced outline ends next to its starting pixel.
    """
    points = []
    n = len(vertices)
    for i in range(n):
        x0, y0 = vertices[i]
        x1, y1 = vertices[(i + 1) % n]
        steps = max(1, int(math.ceil(math.hypot(x1 - x0, y1 - y0))))
        for k in range(steps):
            t = k / steps
            points.append((x0 + (x1 - x0) * t, y0 + (y1 - y0) * t))
    return points


class ContourFactory:
    """Contours with known Douglas-Peucker outcomes."""

    @staticmethod
    def circle(cx: float = 100.0, cy: float = 100.0, radius: float = 40.0, count: int = 360) -> Contour:
        angles = np.linspace(0, 2 * np.pi, count, endpoint=False)
        return Contour(np.column_stack([cx + radius * np.cos(angles), cy + radius * np.sin(angles)]))

    @staticmethod
    def square_from_edge_midpoint() -> Contour:
        # (50,50)-(150,150), starting halfway along the top edge
        return Contour(walk_polygon([(100, 50), (150, 50), (150, 150), (50, 150), (50, 50)]))

    @staticmethod
    def square_from_corner() -> Contour:
        return Contour(walk_polygon([(50, 50), (150, 50), (150, 150), (50, 150)]))

    @staticmethod
    def rectangle_from_edge_midpoint() -> Contour:
        # (20,60)-(180,140)
        return Contour(walk_polygon([(100, 60), (180, 60), (180, 140), (20, 140), (20, 60)]))

    @staticmethod
    def triangle() -> Contour:
        return Contour(walk_polygon([(100, 50), (50, 150), (150, 150)]))

    @staticmethod
    def house_pentagon() -> Contour:
        # roof apex (100,40), walls x=70/130, floor y=180; start mid-floor heading left
        return Contour(walk_polygon([(100, 180), (70, 180), (70, 80), (100, 40), (130, 80), (130, 180)]))


@pytest.fixture
def contour_factory():
    return ContourFactory


def make_shape(shape_type: str = "square", x: float = 0, y: float = 0, width: float = 10,
               height: float = 10, confidence: float = 0.8) -> Shape:
    return Shape(
        type=shape_type,
        bounding_box=BoundingBox(x=x, y=y, width=width, height=height),
        center=Point(x + width / 2, y + height / 2),
        area=max(1.0, width * height),
        confidence=confidence,
    )


@pytest.fixture
def shape_builder():
    return make_shape


@pytest.fixture
def black_canvas():
    """200x200 black BGR canvas."""
    return np.zeros((200, 200, 3), dtype=np.uint8)


@pytest.fixture
def white_square_image(black_canvas):
    """White filled square covering pixels 50..149 on black."""
    cv2.rectangle(black_canvas, (50, 50), (149, 149), (255, 255, 255), -1)
    return to_raster_image(black_canvas)


@pytest.fixture
def multi_shape_image():
    """400x300 black BGR image with three separated white shapes and their boxes."""
    image = np.zeros((300, 400, 3), dtype=np.uint8)
    cv2.rectangle(image, (30, 30), (129, 129), (255, 255, 255), -1)
    cv2.circle(image, (280, 80), 45, (255, 255, 255), -1)
    triangle = np.array([[200, 170], [140, 270], [260, 270]], dtype=np.int32)
    cv2.fillPoly(image, [triangle], (255, 255, 255))
    boxes = [
        BoundingBox(30, 30, 100, 100),
        BoundingBox(235, 35, 90, 90),
        BoundingBox(140, 170, 120, 100),
    ]
    return image, boxes
