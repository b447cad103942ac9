"""Domain entities (data-only structures) shared by the pipeline stages."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, NamedTuple, Tuple

import numpy as np

from .constants import SHAPE_TYPES
from .exceptions import InvalidInputError


class Point(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True, slots=True)
class RasterImage:
    """Decoded RGBA image handed to the pipeline by the caller.

    ``pixels`` is a flat ``uint8`` sequence of ``width * height * 4`` values
    (R, G, B, A per pixel, row-major).
    """
    width: int
    height: int
    pixels: np.ndarray = field(repr=False, compare=False)

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise InvalidInputError(f"Image must have a positive size, got {self.width}x{self.height}")
        if isinstance(self.pixels, (bytes, bytearray, memoryview)):
            data = np.frombuffer(self.pixels, dtype=np.uint8)
        else:
            data = np.asarray(self.pixels, dtype=np.uint8).reshape(-1)
        expected = self.width * self.height * 4
        if data.size != expected:
            raise InvalidInputError(
                f"Pixel buffer has {data.size} values, expected {expected} for {self.width}x{self.height} RGBA"
            )
        data = data.copy()
        data.flags.writeable = False
        object.__setattr__(self, "pixels", data)

    @classmethod
    def from_rgba_array(cls, array: np.ndarray) -> "RasterImage":
        """Build an image from an (H, W, 4) RGBA array."""
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] != 4:
            raise InvalidInputError(f"Expected an (H, W, 4) array, got shape {array.shape}")
        return cls(width=array.shape[1], height=array.shape[0], pixels=array.reshape(-1))

    def as_array(self) -> np.ndarray:
        """View the pixels as an (H, W, 4) array."""
        return self.pixels.reshape(self.height, self.width, 4)


@dataclass(frozen=True, slots=True, eq=False)
class Contour:
    """Ordered pixel coordinates found by tracing one connected edge cluster."""
    points: np.ndarray

    def __post_init__(self):
        pts = np.array(self.points, dtype=np.float64)
        if pts.ndim != 2 or pts.shape[1] != 2 or pts.shape[0] < 1:
            raise ValueError(f"Contour needs at least one (x, y) point, got shape {pts.shape}")
        pts.flags.writeable = False
        object.__setattr__(self, "points", pts)

    def __len__(self) -> int:
        return self.points.shape[0]

    def __iter__(self) -> Iterator[Point]:
        for x, y in self.points:
            yield Point(float(x), float(y))


@dataclass(frozen=True, slots=True)
class Shape:
    type: str  # circle|square|rectangle|triangle|pentagon
    bounding_box: BoundingBox
    center: Point
    area: float
    confidence: float

    def __post_init__(self):
        if self.type not in SHAPE_TYPES:
            raise ValueError(f"Unknown shape type: {self.type!r}")
        if not self.area > 0:
            raise ValueError(f"Shape area must be positive, got {self.area}")
        object.__setattr__(self, "confidence", min(1.0, max(0.0, float(self.confidence))))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "boundingBox": self.bounding_box.to_dict(),
            "center": {"x": self.center.x, "y": self.center.y},
            "area": self.area,
            "confidence": self.confidence,
        }


@dataclass(frozen=True, slots=True)
class DetectionResult:
    shapes: Tuple[Shape, ...]
    processing_time: float  # milliseconds

    @classmethod
    def empty(cls, processing_time: float) -> "DetectionResult":
        return cls(shapes=(), processing_time=processing_time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shapes": [s.to_dict() for s in self.shapes],
            "processingTime": self.processing_time,
        }


