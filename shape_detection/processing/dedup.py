"""Greedy suppression of overlapping detections."""
from typing import Iterable, List

from ..core.entities import Shape
from ..utils.geometry import calculate_iou

DEFAULT_IOU_THRESHOLD = 0.5


def remove_duplicates(shapes: Iterable[Shape], iou_threshold: float = DEFAULT_IOU_THRESHOLD) -> List[Shape]:
    """Keep one shape per group of boxes overlapping by more than ``iou_threshold``.

    Shapes are visited in order. A shape overlapping an accepted one replaces
    it in place only when strictly more confident, otherwise it is dropped.
    """
    filtered: List[Shape] = []
    for shape in shapes:
        for index, existing in enumerate(filtered):
            if calculate_iou(shape.bounding_box, existing.bounding_box) > iou_threshold:
                if shape.confidence > existing.confidence:
                    filtered[index] = shape
                break
        else:
            filtered.append(shape)
    return filtered
