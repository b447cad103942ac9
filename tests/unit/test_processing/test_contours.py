"""Unit tests for contour tracing."""
import cv2
import numpy as np

from shape_detection.processing.classifier import calculate_bounding_box
from shape_detection.processing.contours import find_contours
from shape_detection.processing.edges import detect_edges
from shape_detection.processing.grayscale import convert_to_grayscale


def _edge_map(width=30, height=20):
    return np.zeros((height, width), dtype=np.uint8)


class TestFindContours:
    """Test connected edge extraction."""

    def test_empty_map(self):
        assert find_contours(_edge_map()) == []

    def test_square_ring_is_one_contour(self):
        edges = np.zeros((100, 100), dtype=np.uint8)
        cv2.rectangle(edges, (20, 20), (60, 60), 255, 1)

        contours = find_contours(edges)

        assert len(contours) == 1
        assert len(contours[0]) == 4 * 41 - 4
        box = calculate_bounding_box(contours[0].points)
        assert (box.x, box.y, box.width, box.height) == (20, 20, 40, 40)

    def test_starts_at_first_pixel_in_raster_order(self):
        edges = np.zeros((100, 100), dtype=np.uint8)
        cv2.rectangle(edges, (20, 20), (60, 60), 255, 1)
        first = find_contours(edges)[0].points[0]
        assert tuple(first) == (20.0, 20.0)

    def test_line_traced_in_order(self):
        edges = _edge_map()
        edges[5, 2:11] = 255

        contour = find_contours(edges)[0]

        assert [tuple(p) for p in contour.points] == [(float(x), 5.0) for x in range(2, 11)]

    def test_small_clusters_dropped(self):
        edges = _edge_map()
        edges[5, 2:6] = 255     # 4 pixels
        edges[10, 2:7] = 255    # 5 pixels

        contours = find_contours(edges)

        assert len(contours) == 1
        assert len(contours[0]) == 5

    def test_min_points_configurable(self):
        edges = _edge_map()
        edges[5, 2:6] = 255
        assert len(find_contours(edges, min_points=4)) == 1

    def test_border_pixels_are_not_seeds(self):
        edges = _edge_map()
        edges[0, :] = 255
        edges[:, 0] = 255
        assert find_contours(edges) == []

    def test_trace_may_reach_border(self):
        edges = np.zeros((10, 10), dtype=np.uint8)
        edges[:, 3] = 255

        contour = find_contours(edges)[0]
        points = {tuple(p) for p in contour.points}

        assert len(contour) == 10
        assert (3.0, 0.0) in points and (3.0, 9.0) in points
        assert tuple(contour.points[0]) == (3.0, 1.0)

    def test_diagonal_pixels_are_connected(self):
        edges = _edge_map()
        for i in range(6):
            edges[2 + i, 2 + i] = 255
        assert len(find_contours(edges)) == 1

    def test_separate_clusters_in_raster_order(self):
        edges = _edge_map()
        edges[12, 3:10] = 255
        edges[4, 15:25] = 255

        contours = find_contours(edges)

        assert len(contours) == 2
        assert contours[0].points[0, 1] == 4.0
        assert contours[1].points[0, 1] == 12.0

    def test_repeatable(self):
        edges = np.zeros((60, 60), dtype=np.uint8)
        cv2.circle(edges, (30, 30), 20, 255, 1)

        first = find_contours(edges)
        second = find_contours(edges)

        assert len(first) == len(second)
        for a, b in zip(first, second):
            assert np.array_equal(a.points, b.points)


def test_square_contour_bounding_box(white_square_image):
    edges = detect_edges(convert_to_grayscale(white_square_image))
    contours = find_contours(edges)

    largest = max(contours, key=len)
    box = calculate_bounding_box(largest.points)

    assert abs(box.x - 50) <= 10 and abs(box.y - 50) <= 10
    assert abs(box.width - 100) <= 10 and abs(box.height - 100) <= 10
