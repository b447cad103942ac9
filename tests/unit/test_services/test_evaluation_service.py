"""Unit tests for evaluation against expected shapes."""
import json

import pytest

from shape_detection.core.entities import DetectionResult
from shape_detection.core.exceptions import ConfigError
from shape_detection.services.evaluation_service import (
    ShapeEvaluator, load_expected_results, shape_from_dict
)


@pytest.fixture
def evaluator():
    return ShapeEvaluator()


class TestCompareShapes:
    """Test pairwise comparison."""

    def test_identical_shapes_pass(self, evaluator, shape_builder):
        shape = shape_builder("circle", 10, 10, 50, 50)
        comparison = evaluator.compare_shapes(shape, shape)

        assert comparison.iou == pytest.approx(1.0)
        assert comparison.center_distance == 0.0
        assert comparison.area_error == 0.0
        assert comparison.type_match
        assert comparison.passed

    def test_shifted_shape_fails(self, evaluator, shape_builder):
        expected = shape_builder("square", 0, 0, 50, 50)
        detected = shape_builder("square", 12, 0, 50, 50)
        comparison = evaluator.compare_shapes(detected, expected)

        assert comparison.center_distance == pytest.approx(12.0)
        assert not comparison.passed

    def test_wrong_type_still_compared(self, evaluator, shape_builder):
        comparison = evaluator.compare_shapes(shape_builder("triangle"), shape_builder("square"))
        assert comparison.passed
        assert not comparison.type_match


class TestFindBestMatch:
    """Test matching of detections to an expected shape."""

    def test_highest_iou_wins(self, evaluator, shape_builder):
        expected = shape_builder("square", 0, 0, 100, 100)
        near = shape_builder("square", 5, 5, 100, 100)
        nearer = shape_builder("square", 1, 1, 100, 100)

        shape, iou = evaluator.find_best_match(expected, [near, nearer])

        assert shape is nearer
        assert iou > 0.9

    def test_no_match_below_threshold(self, evaluator, shape_builder):
        expected = shape_builder("square", 0, 0, 100, 100)
        assert evaluator.find_best_match(expected, [shape_builder("square", 60, 0, 100, 100)]) is None


class TestEvaluate:
    """Test report generation."""

    def test_rates(self, evaluator, shape_builder):
        expected = [
            shape_builder("square", 0, 0, 50, 50),
            shape_builder("circle", 100, 100, 50, 50),
            shape_builder("triangle", 200, 200, 50, 50),
        ]
        detected = (
            shape_builder("square", 1, 1, 50, 50),
            shape_builder("square", 100, 100, 50, 50),
        )

        report = evaluator.evaluate(expected, DetectionResult(shapes=detected, processing_time=5.0))

        assert report.total_expected == 3
        assert report.detected_count == 2
        assert report.correct_detections == 2
        assert report.correct_classifications == 1
        assert report.detection_rate == pytest.approx(2 / 3)
        assert report.classification_accuracy == pytest.approx(1 / 3)
        assert report.comparisons[2].detected is None
        assert report.to_dict()["detectionRate"] == pytest.approx(2 / 3)

    def test_empty_expectations(self, evaluator):
        report = evaluator.evaluate([], DetectionResult.empty(1.0))
        assert report.detection_rate == 0.0
        assert report.classification_accuracy == 0.0


class TestExpectedResults:
    """Test ground truth loading."""

    def test_shape_from_dict_round_trip(self, shape_builder):
        shape = shape_builder("pentagon", 3, 4, 30, 40, confidence=0.7)
        assert shape_from_dict(shape.to_dict()) == shape

    def test_load_expected_results(self, temp_dir):
        path = temp_dir / "expected_results.json"
        path.write_text(json.dumps({
            "circle_simple.png": {"shapes": [{
                "type": "circle",
                "boundingBox": {"x": 50, "y": 50, "width": 100, "height": 100},
                "center": {"x": 100, "y": 100},
                "area": 7854,
            }]},
            "no_shapes.png": {"shapes": []},
        }), encoding="utf-8")

        results = load_expected_results(path)

        assert results["no_shapes.png"] == []
        circle = results["circle_simple.png"][0]
        assert circle.type == "circle"
        assert circle.confidence == 1.0
        assert circle.bounding_box.width == 100

    def test_missing_file_raises(self, temp_dir):
        with pytest.raises(ConfigError):
            load_expected_results(temp_dir / "missing.json")

    def test_malformed_entry_raises(self, temp_dir):
        path = temp_dir / "bad.json"
        path.write_text(json.dumps({"a.png": {"shapes": [{"type": "circle"}]}}), encoding="utf-8")
        with pytest.raises(ConfigError):
            load_expected_results(path)
