"""Default configuration values."""

from typing import Any, Dict

DEFAULT_CONFIG: Dict[str, Any] = {
    # Edge detection
    "high_threshold_ratio": 0.08,  # of the strongest suppressed gradient
    "low_threshold_ratio": 0.4,    # of the high threshold

    # Contours and classification
    "min_contour_points": 5,
    "min_area_ratio": 0.0001,      # of the image area
    "min_confidence": 0.3,
    "duplicate_iou_threshold": 0.5,

    # Diagnostics
    "debug": False,
    "debug_dir": "debug_images",
    "log_level": "INFO",
}

CONFIG_PATH_ENV = "SHAPE_DETECTION_CONFIG"
