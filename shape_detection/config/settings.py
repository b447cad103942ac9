"""Configuration dataclass and loading utilities.

Provides a strongly-typed configuration object that is injected into the
detection service instead of relying on module-level constants.
"""
from __future__ import annotations
from dataclasses import dataclass, field, asdict, fields
from typing import Any, Dict, Optional
import json, os

from .defaults import DEFAULT_CONFIG, CONFIG_PATH_ENV
from ..core.exceptions import ConfigError
from ..core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class Config:
    high_threshold_ratio: float = DEFAULT_CONFIG["high_threshold_ratio"]
    low_threshold_ratio: float = DEFAULT_CONFIG["low_threshold_ratio"]
    min_contour_points: int = DEFAULT_CONFIG["min_contour_points"]
    min_area_ratio: float = DEFAULT_CONFIG["min_area_ratio"]
    min_confidence: float = DEFAULT_CONFIG["min_confidence"]
    duplicate_iou_threshold: float = DEFAULT_CONFIG["duplicate_iou_threshold"]
    debug: bool = DEFAULT_CONFIG["debug"]
    debug_dir: str = DEFAULT_CONFIG["debug_dir"]
    log_level: str = DEFAULT_CONFIG["log_level"]
    # Arbitrary extra values retained for forward compatibility
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        # merge extra keys at top-level for saving
        extra = d.pop("extra", {})
        d.update(extra)
        return d

    def get(self, key: str, default: Any = None) -> Any:
        if key in _FIELD_NAMES:
            return getattr(self, key)
        return self.extra.get(key, default)

    def validate(self) -> "Config":
        """Raise ConfigError when a value is outside its usable range."""
        for name in ("high_threshold_ratio", "low_threshold_ratio", "min_area_ratio",
                     "min_confidence", "duplicate_iou_threshold"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be a number between 0 and 1, got {value!r}")
        if not isinstance(self.min_contour_points, int) or self.min_contour_points < 1:
            raise ConfigError(f"min_contour_points must be a positive integer, got {self.min_contour_points!r}")
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"Unknown log level: {self.log_level!r}")
        return self


_FIELD_NAMES = tuple(f.name for f in fields(Config) if f.name != "extra")


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from a JSON file, falling back to defaults.

    The path defaults to ``$SHAPE_DETECTION_CONFIG`` and then ``config.json``.
    Unknown keys are kept in ``Config.extra``. Values that fail validation
    raise ConfigError; unreadable files only log and use defaults.
    """
    if path is None:
        path = os.environ.get(CONFIG_PATH_ENV, "config.json")

    data: Dict[str, Any] = {}
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded_data = json.load(f)
            if loaded_data is None:
                logger.warning("Configuration file '%s' is empty, using defaults", path)
            elif not isinstance(loaded_data, dict):
                logger.error("Configuration file '%s' does not contain a JSON object, using defaults", path)
            else:
                data = loaded_data
                logger.info("Loaded configuration from '%s'", path)
        except json.JSONDecodeError as e:
            logger.error("Failed to parse configuration file '%s': %s. Using defaults.", path, e)
        except OSError as e:
            logger.error("Could not read configuration file '%s': %s. Using defaults.", path, e)
    else:
        logger.info("Configuration file '%s' does not exist. Using defaults.", path)

    merged = {**DEFAULT_CONFIG, **data}
    # capture unknown keys
    extra = {k: v for k, v in merged.items() if k not in _FIELD_NAMES}
    if extra:
        logger.info("Found extra configuration keys: %s", list(extra.keys()))

    cfg = Config(**{k: merged[k] for k in _FIELD_NAMES}, extra=extra)
    return cfg.validate()


def save_config(cfg: Config, path: str = "config.json") -> None:
    """Write the configuration as indented JSON."""
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(cfg.to_dict(), f, indent=2)
    except OSError as e:
        raise ConfigError(f"Could not write configuration to '{path}': {e}") from e
