"""Unit tests for configuration loading and validation."""
import json

import pytest

from shape_detection.config.defaults import CONFIG_PATH_ENV, DEFAULT_CONFIG
from shape_detection.config.settings import Config, load_config, save_config
from shape_detection.core.exceptions import ConfigError


class TestConfig:
    """Test the Config dataclass."""

    def test_defaults(self):
        config = Config()

        assert config.high_threshold_ratio == 0.08
        assert config.low_threshold_ratio == 0.4
        assert config.min_contour_points == 5
        assert config.min_area_ratio == 0.0001
        assert config.min_confidence == 0.3
        assert config.duplicate_iou_threshold == 0.5
        assert config.debug is False

    def test_get_known_and_extra_keys(self):
        config = Config(extra={"owner": "qa"})

        assert config.get("min_confidence") == 0.3
        assert config.get("owner") == "qa"
        assert config.get("missing", 7) == 7

    def test_to_dict_flattens_extra(self):
        data = Config(extra={"owner": "qa"}).to_dict()
        assert data["owner"] == "qa"
        assert "extra" not in data

    @pytest.mark.parametrize("field,value", [
        ("high_threshold_ratio", 1.5),
        ("low_threshold_ratio", -0.1),
        ("min_confidence", "high"),
        ("min_contour_points", 0),
        ("log_level", "LOUD"),
    ])
    def test_validate_rejects_bad_values(self, field, value):
        config = Config()
        setattr(config, field, value)
        with pytest.raises(ConfigError):
            config.validate()

    def test_validate_returns_self(self):
        config = Config()
        assert config.validate() is config


class TestLoadConfig:
    """Test loading configuration files."""

    def test_missing_file_uses_defaults(self, temp_dir):
        config = load_config(str(temp_dir / "absent.json"))
        assert config.to_dict() == DEFAULT_CONFIG

    def test_invalid_json_uses_defaults(self, temp_dir):
        path = temp_dir / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        config = load_config(str(path))
        assert config.min_confidence == DEFAULT_CONFIG["min_confidence"]

    def test_non_object_json_uses_defaults(self, temp_dir):
        path = temp_dir / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_config(str(path)).min_contour_points == 5

    def test_values_and_extra_keys_loaded(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text(json.dumps({"min_confidence": 0.5, "camera": "none"}), encoding="utf-8")

        config = load_config(str(path))

        assert config.min_confidence == 0.5
        assert config.extra == {"camera": "none"}

    def test_out_of_range_value_raises(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text(json.dumps({"high_threshold_ratio": 3}), encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_environment_variable_path(self, temp_dir, monkeypatch):
        path = temp_dir / "env.json"
        path.write_text(json.dumps({"min_area_ratio": 0.001}), encoding="utf-8")
        monkeypatch.setenv(CONFIG_PATH_ENV, str(path))

        assert load_config().min_area_ratio == 0.001

    def test_save_then_load(self, temp_dir):
        path = temp_dir / "saved.json"
        save_config(Config(min_confidence=0.45, extra={"note": "x"}), str(path))

        config = load_config(str(path))

        assert config.min_confidence == 0.45
        assert config.extra == {"note": "x"}

    def test_save_to_missing_directory_raises(self, temp_dir):
        with pytest.raises(ConfigError):
            save_config(Config(), str(temp_dir / "no" / "such" / "dir.json"))
