"""
tests/test_config_schema.py - Tests for config_schema.py

Loading, schema validation, self-healing, presets, hashing and receipts.
"""

import json

import pytest
import yaml

import config_schema
from glow.types_config import CONFIG_CALM, CONFIG_DEFAULT, CONFIG_SNAPPY
from glow.validation import validate_config


class TestFromDict:
    """Building configs from mappings."""

    def test_empty_is_default(self):
        assert config_schema.from_dict({}) == CONFIG_DEFAULT
        assert config_schema.from_dict(None) == CONFIG_DEFAULT

    def test_preset(self):
        assert config_schema.from_dict({"preset": "CALM"}) == CONFIG_CALM

    def test_overrides_on_preset(self):
        config = config_schema.from_dict({"preset": "SNAPPY", "spring_factor": 0.5})
        assert config.spring_factor == 0.5
        assert config.velocity_boost_decay == CONFIG_SNAPPY.velocity_boost_decay
        assert config.name == "SNAPPY"

    def test_int_values_become_float(self):
        config = config_schema.from_dict({"proximity_threshold": 80})
        assert config.proximity_threshold == 80.0
        assert isinstance(config.proximity_threshold, float)

    def test_sum_policy(self):
        config = config_schema.from_dict({"boost_policy": "SUM"})
        assert config.boost_policy == "SUM"

    def test_result_is_valid(self):
        config = config_schema.from_dict({"preset": "CALM", "border_width": 3})
        assert validate_config(config) == []


class TestStrict:
    """Strict mode raises instead of healing."""

    def test_out_of_range(self):
        with pytest.raises(ValueError) as exc_info:
            config_schema.from_dict({"spring_factor": 1.5}, strict=True)
        assert "spring_factor" in str(exc_info.value)

    def test_unknown_field(self):
        with pytest.raises(ValueError):
            config_schema.from_dict({"spring": 0.2}, strict=True)

    def test_not_a_mapping(self):
        with pytest.raises(ValueError):
            config_schema.from_dict([1, 2, 3])


class TestSelfHealing:
    """Non-strict mode heals with warnings."""

    def test_clamps_spring_factor(self):
        with pytest.warns(UserWarning, match="spring_factor"):
            config = config_schema.from_dict({"spring_factor": 1.5})
        assert config.spring_factor == 1.0

    def test_decay_out_of_range_uses_preset(self):
        with pytest.warns(UserWarning):
            config = config_schema.from_dict({"preset": "SNAPPY", "velocity_boost_decay": 1.0})
        assert config.velocity_boost_decay == CONFIG_SNAPPY.velocity_boost_decay

    def test_nan_uses_preset(self):
        with pytest.warns(UserWarning):
            config = config_schema.from_dict({"spring_factor": float("nan")})
        assert config.spring_factor == CONFIG_DEFAULT.spring_factor

    def test_unknown_field_ignored(self):
        with pytest.warns(UserWarning, match="unknown field"):
            config = config_schema.from_dict({"bogus": 1})
        assert config == CONFIG_DEFAULT

    def test_unknown_policy(self):
        with pytest.warns(UserWarning, match="boost_policy"):
            config = config_schema.from_dict({"boost_policy": "AVG"})
        assert config.boost_policy == "MAX"

    def test_negative_border_clamped(self):
        with pytest.warns(UserWarning):
            config = config_schema.from_dict({"border_width": -2})
        assert config.border_width == 0.0


class TestFiles:
    """JSON and YAML files."""

    def test_load_json(self, tmp_path):
        path = tmp_path / "glow.json"
        path.write_text(json.dumps({"preset": "CALM", "max_velocity_boost": 0.1}))
        config = config_schema.load(str(path))
        assert config.max_velocity_boost == 0.1
        assert config.proximity_threshold == CONFIG_CALM.proximity_threshold

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "glow.yaml"
        path.write_text(yaml.safe_dump({"proximity_threshold": 90.0, "name": "wide"}))
        config = config_schema.load(str(path))
        assert config.proximity_threshold == 90.0
        assert config.name == "wide"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            config_schema.load(str(tmp_path / "nope.json"))

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "snappy.yml"
        config_schema.save(CONFIG_SNAPPY, str(path))
        assert config_schema.load(str(path), strict=True) == CONFIG_SNAPPY


class TestSchemaAndHash:

    def test_export_schema(self):
        schema = config_schema.export_schema()
        assert schema["title"] == "EngineConfig"
        assert schema["additionalProperties"] is False
        assert "spring_factor" in schema["properties"]

    def test_export_is_a_copy(self):
        schema = config_schema.export_schema()
        schema["properties"].clear()
        assert "spring_factor" in config_schema.export_schema()["properties"]

    def test_config_hash(self):
        h1 = config_schema.config_hash(CONFIG_DEFAULT)
        h2 = config_schema.config_hash(config_schema.from_dict({}))
        assert h1 == h2, "Equal configs must hash equally"
        assert h1 != config_schema.config_hash(CONFIG_CALM)
        sha, b3 = h1.split(":")
        assert len(sha) == 64 and len(b3) == 64

    def test_config_receipt(self):
        receipt = config_schema.emit_config_receipt(CONFIG_CALM, "calm.json")
        assert receipt["receipt_type"] == "config_loaded"
        assert receipt["tenant_id"] == "glow"
        assert receipt["source"] == "calm.json"
        assert receipt["config_name"] == "CALM"
        assert receipt["config_hash"] == config_schema.config_hash(CONFIG_CALM)
