"""
Engine Configuration Schema - Self-Validating Config Loading

This module loads, validates and exports EngineConfig, the tuning contract of
the glow engine.

Consumed by:
- glow_cli.py (validate-config, replay)
- hosts that ship tuning as JSON/YAML next to their UI bundle

Design Principles:
- Self-validating: Can't create an invalid config
- Self-healing: Invalid input -> safe defaults + warnings (unless strict)
- Self-describing: Exports its JSON Schema
- Immutable: Frozen after load, no runtime mutation
"""

from __future__ import annotations

import json
import logging
import math
import warnings
from dataclasses import asdict, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from jsonschema import Draft202012Validator

from receipts import dual_hash, emit_receipt
from glow.constants import BOOST_POLICIES, TENANT_ID
from glow.types_config import EngineConfig, CONFIG_DEFAULT, PRESETS
from glow.validation import validate_config

logger = logging.getLogger(__name__)

__all__ = [
    'load',
    'from_dict',
    'to_dict',
    'save',
    'export_schema',
    'config_hash',
    'emit_config_receipt',
]


# =============================================================================
# JSON Schema Definition (Draft 2020-12)
# =============================================================================

_JSON_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://circuitglow.dev/schemas/engine-config/v1.0",
    "title": "EngineConfig",
    "description": "Proximity glow engine tuning constants",
    "type": "object",
    "properties": {
        "preset": {
            "type": "string",
            "description": "Preset the remaining fields override",
            "enum": sorted(PRESETS)
        },
        "name": {
            "type": "string",
            "description": "Label for this tuning",
            "minLength": 1
        },
        "proximity_threshold": {
            "type": "number",
            "description": "Distance (px) beyond which the target intensity is 0",
            "exclusiveMinimum": 0
        },
        "spring_factor": {
            "type": "number",
            "description": "Exponential smoothing coefficient",
            "exclusiveMinimum": 0,
            "maximum": 1
        },
        "min_intensity_for_render": {
            "type": "number",
            "description": "Intensity below which nothing is painted",
            "minimum": 0,
            "maximum": 1
        },
        "velocity_sensitivity": {
            "type": "number",
            "description": "Boost per px/ms of pointer speed",
            "minimum": 0
        },
        "velocity_boost_decay": {
            "type": "number",
            "description": "Per-frame geometric boost decay",
            "exclusiveMinimum": 0,
            "exclusiveMaximum": 1
        },
        "max_velocity_boost": {
            "type": "number",
            "description": "Ceiling on the transient velocity boost",
            "minimum": 0
        },
        "border_width": {
            "type": "number",
            "description": "Highlighted border thickness (px)",
            "minimum": 0
        },
        "boost_policy": {
            "type": "string",
            "description": "How pointer samples fold into the boost",
            "enum": list(BOOST_POLICIES)
        }
    },
    "additionalProperties": False
}

_NUMERIC_FIELDS = (
    "proximity_threshold",
    "spring_factor",
    "min_intensity_for_render",
    "velocity_sensitivity",
    "velocity_boost_decay",
    "max_velocity_boost",
    "border_width",
)

_KNOWN_FIELDS = frozenset({"preset"} | {f.name for f in fields(EngineConfig)})

# Module-level validator, compiled once at import
Draft202012Validator.check_schema(_JSON_SCHEMA)
_COMPILED_VALIDATOR = Draft202012Validator(_JSON_SCHEMA)


def export_schema() -> Dict[str, Any]:
    """Return a copy of the JSON Schema for EngineConfig files."""
    return json.loads(json.dumps(_JSON_SCHEMA))


# =============================================================================
# Validation and Self-Healing
# =============================================================================

def _validate(data: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Validate raw config data against the schema.

    Returns: (is_valid, errors)
    """
    errors: List[str] = []
    if not isinstance(data, dict):
        return False, [f"Config must be a mapping, got {type(data).__name__}"]

    for err in sorted(_COMPILED_VALIDATOR.iter_errors(data), key=lambda e: list(e.path)):
        where = ".".join(str(p) for p in err.path) or "<root>"
        errors.append(f"{where}: {err.message}")

    for name in _NUMERIC_FIELDS:
        value = data.get(name)
        if isinstance(value, float) and not math.isfinite(value):
            errors.append(f"{name}: must be finite, got {value}")

    return len(errors) == 0, errors


def _heal_numeric(name: str, value: Any, base: EngineConfig, warns: List[str]) -> float:
    fallback = getattr(base, name)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        warns.append(f"{name} {value!r} is not a finite number, using {fallback}")
        return fallback

    value = float(value)
    if name == "spring_factor":
        if value <= 0:
            warns.append(f"spring_factor {value} <= 0, using {fallback}")
            return fallback
        if value > 1:
            warns.append(f"Clamped spring_factor from {value} to 1.0")
            return 1.0
    elif name == "velocity_boost_decay":
        if not 0 < value < 1:
            warns.append(f"velocity_boost_decay {value} outside (0, 1), using {fallback}")
            return fallback
    elif name == "proximity_threshold":
        if value <= 0:
            warns.append(f"proximity_threshold {value} <= 0, using {fallback}")
            return fallback
    elif name == "min_intensity_for_render":
        if value < 0 or value > 1:
            clamped = max(0.0, min(1.0, value))
            warns.append(f"Clamped min_intensity_for_render from {value} to {clamped}")
            return clamped
    elif value < 0:
        warns.append(f"Clamped {name} from {value} to 0.0")
        return 0.0
    return value


def _self_heal(data: Dict[str, Any], base: EngineConfig, warns: List[str]) -> Dict[str, Any]:
    """
    Apply self-healing to config data.

    Self-healing behavior:
    - Unknown field -> ignore, add warning
    - Non-numeric or non-finite value -> preset value, add warning
    - Out-of-range value -> clamp (or preset value), add warning
    - Unknown preset / boost_policy -> default, add warning
    """
    healed: Dict[str, Any] = {}

    for key, value in data.items():
        if key not in _KNOWN_FIELDS:
            warns.append(f"Ignoring unknown field: {key}")
            continue
        if key in _NUMERIC_FIELDS:
            healed[key] = _heal_numeric(key, value, base, warns)
        elif key == "boost_policy":
            if value not in BOOST_POLICIES:
                warns.append(f"Unknown boost_policy {value!r}, using {base.boost_policy}")
                value = base.boost_policy
            healed[key] = value
        elif key == "preset":
            if value not in PRESETS:
                warns.append(f"Unknown preset {value!r}, using DEFAULT")
                value = "DEFAULT"
            healed[key] = value
        else:
            healed[key] = str(value) if value else base.name

    return healed


def _create_config(data: Dict[str, Any], validate: bool, strict: bool) -> EngineConfig:
    """
    Internal factory for creating EngineConfig from data.

    Handles validation, self-healing and warnings.
    """
    if data is None:
        data = {}
    all_warnings: List[str] = []

    if validate:
        is_valid, errors = _validate(data)
        if not is_valid:
            if strict:
                raise ValueError("Config validation failed:\n" + "\n".join(f"  - {e}" for e in errors))
            if not isinstance(data, dict):
                raise ValueError(errors[0])
            preset = PRESETS.get(data.get("preset", "DEFAULT"), CONFIG_DEFAULT)
            data = _self_heal(data, preset, all_warnings)
            is_valid, errors = _validate(data)
            if not is_valid:
                raise ValueError("Config validation failed after self-healing:\n" +
                                 "\n".join(f"  - {e}" for e in errors))

    for w in all_warnings:
        logger.warning("EngineConfig: %s", w)
        warnings.warn(f"EngineConfig: {w}", UserWarning, stacklevel=3)

    base = PRESETS.get(data.get("preset", "DEFAULT"), CONFIG_DEFAULT)
    overrides = {k: v for k, v in data.items() if k != "preset"}
    for name in _NUMERIC_FIELDS:
        if name in overrides:
            overrides[name] = float(overrides[name])
    config = replace(base, **overrides)

    violations = validate_config(config)
    if violations:
        raise ValueError("Invalid EngineConfig:\n" + "\n".join(f"  - {v}" for v in violations))
    return config


# =============================================================================
# Public API
# =============================================================================

def from_dict(data: Dict[str, Any], validate: bool = True, strict: bool = False) -> EngineConfig:
    """
    Build a frozen EngineConfig from a mapping.

    Args:
        data: Field overrides, optionally with a 'preset' name to start from
        validate: Whether to validate (default True)
        strict: If True, raise on invalid; if False, self-heal with warnings

    Returns:
        Validated, frozen EngineConfig

    Raises:
        ValueError: If strict=True and validation fails, or healing fails
    """
    return _create_config(data, validate, strict)


def load(path: str, validate: bool = True, strict: bool = False) -> EngineConfig:
    """
    Load config from a JSON/YAML file.

    Raises:
        FileNotFoundError: If path doesn't exist
        ValueError: If strict=True and validation fails
    """
    path_obj = Path(path)

    if not path_obj.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    content = path_obj.read_text()

    if path_obj.suffix in ('.yaml', '.yml'):
        data = yaml.safe_load(content)
    else:
        data = json.loads(content)

    return _create_config(data, validate, strict)


def to_dict(config: EngineConfig) -> Dict[str, Any]:
    return asdict(config)


def save(config: EngineConfig, path: str) -> None:
    """Write config as JSON or YAML depending on the file suffix."""
    path_obj = Path(path)
    data = to_dict(config)
    if path_obj.suffix in ('.yaml', '.yml'):
        path_obj.write_text(yaml.safe_dump(data, sort_keys=True))
    else:
        path_obj.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n")


def config_hash(config: EngineConfig) -> str:
    """Dual hash of the canonical JSON form of a config."""
    canonical = json.dumps(to_dict(config), sort_keys=True, separators=(',', ':'))
    return dual_hash(canonical)


def emit_config_receipt(config: EngineConfig, source: Optional[str] = None) -> dict:
    """Emit config_loaded receipt."""
    return emit_receipt("config_loaded", {
        "tenant_id": TENANT_ID,
        "source": source or "<memory>",
        "config_name": config.name,
        "config_hash": config_hash(config),
        "config": to_dict(config),
    })
