"""
Centralized configuration manager.
Loads YAML configs over built-in defaults and provides typed access.

    - Schema validation for critical config fields
    - Type-safe access with warnings on invalid types
    - Reset support for testing
"""

import os
import copy
import yaml
import logging

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
_CONFIG_DIR = os.path.join(_BASE_DIR, "config")

DEFAULTS = {
    "system": {"version": "1.0.0"},
    "camera": {
        "device_id": 0,
        "width": 320,
        "height": 240,
        "fps": 30,
        "backend": "auto",
        "buffer_size": 1,
        "flip_horizontal": True,
        "warmup_frames": 5,
    },
    "mediapipe": {
        "model_complexity": 1,
        "max_num_hands": 2,
        "min_detection_confidence": 0.5,
        "min_tracking_confidence": 0.5,
    },
    "gestures": {
        "ok_pinch_ratio": 0.35,
        "ok_hold_ms": 3000,
    },
    "control": {
        "position_smoothing": 0.2,
        "pan_sensitivity": 140.0,
        "pan_dead_zone": 0.18,
        "pan_target_smoothing": 0.35,
        "velocity_smoothing": 0.12,
        "velocity_decay": 0.08,
        "zoom_in_threshold": 0.07,
        "zoom_in_range": 0.045,
        "zoom_out_threshold": 0.15,
        "zoom_out_range": 0.14,
        "zoom_speed_in": 36.0,
        "zoom_speed_out": 24.0,
        "max_speed": 2.0,
        "max_tick_seconds": 0.05,
    },
    "zones": {
        "min_zoom_distance": 50.0,
        "max_zoom_distance": 2000.0,
        "deep_zone_distance": 70.0,
        "return_margin": 60.0,
        "return_arm_margin": 10.0,
        "auto_enter_from_b": True,
        "default_camera_position": [0.0, -200.0, 350.0],
        "default_camera_target": [0.0, 0.0, 0.0],
    },
    "world_d": {
        "fist_smoothing": 0.35,
        "fist_threshold": 0.5,
        "release_ratio": 0.7,
        "rotation_block_threshold": 0.35,
        "rotate_required": 1.5,
        "stress_hold_ms": 3000,
    },
    "growth": {
        "max_growth": 0.85,
        "growth_speed": 0.005,
    },
    "visualization": {
        "enabled": True,
        "window_name": "Hand Worlds",
    },
    "logging": {
        "level": "INFO",
        "file": None,
        "max_size_mb": 10,
        "backup_count": 3,
    },
}

# Schema: required sections and their expected types
_CONFIG_SCHEMA = {
    "camera": {
        "device_id": int,
        "width": int,
        "height": int,
        "fps": int,
    },
    "mediapipe": {
        "min_detection_confidence": float,
        "min_tracking_confidence": float,
    },
    "gestures": {
        "ok_pinch_ratio": float,
        "ok_hold_ms": int,
    },
    "control": {
        "position_smoothing": float,
        "pan_sensitivity": float,
        "pan_dead_zone": float,
        "pan_target_smoothing": float,
        "velocity_smoothing": float,
        "velocity_decay": float,
        "zoom_in_threshold": float,
        "zoom_in_range": float,
        "zoom_out_threshold": float,
        "zoom_out_range": float,
        "zoom_speed_in": float,
        "zoom_speed_out": float,
        "max_speed": float,
        "max_tick_seconds": float,
    },
    "zones": {
        "min_zoom_distance": float,
        "max_zoom_distance": float,
        "deep_zone_distance": float,
        "return_margin": float,
        "return_arm_margin": float,
        "auto_enter_from_b": bool,
    },
    "world_d": {
        "fist_smoothing": float,
        "fist_threshold": float,
        "release_ratio": float,
        "rotation_block_threshold": float,
        "rotate_required": float,
        "stress_hold_ms": int,
    },
    "growth": {
        "max_growth": float,
        "growth_speed": float,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Singleton configuration manager."""

    _instance = None
    _data = copy.deepcopy(DEFAULTS)

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load(self, config_path=None):
        """Load configuration from a YAML file merged over the defaults."""
        config_path = config_path or os.path.join(_CONFIG_DIR, "config.yaml")

        try:
            with open(config_path, "r") as f:
                loaded = yaml.safe_load(f) or {}
            logger.info("Loaded config from %s", config_path)
        except FileNotFoundError:
            logger.warning("Config file not found: %s, using defaults", config_path)
            loaded = {}

        if not isinstance(loaded, dict):
            logger.warning("Config root should be a mapping, got %s; using defaults",
                           type(loaded).__name__)
            loaded = {}

        self._data = _deep_merge(copy.deepcopy(DEFAULTS), loaded)
        self._validate()
        return self

    def load_dict(self, overrides: dict):
        """Merge an in-memory mapping over the defaults (tests, embedding)."""
        self._data = _deep_merge(copy.deepcopy(DEFAULTS), overrides or {})
        self._validate()
        return self

    def _validate(self):
        """Validate critical config fields against schema; bad values fall back to defaults."""
        warnings = []
        for section_name, fields in _CONFIG_SCHEMA.items():
            section = self._data.get(section_name)
            if section is None:
                warnings.append(f"Missing config section: '{section_name}'")
                self._data[section_name] = copy.deepcopy(DEFAULTS[section_name])
                continue
            if not isinstance(section, dict):
                warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
                self._data[section_name] = copy.deepcopy(DEFAULTS[section_name])
                continue
            for field_name, expected_type in fields.items():
                if field_name in section:
                    value = section[field_name]
                    if isinstance(value, bool) and expected_type is not bool:
                        valid = False
                    elif expected_type is float:
                        # Allow int where float is expected
                        valid = isinstance(value, (int, float))
                    else:
                        valid = isinstance(value, expected_type)
                    if not valid:
                        default = DEFAULTS[section_name][field_name]
                        warnings.append(
                            f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                            f"got {type(value).__name__} ({value!r}); using default {default!r}"
                        )
                        section[field_name] = default

        if warnings:
            for w in warnings:
                logger.warning("Config validation: %s", w)
        else:
            logger.debug("Config validation passed")
        return warnings

    def get(self, key_path: str, default=None):
        """Get nested config value using dot notation: 'zones.deep_zone_distance'."""
        keys = key_path.split(".")
        value = self._data
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_section(self, section: str) -> dict:
        """Get an entire config section."""
        return self._data.get(section, {}) or {}

    def as_dict(self) -> dict:
        return copy.deepcopy(self._data)

    @property
    def camera(self) -> dict:
        return self.get_section("camera")

    @property
    def mediapipe(self) -> dict:
        return self.get_section("mediapipe")

    @property
    def gestures(self) -> dict:
        return self.get_section("gestures")

    @property
    def control(self) -> dict:
        return self.get_section("control")

    @property
    def zones(self) -> dict:
        return self.get_section("zones")

    @property
    def world_d(self) -> dict:
        return self.get_section("world_d")

    @property
    def growth(self) -> dict:
        return self.get_section("growth")

    @property
    def visualization(self) -> dict:
        return self.get_section("visualization")

    @property
    def logging(self) -> dict:
        return self.get_section("logging")

    @property
    def base_dir(self) -> str:
        return _BASE_DIR

    @classmethod
    def reset(cls):
        """Reset singleton instance (for testing)."""
        cls._instance = None
        cls._data = copy.deepcopy(DEFAULTS)
