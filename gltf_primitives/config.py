from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .matrix import mat4_identity, mat4_multiply, mat4_rot_x, mat4_rot_y, mat4_rot_z, mat4_scale, mat4_translation


UNIT_SCALE: dict[str, float] = {
    "m": 1.0,
    "meter": 1.0,
    "meters": 1.0,
    "cm": 0.01,
    "centimeter": 0.01,
    "centimeters": 0.01,
    "mm": 0.001,
    "millimeter": 0.001,
    "millimeters": 0.001,
    "ft": 0.3048,
    "foot": 0.3048,
    "feet": 0.3048,
    "in": 0.0254,
    "inch": 0.0254,
    "inches": 0.0254,
}

AXES = {"Z_UP", "Y_UP"}


@dataclass(frozen=True)
class TransformConfig:
    translation: tuple[float, float, float] = (0.0, 0.0, 0.0)
    heading: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0
    scale: float = 1.0
    axis: str = "Z_UP"


def _parse_unit_scale(unit: str) -> float:
    unit_norm = unit.strip().lower()
    if unit_norm not in UNIT_SCALE:
        raise ConfigError(f"Unsupported unit: {unit}")
    return UNIT_SCALE[unit_norm]


def _parse_float(value: Any, name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = float(value)
    else:
        raise ConfigError(f"{name} must be a number")
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be finite")
    return value


def _parse_translation(value: Any) -> tuple[float, float, float]:
    if not isinstance(value, list) or len(value) != 3:
        raise ConfigError("translation must be [x, y, z]")
    return (
        _parse_float(value[0], "translation[0]"),
        _parse_float(value[1], "translation[1]"),
        _parse_float(value[2], "translation[2]"),
    )


def parse_transform_config(data: dict[str, Any]) -> TransformConfig:
    translation = _parse_translation(data.get("translation", [0.0, 0.0, 0.0]))

    axis = str(data.get("axis", "Z_UP")).upper()
    if axis not in AXES:
        raise ConfigError(f"Unsupported axis: {axis} (expected Z_UP or Y_UP)")

    scale = _parse_unit_scale(str(data.get("unit", "m")))
    if "scale" in data:
        scale *= _parse_float(data["scale"], "scale")
    if scale == 0.0:
        raise ConfigError("scale must not be zero")

    return TransformConfig(
        translation=translation,
        heading=_parse_float(data.get("heading", 0.0), "heading"),
        pitch=_parse_float(data.get("pitch", 0.0), "pitch"),
        roll=_parse_float(data.get("roll", 0.0), "roll"),
        scale=scale,
        axis=axis,
    )


def build_transform(cfg: TransformConfig) -> list[float]:
    """Compose ``T * H * P * R * axis * S`` as a column-major matrix. Angles are in degrees."""
    if cfg.axis == "Z_UP":
        axis_mat = mat4_identity()
    else:
        axis_mat = mat4_rot_x(math.radians(90.0))

    scale_mat = mat4_scale((cfg.scale, cfg.scale, cfg.scale))
    hpr_mat = mat4_multiply(
        mat4_rot_z(math.radians(cfg.heading)),
        mat4_multiply(mat4_rot_y(math.radians(cfg.pitch)), mat4_rot_x(math.radians(cfg.roll))),
    )
    local = mat4_multiply(hpr_mat, mat4_multiply(axis_mat, scale_mat))
    return mat4_multiply(mat4_translation(cfg.translation), local)


def load_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text("utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ConfigError(f"Failed to read JSON: {path} ({exc})") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"JSON root must be an object: {path}")
    return data
