from __future__ import annotations

import json

import pytest

from gltf_primitives.config import TransformConfig, build_transform, load_json, parse_transform_config
from gltf_primitives.errors import ConfigError
from gltf_primitives.matrix import mat4_is_identity, mat4_multiply_by_point


def test_defaults_build_identity():
    cfg = parse_transform_config({})
    assert cfg == TransformConfig()
    assert mat4_is_identity(build_transform(cfg))


def test_unit_and_scale_combine():
    cfg = parse_transform_config({"unit": "cm", "scale": 2})
    assert cfg.scale == pytest.approx(0.02)


def test_translation_heading_and_scale():
    cfg = parse_transform_config({"translation": [10, 0, 0], "heading": 90, "scale": 2})
    m = build_transform(cfg)
    assert mat4_multiply_by_point(m, (1.0, 0.0, 0.0)) == pytest.approx((10.0, 2.0, 0.0), abs=1e-9)


def test_y_up_axis_rotates_about_x():
    m = build_transform(parse_transform_config({"axis": "y_up"}))
    assert mat4_multiply_by_point(m, (0.0, 1.0, 0.0)) == pytest.approx((0.0, 0.0, 1.0), abs=1e-9)


@pytest.mark.parametrize(
    "data",
    [
        {"unit": "furlong"},
        {"axis": "X_UP"},
        {"translation": [1, 2]},
        {"translation": "0,0,0"},
        {"heading": "north"},
        {"pitch": float("inf")},
        {"scale": True},
        {"scale": 0},
    ],
)
def test_invalid_config(data):
    with pytest.raises(ConfigError):
        parse_transform_config(data)


def test_load_json(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"heading": 45}), encoding="utf-8")
    assert load_json(path) == {"heading": 45}


def test_load_json_rejects_non_object(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigError, match="must be an object"):
        load_json(path)


def test_load_json_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Failed to read JSON"):
        load_json(tmp_path / "missing.json")
