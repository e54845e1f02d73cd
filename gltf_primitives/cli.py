from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path
from typing import Any, Sequence

from .accessors import get_attribute_semantics, update_accessor_min_max
from .config import TransformConfig, build_transform, load_json, parse_transform_config
from .document import Document, read_glb, write_glb
from .errors import GltfError
from .primitive_analysis import get_all_primitives, get_primitive_conflicts, get_primitives_by_material_mode
from .transform import transform_primitives


log = logging.getLogger(__name__)


def _finite_number(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Not a number: {value}") from exc
    if not math.isfinite(parsed):
        raise argparse.ArgumentTypeError(f"Not a finite number: {value}")
    return parsed


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Bake a transform into the POSITION/NORMAL data of a GLB's primitives.",
    )
    parser.add_argument("input_glb", type=Path, help="Input .glb file")
    parser.add_argument("output_glb", type=Path, help="Output .glb file")
    parser.add_argument("--config", type=Path, default=None, help="Transform config JSON (translation, heading, pitch, roll, scale, unit, axis)")
    parser.add_argument("--translate", type=_finite_number, nargs=3, metavar=("X", "Y", "Z"), default=None, help="Translation (overrides config)")
    parser.add_argument("--scale", type=_finite_number, default=None, help="Uniform scale (overrides config)")
    parser.add_argument("--heading", type=_finite_number, default=None, help="Rotation about Z in degrees (overrides config)")
    parser.add_argument("--pitch", type=_finite_number, default=None, help="Rotation about Y in degrees (overrides config)")
    parser.add_argument("--roll", type=_finite_number, default=None, help="Rotation about X in degrees (overrides config)")
    parser.add_argument("--mesh", type=int, action="append", default=None, help="Only transform this mesh index (repeatable)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details")
    return parser.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> TransformConfig:
    data: dict[str, Any] = load_json(args.config) if args.config is not None else {}
    if args.translate is not None:
        data["translation"] = list(args.translate)
    if args.scale is not None:
        data["scale"] = args.scale
    for name in ("heading", "pitch", "roll"):
        value = getattr(args, name)
        if value is not None:
            data[name] = value
    return parse_transform_config(data)


def _select_primitives(document: Document, mesh_indices: list[int] | None) -> list[dict[str, Any]]:
    if mesh_indices is None:
        return get_all_primitives(document)
    meshes = document.gltf.get("meshes", [])
    primitives: list[dict[str, Any]] = []
    for mesh_index in mesh_indices:
        if not (0 <= mesh_index < len(meshes)):
            raise GltfError(f"Mesh index out of range: {mesh_index}")
        primitives.extend(meshes[mesh_index].get("primitives", []))
    return primitives


def _log_summary(primitives: list[dict[str, Any]]) -> None:
    groups = get_primitives_by_material_mode(primitives)
    for material, by_mode in groups.items():
        for mode, group in by_mode.items():
            log.info("material=%s mode=%s: %d primitive(s)", material, mode, len(group))
    shared = sum(1 for primitive in primitives if get_primitive_conflicts(primitives, primitive))
    if shared:
        log.info("%d primitive(s) share attribute accessors; shared vertices are transformed once", shared)


def run(args: argparse.Namespace) -> int:
    input_glb: Path = args.input_glb
    if not input_glb.is_file():
        raise GltfError(f"Input not found: {input_glb}")

    cfg = _resolve_config(args)
    transform = build_transform(cfg)

    document = read_glb(input_glb)
    primitives = _select_primitives(document, args.mesh)
    _log_summary(primitives)

    transform_primitives(document, primitives, transform)

    position_ids = {
        primitive["attributes"][semantic]
        for primitive in primitives
        for semantic in get_attribute_semantics(primitive, "POSITION")
    }
    for accessor_id in sorted(position_ids):
        update_accessor_min_max(document, accessor_id)

    args.output_glb.parent.mkdir(parents=True, exist_ok=True)
    write_glb(args.output_glb, document)
    log.info("Wrote %s (%d primitives transformed)", args.output_glb, len(primitives))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return run(args)
    except GltfError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
