from __future__ import annotations

from typing import Any, Sequence

from .accessors import read_scalars
from .constants import TRIANGLES_MODE
from .document import Document


def get_all_primitives(document: Document) -> list[dict[str, Any]]:
    """Every primitive of every mesh, in mesh order then primitive order."""
    primitives: list[dict[str, Any]] = []
    for mesh in document.gltf.get("meshes", []):
        primitives.extend(mesh.get("primitives", []))
    return primitives


def get_primitives_by_material_mode(
    primitives: Sequence[dict[str, Any]],
) -> dict[int | None, dict[int, list[dict[str, Any]]]]:
    """Group primitives as ``{material: {mode: [primitive, ...]}}``, keeping input order.

    Primitives in the same leaf group can be drawn with one material and mode,
    which makes them candidates for merging.
    """
    grouped: dict[int | None, dict[int, list[dict[str, Any]]]] = {}
    for primitive in primitives:
        by_mode = grouped.setdefault(primitive.get("material"), {})
        by_mode.setdefault(primitive.get("mode", TRIANGLES_MODE), []).append(primitive)
    return grouped


def primitives_share_attribute_accessor(primitive: dict[str, Any], compare_primitive: dict[str, Any]) -> bool:
    attributes = primitive.get("attributes", {})
    compare_attributes = compare_primitive.get("attributes", {})
    for semantic, accessor_id in attributes.items():
        if semantic in compare_attributes and compare_attributes[semantic] == accessor_id:
            return True
    return False


def primitives_have_overlapping_index_accessors(
    document: Document,
    primitive: dict[str, Any],
    compare_primitive: dict[str, Any],
) -> bool:
    indices_id = primitive.get("indices")
    compare_indices_id = compare_primitive.get("indices")
    if indices_id is None or compare_indices_id is None:
        return False
    if indices_id == compare_indices_id:
        return True
    indices = set(read_scalars(document, indices_id))
    return any(value in indices for value in read_scalars(document, compare_indices_id))


def primitive_equals(primitive_one: dict[str, Any], primitive_two: dict[str, Any]) -> bool:
    return (
        primitive_one.get("mode", TRIANGLES_MODE) == primitive_two.get("mode", TRIANGLES_MODE)
        and primitive_one.get("material") == primitive_two.get("material")
        and primitive_one.get("indices") == primitive_two.get("indices")
        and primitive_one.get("attributes", {}) == primitive_two.get("attributes", {})
    )


def get_primitive_conflicts(primitives: Sequence[dict[str, Any]], primitive: dict[str, Any]) -> list[int]:
    """Positions in ``primitives`` of the other primitives that share an attribute accessor with ``primitive``."""
    return [
        i
        for i, other in enumerate(primitives)
        if other is not primitive and primitives_share_attribute_accessor(primitive, other)
    ]
