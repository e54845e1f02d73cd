from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from .accessor_reader import AccessorReader
from .accessors import get_attribute_semantics, read_scalars
from .constants import COMPONENT_TYPE_FLOAT32
from .document import Document
from .errors import IntegrityViolation, SchemaViolation, UnsupportedOperation
from .matrix import (
    mat4_inverse,
    mat4_is_identity,
    mat4_multiply_by_point,
    mat4_multiply_by_vector,
    mat4_transpose,
    normalize,
)


log = logging.getLogger(__name__)


@dataclass
class _PrimitivePlan:
    position: AccessorReader | None
    normal: AccessorReader | None
    element_indices: Sequence[int]


def _attribute_reader(document: Document, primitive: dict[str, Any], semantic: str) -> AccessorReader | None:
    semantics = get_attribute_semantics(primitive, semantic)
    if not semantics:
        return None
    accessor_id = primitive["attributes"][semantics[0]]
    accessor = document.accessor(accessor_id)
    if accessor.get("type") != "VEC3" or accessor.get("componentType") != COMPONENT_TYPE_FLOAT32:
        raise UnsupportedOperation(
            f"Cannot transform {semantics[0]} accessor {accessor_id}: "
            f"{accessor.get('type')}/{accessor.get('componentType')} (expected float VEC3)"
        )
    return AccessorReader(document, accessor_id)


def _plan_primitive(document: Document, primitive: dict[str, Any]) -> _PrimitivePlan:
    position = _attribute_reader(document, primitive, "POSITION")
    normal = _attribute_reader(document, primitive, "NORMAL")

    indices_id = primitive.get("indices")
    if indices_id is None:
        counts = [reader.count for reader in (position, normal) if reader is not None]
        if len(set(counts)) > 1:
            log.warning("POSITION/NORMAL counts differ (%s); transforming the first %d elements", counts, min(counts))
        return _PrimitivePlan(position, normal, range(min(counts)) if counts else ())

    if position is None:
        raise IntegrityViolation(f"Primitive has indices accessor {indices_id} but no POSITION accessor")

    element_indices: list[int] = []
    for value in read_scalars(document, indices_id):
        if not float(value).is_integer():
            raise IntegrityViolation(f"Indices accessor {indices_id} holds non-integral index {value}")
        element_indices.append(int(value))
    if not element_indices:
        return _PrimitivePlan(position, normal, element_indices)

    smallest = min(element_indices)
    if smallest < 0:
        raise IntegrityViolation(f"Indices accessor {indices_id} references negative element {smallest}")
    largest = max(element_indices)
    for reader in (position, normal):
        if reader is not None and largest >= reader.count:
            raise IntegrityViolation(
                f"Indices accessor {indices_id} references element {largest} "
                f"but accessor {reader.accessor_id} has {reader.count}"
            )
    return _PrimitivePlan(position, normal, element_indices)


def _check_matrix(transform: Sequence[float]) -> None:
    if len(transform) != 16 or not all(isinstance(v, (int, float)) and math.isfinite(v) for v in transform):
        raise SchemaViolation("Transform must be 16 finite numbers (column-major 4x4)")


def transform_primitives(document: Document, primitives: Iterable[dict[str, Any]], transform: Sequence[float]) -> None:
    """Apply ``transform`` to the POSITION and NORMAL data of ``primitives`` in place.

    Normals use the inverse transpose and are renormalized. Accessors shared by
    several primitives, and elements referenced by several indices, are
    transformed exactly once per call. Every primitive is validated before
    any byte is written, so a failure leaves the document untouched.
    """
    _check_matrix(transform)
    if mat4_is_identity(transform):
        return

    plans = [_plan_primitive(document, primitive) for primitive in primitives]

    normal_transform: list[float] | None = None
    if any(plan.normal is not None for plan in plans):
        inverse = mat4_inverse(transform)
        if inverse is None:
            raise UnsupportedOperation("Transform is singular; normals cannot be transformed")
        normal_transform = mat4_transpose(inverse)

    done: set[tuple[int, int]] = set()
    for plan in plans:
        for index in plan.element_indices:
            position = plan.position
            if position is not None and (position.accessor_id, index) not in done:
                position.seek(index)
                position.write(mat4_multiply_by_point(transform, position.read()))
                done.add((position.accessor_id, index))

            normal = plan.normal
            if normal is not None and normal_transform is not None and (normal.accessor_id, index) not in done:
                normal.seek(index)
                normal.write(normalize(mat4_multiply_by_vector(normal_transform, normal.read())))
                done.add((normal.accessor_id, index))

    log.debug("Transformed %d elements across %d primitives", len(done), len(plans))
