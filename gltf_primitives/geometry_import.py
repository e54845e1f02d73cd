from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from typing import Any

from .accessor_reader import accessor_layout
from .accessors import create_accessor, get_attribute_semantics, update_accessor_min_max, write_accessor
from .buffers import merge_buffers, uninterleave_and_pack_buffers
from .constants import (
    COMPONENT_TYPE_FLOAT32,
    COMPONENT_TYPE_FORMAT,
    COMPONENT_TYPE_UINT8,
    COMPONENT_TYPE_UINT16,
    COMPONENT_TYPE_UINT32,
    TARGET_ARRAY_BUFFER,
    TARGET_ELEMENT_ARRAY_BUFFER,
    TYPE_COMPONENT_COUNT,
)
from .document import Document
from .errors import SchemaViolation, UnsupportedSemantic


log = logging.getLogger(__name__)

# external attribute name -> (semantic, accessor type, key used when a new accessor is registered)
KNOWN_SEMANTICS: dict[str, tuple[str, str, str]] = {
    "position": ("POSITION", "VEC3", "POSITION"),
    "normal": ("NORMAL", "VEC3", "NORMAL"),
    "st": ("TEXCOORD", "VEC2", "TEXCOORD_0"),
    "POSITION": ("POSITION", "VEC3", "POSITION"),
    "NORMAL": ("NORMAL", "VEC3", "NORMAL"),
    "TEXCOORD": ("TEXCOORD", "VEC2", "TEXCOORD_0"),
}

INDEX_COMPONENT_MAX: dict[int, int] = {
    COMPONENT_TYPE_UINT8: 0xFF,
    COMPONENT_TYPE_UINT16: 0xFFFF,
    COMPONENT_TYPE_UINT32: 0xFFFFFFFF,
}


@dataclass
class Geometry:
    """Geometry produced outside the document: flat attribute arrays plus triangle indices."""

    attributes: dict[str, list[float]] = field(default_factory=dict)
    indices: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class _AttributeTarget:
    name: str
    values: list[float]
    attribute_key: str | None
    new_key: str | None = None
    type_name: str | None = None


def _check_encodable(component_type: int, values: list[float], name: str) -> None:
    fmt = "<" + COMPONENT_TYPE_FORMAT[component_type] * len(values)
    try:
        struct.pack(fmt, *values)
    except (struct.error, OverflowError) as exc:
        raise SchemaViolation(f"{name}: values do not fit componentType {component_type}: {exc}") from exc


def _check_fits(document: Document, accessor_id: int, values: list[float], name: str) -> None:
    layout = accessor_layout(document, accessor_id)
    expected = layout.count * layout.component_count
    if len(values) != expected:
        raise SchemaViolation(f"{name}: accessor {accessor_id} holds {expected} values, got {len(values)}")
    _check_encodable(document.accessor(accessor_id)["componentType"], values, name)


def _resolve_attribute(document: Document, primitive: dict[str, Any], name: str, values: list[float]) -> _AttributeTarget:
    attributes = primitive.get("attributes", {})
    known = KNOWN_SEMANTICS.get(name)
    if known is None:
        if name not in attributes:
            raise UnsupportedSemantic(f"Unsupported attribute semantic: {name}")
        _check_fits(document, attributes[name], values, name)
        return _AttributeTarget(name, values, attribute_key=name)

    semantic, type_name, new_key = known
    width = TYPE_COMPONENT_COUNT[type_name]
    if len(values) % width:
        raise SchemaViolation(f"{name}: {len(values)} values is not a multiple of {type_name}")
    semantics = get_attribute_semantics(primitive, semantic)
    if semantics:
        _check_fits(document, attributes[semantics[0]], values, name)
        return _AttributeTarget(name, values, attribute_key=semantics[0])
    _check_encodable(COMPONENT_TYPE_FLOAT32, values, name)
    return _AttributeTarget(name, values, attribute_key=None, new_key=new_key, type_name=type_name)


def _index_component_type(max_index: int) -> int:
    if max_index <= 0xFF:
        return COMPONENT_TYPE_UINT8
    if max_index <= 0xFFFF:
        return COMPONENT_TYPE_UINT16
    return COMPONENT_TYPE_UINT32


def geometry_to_primitive(
    document: Document,
    primitive: dict[str, Any],
    geometry: Geometry,
    buffer_name: str = "buffer_0",
) -> dict[str, Any]:
    """Copy ``geometry`` into the accessors of ``primitive``, creating the missing ones.

    Finishes by merging all buffers into one and removing interleaving, so
    accessor ids stay valid but bufferViews are rebuilt.
    """
    targets = [_resolve_attribute(document, primitive, name, list(values)) for name, values in geometry.attributes.items()]
    indices = [int(i) for i in geometry.indices]
    if any(i < 0 for i in indices):
        raise SchemaViolation("Geometry indices must be non-negative")
    indices_id = primitive.get("indices")
    if indices_id is not None:
        component_type = document.accessor(indices_id).get("componentType")
        if indices and INDEX_COMPONENT_MAX.get(component_type, 0) < max(indices):
            raise SchemaViolation(f"indices: accessor {indices_id} (componentType {component_type}) cannot hold {max(indices)}")
        _check_fits(document, indices_id, indices, "indices")

    attributes = primitive.setdefault("attributes", {})
    for target in targets:
        key = target.attribute_key
        if key is None:
            count = len(target.values) // TYPE_COMPONENT_COUNT[target.type_name]
            attributes[target.new_key] = create_accessor(
                document, count, target.type_name, COMPONENT_TYPE_FLOAT32, TARGET_ARRAY_BUFFER
            )
            key = target.new_key
        accessor_id = attributes[key]
        write_accessor(document, accessor_id, target.values)
        update_accessor_min_max(document, accessor_id)
        log.debug("Wrote %d values of %s into accessor %d (%s)", len(target.values), target.name, accessor_id, key)

    if primitive.get("indices") is None:
        component_type = _index_component_type(max(indices, default=0))
        primitive["indices"] = create_accessor(
            document, len(indices), "SCALAR", component_type, TARGET_ELEMENT_ARRAY_BUFFER
        )
    write_accessor(document, primitive["indices"], indices)

    merge_buffers(document, buffer_name)
    uninterleave_and_pack_buffers(document)
    return primitive
