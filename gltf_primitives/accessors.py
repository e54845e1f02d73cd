from __future__ import annotations

import logging
from typing import Any, Sequence

from .accessor_reader import AccessorReader
from .constants import COMPONENT_TYPE_BYTE_SIZE, TYPE_COMPONENT_COUNT
from .document import Document
from .errors import SchemaViolation


log = logging.getLogger(__name__)


def read_accessor(document: Document, accessor_id: int) -> list[list[float]]:
    reader = AccessorReader(document, accessor_id)
    out: list[list[float]] = []
    while not reader.past_end():
        out.append(reader.read())
        reader.next()
    return out


def read_scalars(document: Document, accessor_id: int) -> list[float]:
    reader = AccessorReader(document, accessor_id)
    if reader.component_count != 1:
        raise SchemaViolation(f"Accessor {accessor_id} is not SCALAR")
    out: list[float] = []
    while not reader.past_end():
        out.append(reader.read()[0])
        reader.next()
    return out


def write_accessor(document: Document, accessor_id: int, values: Sequence[float]) -> None:
    """Write a flat array over the whole accessor, element by element."""
    reader = AccessorReader(document, accessor_id)
    width = reader.component_count
    expected = reader.count * width
    if len(values) != expected:
        raise SchemaViolation(f"Accessor {accessor_id} holds {expected} values, got {len(values)}")
    for start in range(0, expected, width):
        reader.write(values[start : start + width])
        reader.next()


def find_accessor_min_max(document: Document, accessor_id: int) -> tuple[list[float], list[float]]:
    reader = AccessorReader(document, accessor_id)
    width = reader.component_count
    mn = [float("inf")] * width
    mx = [float("-inf")] * width
    while not reader.past_end():
        for i, value in enumerate(reader.read()):
            if value < mn[i]:
                mn[i] = value
            if value > mx[i]:
                mx[i] = value
        reader.next()
    return mn, mx


def update_accessor_min_max(document: Document, accessor_id: int) -> None:
    accessor = document.accessor(accessor_id)
    if accessor.get("count", 0) == 0:
        accessor.pop("min", None)
        accessor.pop("max", None)
        return
    accessor["min"], accessor["max"] = find_accessor_min_max(document, accessor_id)


def create_accessor(
    document: Document,
    count: int,
    type_name: str,
    component_type: int,
    target: int | None,
) -> int:
    """Allocate a zero-filled buffer, a packed bufferView and an accessor over it."""
    if type_name not in TYPE_COMPONENT_COUNT:
        raise SchemaViolation(f"Unsupported accessor.type: {type_name}")
    if component_type not in COMPONENT_TYPE_BYTE_SIZE:
        raise SchemaViolation(f"Unsupported accessor.componentType: {component_type}")
    if count < 0:
        raise SchemaViolation(f"Invalid accessor count: {count}")

    byte_length = count * TYPE_COMPONENT_COUNT[type_name] * COMPONENT_TYPE_BYTE_SIZE[component_type]
    buffer_id = document.add_buffer(bytearray(byte_length))

    buffer_view: dict[str, Any] = {"buffer": buffer_id, "byteOffset": 0, "byteLength": byte_length}
    if target is not None:
        buffer_view["target"] = target
    document.buffer_views.append(buffer_view)

    document.accessors.append(
        {
            "bufferView": len(document.buffer_views) - 1,
            "byteOffset": 0,
            "componentType": component_type,
            "count": count,
            "type": type_name,
        }
    )
    accessor_id = len(document.accessors) - 1
    log.debug("Created accessor %d: %d x %s (componentType %d)", accessor_id, count, type_name, component_type)
    return accessor_id


def get_attribute_semantics(primitive: dict[str, Any], semantic: str) -> list[str]:
    """Attribute keys matching ``semantic`` itself or one of its numbered sets (``TEXCOORD_1``)."""
    prefix = semantic + "_"
    out: list[str] = []
    for name in primitive.get("attributes", {}):
        if name == semantic or (name.startswith(prefix) and name[len(prefix) :].isdigit()):
            out.append(name)
    return out
