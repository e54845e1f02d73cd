from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Sequence

from .constants import COMPONENT_TYPE_BYTE_SIZE, COMPONENT_TYPE_FORMAT, TYPE_COMPONENT_COUNT
from .document import Document
from .errors import SchemaViolation


@dataclass(frozen=True)
class AccessorLayout:
    buffer_id: int
    base_offset: int
    stride: int
    element_size: int
    component_count: int
    count: int
    fmt: str

    def element_offset(self, index: int) -> int:
        return self.base_offset + index * self.stride


def accessor_layout(document: Document, accessor_id: int) -> AccessorLayout:
    """Resolve where the elements of an accessor live, checking every bound on the way."""
    accessor = document.accessor(accessor_id)
    if "sparse" in accessor:
        raise SchemaViolation(f"Accessor {accessor_id}: sparse accessors are not supported")

    component_type = accessor.get("componentType")
    if component_type not in COMPONENT_TYPE_FORMAT:
        raise SchemaViolation(f"Accessor {accessor_id}: unsupported componentType {component_type}")
    type_name = accessor.get("type")
    if type_name not in TYPE_COMPONENT_COUNT:
        raise SchemaViolation(f"Accessor {accessor_id}: unsupported type {type_name}")

    count = accessor.get("count")
    if not isinstance(count, int) or count < 0:
        raise SchemaViolation(f"Accessor {accessor_id}: invalid count {count}")

    buffer_view_id = accessor.get("bufferView")
    if not isinstance(buffer_view_id, int):
        raise SchemaViolation(f"Accessor {accessor_id}: bufferView missing")
    buffer_view = document.buffer_view(buffer_view_id)
    buffer_id = buffer_view.get("buffer", 0)
    data = document.buffer_data(buffer_id)

    view_offset = int(buffer_view.get("byteOffset", 0))
    view_length = buffer_view.get("byteLength")
    if not isinstance(view_length, int) or view_offset < 0 or view_length < 0:
        raise SchemaViolation(f"bufferView {buffer_view_id}: invalid byteOffset/byteLength")
    if view_offset + view_length > len(data):
        raise SchemaViolation(f"bufferView {buffer_view_id} points outside buffer {buffer_id}")

    component_count = TYPE_COMPONENT_COUNT[type_name]
    element_size = component_count * COMPONENT_TYPE_BYTE_SIZE[component_type]
    stride = buffer_view.get("byteStride") or element_size
    if not isinstance(stride, int) or stride < element_size:
        raise SchemaViolation(f"bufferView {buffer_view_id}: byteStride {stride} smaller than element size {element_size}")

    accessor_offset = int(accessor.get("byteOffset", 0))
    if accessor_offset < 0:
        raise SchemaViolation(f"Accessor {accessor_id}: negative byteOffset")
    if count > 0 and accessor_offset + (count - 1) * stride + element_size > view_length:
        raise SchemaViolation(f"Accessor {accessor_id} points outside bufferView {buffer_view_id}")

    return AccessorLayout(
        buffer_id=buffer_id,
        base_offset=view_offset + accessor_offset,
        stride=stride,
        element_size=element_size,
        component_count=component_count,
        count=count,
        fmt="<" + COMPONENT_TYPE_FORMAT[component_type] * component_count,
    )


class AccessorReader:
    """Cursor giving typed, strided random access to the elements of one accessor.

    ``read`` and ``write`` work on the element at ``index``; ``next`` advances
    and ``seek`` jumps straight to an element. Writes go into the document's
    buffer in place, so every primitive that references the accessor sees them.
    """

    def __init__(self, document: Document, accessor_id: int) -> None:
        self.document = document
        self.accessor_id = accessor_id
        self.layout = accessor_layout(document, accessor_id)
        self._data = document.buffer_data(self.layout.buffer_id)
        self.index = 0

    @property
    def count(self) -> int:
        return self.layout.count

    @property
    def component_count(self) -> int:
        return self.layout.component_count

    def past_end(self) -> bool:
        return self.index >= self.layout.count

    def next(self) -> None:
        if not self.past_end():
            self.index += 1

    def seek(self, index: int) -> None:
        if index < 0:
            raise SchemaViolation(f"Accessor {self.accessor_id}: negative element index {index}")
        self.index = index

    def _check_in_range(self) -> None:
        if self.past_end():
            raise SchemaViolation(
                f"Accessor {self.accessor_id}: element {self.index} out of range (count {self.layout.count})"
            )

    def read(self) -> list[float]:
        self._check_in_range()
        return list(struct.unpack_from(self.layout.fmt, self._data, self.layout.element_offset(self.index)))

    def write(self, values: Sequence[float]) -> None:
        self._check_in_range()
        if len(values) != self.layout.component_count:
            raise SchemaViolation(
                f"Accessor {self.accessor_id}: expected {self.layout.component_count} values, got {len(values)}"
            )
        try:
            struct.pack_into(self.layout.fmt, self._data, self.layout.element_offset(self.index), *values)
        except (struct.error, OverflowError) as exc:
            raise SchemaViolation(f"Accessor {self.accessor_id}: cannot encode {list(values)}: {exc}") from exc
