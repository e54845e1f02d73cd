from __future__ import annotations

import struct
from typing import Any, Sequence

import pytest

from gltf_primitives.constants import COMPONENT_TYPE_BYTE_SIZE, COMPONENT_TYPE_FORMAT, TYPE_COMPONENT_COUNT
from gltf_primitives.document import Document


def _as_elements(values: Sequence[Any]) -> list[list[Any]]:
    return [list(v) if isinstance(v, (list, tuple)) else [v] for v in values]


class DocumentBuilder:
    """Builds small in-memory documents, one buffer per bufferView."""

    def __init__(self) -> None:
        self.document = Document(
            gltf={"asset": {"version": "2.0"}, "buffers": [], "bufferViews": [], "accessors": [], "meshes": []},
            buffers=[],
        )

    def _add_view(self, data: bytearray, stride: int | None = None, target: int | None = None) -> int:
        buffer_id = self.document.add_buffer(data)
        view: dict[str, Any] = {"buffer": buffer_id, "byteOffset": 0, "byteLength": len(data)}
        if stride is not None:
            view["byteStride"] = stride
        if target is not None:
            view["target"] = target
        self.document.buffer_views.append(view)
        return len(self.document.buffer_views) - 1

    def _add_accessor(self, view_id: int, offset: int, component_type: int, type_name: str, count: int) -> int:
        self.document.accessors.append(
            {
                "bufferView": view_id,
                "byteOffset": offset,
                "componentType": component_type,
                "count": count,
                "type": type_name,
            }
        )
        return len(self.document.accessors) - 1

    def accessor(
        self,
        values: Sequence[Any],
        type_name: str = "VEC3",
        component_type: int = 5126,
        *,
        stride: int | None = None,
        target: int | None = None,
    ) -> int:
        elements = _as_elements(values)
        width = TYPE_COMPONENT_COUNT[type_name]
        element_size = width * COMPONENT_TYPE_BYTE_SIZE[component_type]
        step = stride or element_size
        fmt = "<" + COMPONENT_TYPE_FORMAT[component_type] * width
        data = bytearray(step * len(elements))
        for i, element in enumerate(elements):
            struct.pack_into(fmt, data, i * step, *element)
        return self._add_accessor(self._add_view(data, stride, target), 0, component_type, type_name, len(elements))

    def indices(self, values: Sequence[int], component_type: int = 5123) -> int:
        return self.accessor(values, "SCALAR", component_type, target=34963)

    def interleaved(self, positions: Sequence[Sequence[float]], normals: Sequence[Sequence[float]]) -> tuple[int, int]:
        """POSITION and NORMAL float VEC3 accessors sharing one bufferView with a 24-byte stride."""
        data = bytearray(24 * len(positions))
        for i, (p, n) in enumerate(zip(positions, normals)):
            struct.pack_into("<6f", data, i * 24, *p, *n)
        view_id = self._add_view(data, stride=24, target=34962)
        return (
            self._add_accessor(view_id, 0, 5126, "VEC3", len(positions)),
            self._add_accessor(view_id, 12, 5126, "VEC3", len(normals)),
        )

    def mesh(self, *primitives: dict[str, Any]) -> list[dict[str, Any]]:
        self.document.meshes.append({"primitives": list(primitives)})
        return list(primitives)


def primitive(attributes: dict[str, int], *, indices: int | None = None, material: int | None = 0, mode: int = 4) -> dict[str, Any]:
    out: dict[str, Any] = {"attributes": dict(attributes), "mode": mode}
    if material is not None:
        out["material"] = material
    if indices is not None:
        out["indices"] = indices
    return out


def snapshot(document: Document) -> list[bytes]:
    return [bytes(data) for data in document.buffers]


@pytest.fixture
def builder() -> DocumentBuilder:
    return DocumentBuilder()


@pytest.fixture
def make_primitive():
    return primitive


@pytest.fixture
def buffers_snapshot():
    return snapshot
