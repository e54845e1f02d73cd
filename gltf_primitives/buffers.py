from __future__ import annotations

import logging
from typing import Any

from .accessor_reader import accessor_layout
from .constants import BUFFER_VIEW_ALIGNMENT
from .document import Document
from .errors import SchemaViolation


log = logging.getLogger(__name__)


def _append_aligned(out: bytearray, data: bytes | bytearray) -> int:
    pad = (BUFFER_VIEW_ALIGNMENT - len(out) % BUFFER_VIEW_ALIGNMENT) % BUFFER_VIEW_ALIGNMENT
    if pad:
        out.extend(b"\x00" * pad)
    offset = len(out)
    out.extend(data)
    return offset


def merge_buffers(document: Document, name: str) -> None:
    """Concatenate every buffer into a single buffer 0 and rebase the bufferViews on it."""
    buffers = document.gltf.get("buffers", [])
    if len(buffers) != len(document.buffers):
        raise SchemaViolation(f"Document has {len(buffers)} buffers but bytes for {len(document.buffers)}")

    merged = bytearray()
    buffer_offsets: list[int] = []
    for data in document.buffers:
        buffer_offsets.append(_append_aligned(merged, data))

    for buffer_view_id, buffer_view in enumerate(document.buffer_views):
        buffer_id = buffer_view.get("buffer", 0)
        if not (0 <= buffer_id < len(buffer_offsets)):
            raise SchemaViolation(f"bufferView {buffer_view_id}: buffer index out of range: {buffer_id}")
        buffer_view["buffer"] = 0
        buffer_view["byteOffset"] = buffer_offsets[buffer_id] + int(buffer_view.get("byteOffset", 0))

    document.gltf["buffers"] = [{"byteLength": len(merged), "name": name}]
    document.buffers[:] = [merged]
    log.debug("Merged %d buffers into %r (%d bytes)", len(buffer_offsets), name, len(merged))


def uninterleave_and_pack_buffers(document: Document) -> None:
    """Give every accessor its own tightly packed bufferView inside one buffer.

    Interleaved or strided views are split per accessor and the byteStride is
    dropped. Views that back images are copied as they are, and views nothing
    references are dropped.
    """
    buffer_views = document.buffer_views
    accessors = document.accessors
    images: list[dict[str, Any]] = document.gltf.get("images", [])

    packed = bytearray()
    new_buffer_views: list[dict[str, Any]] = []

    for accessor_id, accessor in enumerate(accessors):
        if accessor.get("bufferView") is None:
            continue
        layout = accessor_layout(document, accessor_id)
        data = document.buffer_data(layout.buffer_id)
        elements = bytearray()
        for i in range(layout.count):
            offset = layout.element_offset(i)
            elements.extend(data[offset : offset + layout.element_size])

        old_view = buffer_views[accessor["bufferView"]]
        new_view: dict[str, Any] = {
            "buffer": 0,
            "byteOffset": _append_aligned(packed, elements),
            "byteLength": len(elements),
        }
        if "target" in old_view:
            new_view["target"] = old_view["target"]
        new_buffer_views.append(new_view)
        accessor["bufferView"] = len(new_buffer_views) - 1
        accessor["byteOffset"] = 0

    image_view_map: dict[int, int] = {}
    for image in images:
        old_id = image.get("bufferView")
        if old_id is None:
            continue
        if old_id not in image_view_map:
            old_view = buffer_views[old_id]
            data = document.buffer_data(old_view.get("buffer", 0))
            start = int(old_view.get("byteOffset", 0))
            chunk = data[start : start + int(old_view["byteLength"])]
            new_buffer_views.append({"buffer": 0, "byteOffset": _append_aligned(packed, chunk), "byteLength": len(chunk)})
            image_view_map[old_id] = len(new_buffer_views) - 1
        image["bufferView"] = image_view_map[old_id]

    name = None
    if document.gltf.get("buffers"):
        name = document.gltf["buffers"][0].get("name")
    buffer: dict[str, Any] = {"byteLength": len(packed)}
    if name is not None:
        buffer["name"] = name

    log.debug("Packed %d bufferViews into %d (%d bytes)", len(buffer_views), len(new_buffer_views), len(packed))
    document.gltf["bufferViews"] = new_buffer_views
    document.gltf["buffers"] = [buffer]
    document.buffers[:] = [packed]
