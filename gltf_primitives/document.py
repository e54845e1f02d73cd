from __future__ import annotations

import base64
import binascii
import json
import logging
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .constants import CHUNK_TYPE_BIN, CHUNK_TYPE_JSON, GLB_MAGIC, GLB_VERSION_SUPPORTED
from .errors import GlbError, SchemaViolation


log = logging.getLogger(__name__)

DATA_URI_PREFIX = "data:"


@dataclass
class Document:
    """A glTF 2.0 JSON tree plus the bytes of each of its buffers.

    Every id used by this package is an index into one of the top-level glTF
    arrays. ``buffers[i]`` holds the bytes of ``gltf["buffers"][i]``.
    """

    gltf: dict[str, Any]
    buffers: list[bytearray] = field(default_factory=list)

    @classmethod
    def from_gltf(cls, gltf: dict[str, Any], bin_chunk: bytes | None = None, *, base_dir: Path | None = None) -> "Document":
        buffers: list[bytearray] = []
        for buffer_index, buffer in enumerate(gltf.get("buffers", [])):
            uri = buffer.get("uri")
            if uri is None:
                if buffer_index != 0 or bin_chunk is None:
                    raise GlbError(f"Buffer {buffer_index} has no uri and no BIN chunk")
                data = bytearray(bin_chunk)
            elif uri.startswith(DATA_URI_PREFIX):
                _header, _sep, payload = uri.partition(",")
                try:
                    data = bytearray(base64.b64decode(payload, validate=True))
                except (binascii.Error, ValueError) as exc:
                    raise GlbError(f"Buffer {buffer_index} has an invalid data uri: {exc}") from exc
            else:
                if base_dir is None:
                    raise GlbError(f"External buffer uri needs a base directory: {uri}")
                buffer_path = base_dir / uri
                if not buffer_path.is_file():
                    raise GlbError(f"Buffer file not found: {buffer_path}")
                data = bytearray(buffer_path.read_bytes())

            byte_length = buffer.get("byteLength", len(data))
            if byte_length > len(data):
                raise SchemaViolation(f"Buffer {buffer_index} is shorter than its byteLength ({len(data)} < {byte_length})")
            buffers.append(data)
        return cls(gltf=gltf, buffers=buffers)

    @property
    def accessors(self) -> list[dict[str, Any]]:
        return self.gltf.setdefault("accessors", [])

    @property
    def buffer_views(self) -> list[dict[str, Any]]:
        return self.gltf.setdefault("bufferViews", [])

    @property
    def meshes(self) -> list[dict[str, Any]]:
        return self.gltf.setdefault("meshes", [])

    def accessor(self, accessor_id: int) -> dict[str, Any]:
        accessors = self.gltf.get("accessors", [])
        if not isinstance(accessor_id, int) or not (0 <= accessor_id < len(accessors)):
            raise SchemaViolation(f"Accessor index out of range: {accessor_id}")
        return accessors[accessor_id]

    def buffer_view(self, buffer_view_id: int) -> dict[str, Any]:
        buffer_views = self.gltf.get("bufferViews", [])
        if not isinstance(buffer_view_id, int) or not (0 <= buffer_view_id < len(buffer_views)):
            raise SchemaViolation(f"bufferView index out of range: {buffer_view_id}")
        return buffer_views[buffer_view_id]

    def buffer_data(self, buffer_id: int) -> bytearray:
        if not isinstance(buffer_id, int) or not (0 <= buffer_id < len(self.buffers)):
            raise SchemaViolation(f"Buffer index out of range: {buffer_id}")
        return self.buffers[buffer_id]

    def add_buffer(self, data: bytearray, **properties: Any) -> int:
        buffer: dict[str, Any] = {"byteLength": len(data)}
        buffer.update(properties)
        self.gltf.setdefault("buffers", []).append(buffer)
        self.buffers.append(data)
        return len(self.buffers) - 1


def read_glb(glb_path: Path) -> Document:
    data = glb_path.read_bytes()
    if len(data) < 12:
        raise GlbError("Invalid GLB: file too small")

    magic, version, total_length = struct.unpack_from("<4sII", data, 0)
    if magic != GLB_MAGIC:
        raise GlbError("Invalid GLB: bad magic")
    if version != GLB_VERSION_SUPPORTED:
        raise GlbError(f"Unsupported GLB version: {version} (expected {GLB_VERSION_SUPPORTED})")
    if total_length != len(data):
        raise GlbError("Invalid GLB: length mismatch")

    json_chunk: bytes | None = None
    bin_chunk: bytes | None = None

    offset = 12
    while offset < total_length:
        if offset + 8 > total_length:
            raise GlbError("Invalid GLB: truncated chunk header")
        chunk_length, chunk_type = struct.unpack_from("<II", data, offset)
        offset += 8
        if offset + chunk_length > total_length:
            raise GlbError("Invalid GLB: truncated chunk data")
        chunk_data = data[offset : offset + chunk_length]
        offset += chunk_length

        if chunk_type == CHUNK_TYPE_JSON and json_chunk is None:
            json_chunk = chunk_data
        elif chunk_type == CHUNK_TYPE_BIN and bin_chunk is None:
            bin_chunk = chunk_data

    if json_chunk is None:
        raise GlbError("Invalid GLB: missing JSON chunk")

    try:
        gltf = json.loads(json_chunk.decode("utf-8"))
    except Exception as exc:  # noqa: BLE001 - surface parse failure as GlbError
        raise GlbError(f"Invalid GLB JSON chunk: {exc}") from exc

    if not isinstance(gltf, dict):
        raise GlbError("Invalid GLB: JSON root is not an object")

    log.debug("Read %s: %d bytes JSON, %d bytes BIN", glb_path, len(json_chunk), len(bin_chunk or b""))
    return Document.from_gltf(gltf, bin_chunk, base_dir=glb_path.parent)


def write_glb(glb_path: Path, document: Document) -> None:
    # Imported here: buffers.py depends on this module.
    from .buffers import merge_buffers

    if len(document.buffers) > 1:
        merge_buffers(document, "buffer_0")

    bin_chunk = bytearray(document.buffers[0]) if document.buffers else bytearray()
    gltf = document.gltf
    if document.buffers:
        buffer = gltf["buffers"][0]
        buffer.pop("uri", None)
        buffer["byteLength"] = len(bin_chunk)

    json_bytes = json.dumps(gltf, ensure_ascii=True, separators=(",", ":")).encode("utf-8")
    json_padding = (4 - len(json_bytes) % 4) % 4
    if json_padding:
        json_bytes += b" " * json_padding

    bin_padding = (4 - len(bin_chunk) % 4) % 4
    if bin_padding:
        bin_chunk += b"\x00" * bin_padding

    total_length = 12 + 8 + len(json_bytes)
    if bin_chunk:
        total_length += 8 + len(bin_chunk)
    header = struct.pack("<4sII", GLB_MAGIC, GLB_VERSION_SUPPORTED, total_length)
    json_header = struct.pack("<II", len(json_bytes), CHUNK_TYPE_JSON)
    out = header + json_header + json_bytes
    if bin_chunk:
        out += struct.pack("<II", len(bin_chunk), CHUNK_TYPE_BIN) + bytes(bin_chunk)

    glb_path.write_bytes(out)
    log.debug("Wrote %s (%d bytes)", glb_path, total_length)
