"""Accessor I/O, primitive analysis and in-place geometry transforms for glTF 2.0 documents."""

from __future__ import annotations

from .accessor_reader import AccessorReader
from .accessors import (
    create_accessor,
    find_accessor_min_max,
    get_attribute_semantics,
    read_accessor,
    read_scalars,
    write_accessor,
)
from .buffers import merge_buffers, uninterleave_and_pack_buffers
from .document import Document, read_glb, write_glb
from .errors import (
    ConfigError,
    GlbError,
    GltfError,
    IntegrityViolation,
    SchemaViolation,
    UnsupportedOperation,
    UnsupportedSemantic,
)
from .geometry_import import Geometry, geometry_to_primitive
from .primitive_analysis import (
    get_all_primitives,
    get_primitive_conflicts,
    get_primitives_by_material_mode,
    primitive_equals,
    primitives_have_overlapping_index_accessors,
    primitives_share_attribute_accessor,
)
from .transform import transform_primitives

__version__ = "0.1.0"

__all__ = [
    "AccessorReader",
    "ConfigError",
    "Document",
    "Geometry",
    "GlbError",
    "GltfError",
    "IntegrityViolation",
    "SchemaViolation",
    "UnsupportedOperation",
    "UnsupportedSemantic",
    "create_accessor",
    "find_accessor_min_max",
    "geometry_to_primitive",
    "get_all_primitives",
    "get_attribute_semantics",
    "get_primitive_conflicts",
    "get_primitives_by_material_mode",
    "merge_buffers",
    "primitive_equals",
    "primitives_have_overlapping_index_accessors",
    "primitives_share_attribute_accessor",
    "read_accessor",
    "read_glb",
    "read_scalars",
    "transform_primitives",
    "uninterleave_and_pack_buffers",
    "write_accessor",
    "write_glb",
]
