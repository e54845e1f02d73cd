from __future__ import annotations


class GltfError(RuntimeError):
    pass


class SchemaViolation(GltfError):
    """Malformed accessor/bufferView layout or a value count that does not fit it."""


class UnsupportedSemantic(SchemaViolation):
    pass


class IntegrityViolation(GltfError):
    """Index data that points at elements the attribute accessors do not have."""


class UnsupportedOperation(GltfError):
    pass


class GlbError(GltfError):
    pass


class ConfigError(GltfError):
    pass
