from __future__ import annotations


GLB_MAGIC = b"glTF"
GLB_VERSION_SUPPORTED = 2

CHUNK_TYPE_JSON = 0x4E4F534A  # b"JSON"
CHUNK_TYPE_BIN = 0x004E4942  # b"BIN\0"

POINTS_MODE = 0
LINES_MODE = 1
LINE_LOOP_MODE = 2
LINE_STRIP_MODE = 3
TRIANGLES_MODE = 4
TRIANGLE_STRIP_MODE = 5
TRIANGLE_FAN_MODE = 6

TARGET_ARRAY_BUFFER = 34962
TARGET_ELEMENT_ARRAY_BUFFER = 34963

COMPONENT_TYPE_INT8 = 5120
COMPONENT_TYPE_UINT8 = 5121
COMPONENT_TYPE_INT16 = 5122
COMPONENT_TYPE_UINT16 = 5123
COMPONENT_TYPE_UINT32 = 5125
COMPONENT_TYPE_FLOAT32 = 5126

COMPONENT_TYPE_BYTE_SIZE: dict[int, int] = {
    COMPONENT_TYPE_INT8: 1,
    COMPONENT_TYPE_UINT8: 1,
    COMPONENT_TYPE_INT16: 2,
    COMPONENT_TYPE_UINT16: 2,
    COMPONENT_TYPE_UINT32: 4,
    COMPONENT_TYPE_FLOAT32: 4,
}

COMPONENT_TYPE_FORMAT: dict[int, str] = {
    COMPONENT_TYPE_INT8: "b",
    COMPONENT_TYPE_UINT8: "B",
    COMPONENT_TYPE_INT16: "h",
    COMPONENT_TYPE_UINT16: "H",
    COMPONENT_TYPE_UINT32: "I",
    COMPONENT_TYPE_FLOAT32: "f",
}

TYPE_COMPONENT_COUNT: dict[str, int] = {
    "SCALAR": 1,
    "VEC2": 2,
    "VEC3": 3,
    "VEC4": 4,
    "MAT2": 4,
    "MAT3": 9,
    "MAT4": 16,
}

# glTF requires bufferView offsets of vertex data to be aligned to the component size
BUFFER_VIEW_ALIGNMENT = 4
